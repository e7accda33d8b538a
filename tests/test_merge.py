"""Tests for store merge rules."""

from __future__ import annotations

from retail_core.config import StoreTopology
from retail_core.sales import aggregate, apply_multi_merge, merge_and_remove_store


def test_merge_and_remove_store_retags_rows() -> None:
    records = [
        {"StoreCode": 35, "Amount": 1},
        {"StoreCode": 8, "Amount": 2},
        {"StoreCode": 12, "Amount": 3},
    ]

    result = merge_and_remove_store(records, merge_into=8, merge_from=35)

    assert [r["StoreCode"] for r in result] == [8, 8, 12]
    assert records[0]["StoreCode"] == 35, "input must not be mutated"


class TestApplyMultiMerge:
    """Ordered rule application and placeholder rows."""

    def test_source_code_never_survives(self, sample_records: list[dict]) -> None:
        rules = [(35, 8), (12, 40)]

        result = apply_multi_merge(sample_records, rules)

        codes = {r["StoreCode"] for r in result}
        assert 35 not in codes
        assert 12 not in codes

    def test_placeholder_added_when_target_missing(self) -> None:
        records = [{"StoreCode": 35, "BillSeries": "SC", "Amount": 10}]

        result = apply_multi_merge(records, [(35, 8)])

        assert len(result) == 2
        assert all(r["StoreCode"] == 8 for r in result)
        assert {"StoreCode": 8, "BillSeries": "SC", "Amount": 0} in result

    def test_no_placeholder_when_target_present(self) -> None:
        records = [{"StoreCode": 35, "Amount": 10}, {"StoreCode": 8, "Amount": 5}]

        result = apply_multi_merge(records, [(35, 8)])

        assert len(result) == 2

    def test_rules_apply_in_order(self) -> None:
        records = [{"StoreCode": 1, "Amount": 1}, {"StoreCode": 2, "Amount": 1}]

        result = apply_multi_merge(records, [(1, 2), (2, 3)])

        assert {r["StoreCode"] for r in result} == {3}

    def test_rules_default_to_topology(self) -> None:
        topology = StoreTopology(merge_rules=[(62, 30)])
        records = [{"StoreCode": 62, "Amount": 1}, {"StoreCode": 35, "Amount": 1}]

        result = apply_multi_merge(records, topology=topology)

        assert sorted(r["StoreCode"] for r in result) == [30, 30, 35]

    def test_default_rule_merges_35_into_8(self) -> None:
        result = apply_multi_merge([{"StoreCode": 35, "Amount": 1}])

        assert {r["StoreCode"] for r in result} == {8}

    def test_empty_rules_return_copy(self) -> None:
        records = [{"StoreCode": 1}]

        result = apply_multi_merge(records, [])

        assert result == records
        assert result is not records


class TestMergeIsAdditive:
    """The target store's totals after merging equal the sum of both stores before."""

    def test_additive_for_every_metric(
        self, sample_records: list[dict], no_merge_topology: StoreTopology
    ) -> None:
        merged_topology = StoreTopology(merge_rules=[(35, 8)])

        for metric in ("revenue", "quantity", "bills"):
            before = aggregate(sample_records, metric, topology=no_merge_topology)
            after = aggregate(sample_records, metric, topology=merged_topology)

            assert after[8] == before[8] + before[35], f"{metric} is not additive"
            assert 35 not in after
            assert after[12] == before[12]
