"""Tests for the dashboard KPI block and store performance table."""

from __future__ import annotations

import pytest

from retail_core.config import StoreTopology
from retail_core.dashboard import (
    DashboardSnapshot,
    build_store_map,
    compute_dashboard_metrics,
    default_store_selection,
    filter_by_store,
    store_performance_table,
)


@pytest.fixture
def snapshot() -> DashboardSnapshot:
    """Two stores across all four periods, with targets."""
    return DashboardSnapshot(
        yesterday=[
            {"StoreCode": 12, "BillSeries": "SC", "Amount": 200, "Quantity": 8, "TotalBills": 2},
        ],
        mtd=[
            {"StoreCode": 8, "StoreName": " MAGSON BOPAL ", "BillSeries": "SC", "Amount": 1000, "Quantity": 50, "TotalBills": 10},
            {"StoreCode": 8, "BillSeries": "LSR", "Amount": -100, "Quantity": -5, "TotalBills": -1},
            {"StoreCode": 12, "StoreName": "MAGSON THALTEJ", "BillSeries": "SC", "Amount": 500, "Quantity": 20, "TotalBills": 5},
        ],
        last_month=[
            {"StoreCode": 8, "BillSeries": "SC", "Amount": 700, "Quantity": 30, "TotalBills": 6},
        ],
        last_year=[
            {"StoreCode": 8, "BillSeries": "SC", "Amount": 600, "Quantity": 30, "TotalBills": 8},
        ],
        targets=[
            {"StoreCode": 8, "Target": 1000},
            {"StoreCode": 12, "Target": "1,000"},
        ],
        start_date="2025-01-01",
        end_date="2025-01-10",
    )


class TestDashboardMetrics:
    def test_all_stores(self, snapshot: DashboardSnapshot) -> None:
        metrics = compute_dashboard_metrics(snapshot)

        assert metrics.total_net_amount == 200
        assert metrics.yesterday_qty == 8
        assert metrics.yesterday_bills == 2
        assert metrics.yesterday_ipt == 4

        assert metrics.total_sales == 1400
        assert metrics.mtd_qty == 70
        assert metrics.mtd_bills == 15
        assert metrics.mtd_ipt == pytest.approx(70 / 15)

        assert metrics.lm_total == 700
        assert metrics.lm_ipt == 5
        assert metrics.ly_total == 600
        assert metrics.ly_ipt == pytest.approx(3.75)

        assert metrics.total_target == 2000
        assert metrics.percent_achieved == pytest.approx(70.0)
        assert metrics.mtd_growth == pytest.approx(100.0)

    def test_selected_store(self, snapshot: DashboardSnapshot) -> None:
        metrics = compute_dashboard_metrics(snapshot, selected_stores=[12])

        assert metrics.total_sales == 500
        assert metrics.total_target == 1000
        assert metrics.percent_achieved == pytest.approx(50.0)
        assert metrics.lm_total == 0
        assert metrics.mtd_growth == 0

    def test_empty_snapshot(self) -> None:
        metrics = compute_dashboard_metrics(DashboardSnapshot())

        assert metrics.total_sales == 0
        assert metrics.percent_achieved == 0
        assert metrics.mtd_growth == 0
        assert metrics.mtd_ipt == 0

    def test_selection_applies_after_merge_and_aliases(self) -> None:
        """Rows under a merged-away code or an alias name count for their store."""
        snapshot = DashboardSnapshot(
            mtd=[
                {"StoreCode": 35, "BillSeries": "SC", "Amount": 100},
                {"StoreCode": 8, "BillSeries": "SC", "Amount": 50},
                {"StoreCode": 99, "StoreName": "NASTA BAZAR SHELA", "BillSeries": "SC", "Amount": 70},
            ]
        )

        assert compute_dashboard_metrics(snapshot, selected_stores=[8]).total_sales == 150
        assert compute_dashboard_metrics(snapshot, selected_stores=[44]).total_sales == 70
        assert compute_dashboard_metrics(snapshot, selected_stores=[35]).total_sales == 0


def test_filter_by_store() -> None:
    records = [{"StoreCode": 8}, {"StoreCode": "12"}, {"StoreCode": 30}, {}]

    assert filter_by_store(records, []) == records
    assert filter_by_store(records, [8, 12]) == [{"StoreCode": 8}, {"StoreCode": "12"}]


def test_build_store_map() -> None:
    sales = [
        {"StoreCode": 8, "StoreName": " MAGSON BOPAL "},
        {"StoreCode": 0, "StoreName": "HEAD OFFICE"},
        {"StoreCode": "abc", "StoreName": "BROKEN"},
        {"StoreCode": 12},
    ]
    targets = [{"StoreCode": 8, "StoreName": "MAGSON SOUTH BOPAL"}, {"StoreCode": 30, "StoreName": "DC"}]

    assert build_store_map(sales, targets) == {8: "MAGSON SOUTH BOPAL", 30: "DC"}


def test_default_store_selection() -> None:
    store_map = {62: "x", 8: "a", 30: "b", 12: "c"}

    assert default_store_selection(store_map) == [8, 12]
    assert default_store_selection(store_map, StoreTopology()) == [8, 12, 30, 62]


class TestStorePerformanceTable:
    def test_rows(self, snapshot: DashboardSnapshot) -> None:
        store_map = build_store_map(snapshot.mtd)

        table = store_performance_table(snapshot, store_map)

        row = table.loc[8]
        assert row["store_name"] == "MAGSON BOPAL"
        assert row["target"] == 1000
        # 1000 / 31 days * 10 days elapsed, rounded half up
        assert row["mtd_target"] == 323
        assert row["achieved"] == 900
        assert row["achieved_pct"] == pytest.approx(900 / 323 * 100)
        assert row["gap"] == -100
        assert row["avg_daily_sale"] == pytest.approx(90.0)
        assert row["lm_mtd"] == 700
        assert row["golm_pct"] == pytest.approx(200 / 700 * 100)
        assert row["ly_mtd"] == 600
        assert row["goly_pct"] == pytest.approx(50.0)
        assert row["ly_bills"] == 8
        assert row["mtd_bills"] == 10
        assert row["bill_cut_goly_pct"] == pytest.approx(25.0)
        assert row["asp"] == pytest.approx(18.0)
        assert row["abv"] == pytest.approx(90.0)
        assert row["ipt"] == pytest.approx(5.0)

        other = table.loc[12]
        assert other["gap"] == -500
        assert other["achieved_pct"] == pytest.approx(500 / 323 * 100)
        assert other["goly_pct"] == 0
        assert other["golm_pct"] == 0
        assert other["bill_cut_goly_pct"] == 0

    def test_sorted_by_achieved_pct(self, snapshot: DashboardSnapshot) -> None:
        store_map = {12: "MAGSON THALTEJ", 99: "NEW STORE", 8: "MAGSON BOPAL"}

        descending = store_performance_table(snapshot, store_map)
        ascending = store_performance_table(snapshot, store_map, ascending=True)

        assert list(descending.index) == [8, 12, 99]
        assert list(ascending.index) == [99, 12, 8]

    def test_store_without_sales_or_target(self, snapshot: DashboardSnapshot) -> None:
        table = store_performance_table(snapshot, {99: "NEW STORE"})

        row = table.loc[99]
        assert row["achieved"] == 0
        assert row["target"] == 0
        assert row["mtd_target"] == 0
        assert row["achieved_pct"] == 0
        assert row["gap"] == 0
        assert row["asp"] == 0
        assert row["abv"] == 0
        assert row["ipt"] == 0

    def test_without_window_dates(self, snapshot: DashboardSnapshot) -> None:
        snapshot.start_date = None
        snapshot.end_date = None

        table = store_performance_table(snapshot, {8: "MAGSON BOPAL"})

        assert table.loc[8, "mtd_target"] == 0
        assert table.loc[8, "achieved_pct"] == 0
        assert table.loc[8, "avg_daily_sale"] == 0
        assert table.loc[8, "gap"] == -100
