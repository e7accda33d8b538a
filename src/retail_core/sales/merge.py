"""Store merging.

A merge rule ``(from, into)`` folds every row of one store into another,
used when a store changed code or two entities are reported together.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from retail_core.config import MergeRule, StoreTopology
from retail_core.sales.records import AMOUNT, BILL_SERIES, DEFAULT_SERIES, STORE_CODE, SalesRecord

logger = logging.getLogger(__name__)


def merge_and_remove_store(
    records: Iterable[SalesRecord],
    merge_into: int,
    merge_from: int,
) -> list[SalesRecord]:
    """Re-tag ``merge_from`` rows as ``merge_into`` and drop the original code.

    Args:
        records: Sales records.
        merge_into: Store code that receives the rows.
        merge_from: Store code that disappears.

    Returns:
        New list with no record left under ``merge_from``.

    """
    retagged = [
        {**item, STORE_CODE: merge_into} if item.get(STORE_CODE) == merge_from else item
        for item in records
    ]
    return [item for item in retagged if item.get(STORE_CODE) != merge_from]


def apply_multi_merge(
    records: Iterable[SalesRecord],
    merge_rules: Sequence[MergeRule] | None = None,
    topology: StoreTopology | None = None,
) -> list[SalesRecord]:
    """Apply merge rules in order.

    Before each rule, if no record carries the ``into`` code a zero-amount
    placeholder (``BillSeries="SC"``, ``Amount=0``) is appended, so the target
    store always exists downstream.

    Args:
        records: Sales records, usually already normalized.
        merge_rules: ``[(from, into), ...]``. Defaults to the topology's rules.
        topology: Used only when ``merge_rules`` is None. Defaults to
            ``StoreTopology.default()``.

    Returns:
        Merged list of records.

    Examples:
        >>> apply_multi_merge([{"StoreCode": 35, "BillSeries": "SC", "Amount": 10}], [(35, 8)])
        [{'StoreCode': 8, 'BillSeries': 'SC', 'Amount': 10}, {'StoreCode': 8, 'BillSeries': 'SC', 'Amount': 0}]

    """
    if merge_rules is None:
        merge_rules = (topology or StoreTopology.default()).merge_rules

    merged = list(records)
    for merge_from, merge_into in merge_rules:
        if not any(item.get(STORE_CODE) == merge_into for item in merged):
            merged.append({STORE_CODE: merge_into, BILL_SERIES: DEFAULT_SERIES, AMOUNT: 0})
            logger.debug("Added placeholder row for merge target %s", merge_into)
        merged = merge_and_remove_store(merged, merge_into, merge_from)

    return merged
