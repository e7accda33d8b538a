"""Per-store net totals from sales records.

Every metric is the same fold over normalized and merged records:

- a *positive* bucket summing rows whose bill series is SC, B2B, WB or IS
- a *returns* bucket summing ``abs(value)`` of LSR rows

Revenue and amount report ``positive - returns``. Quantity and bill cuts
report the positive bucket alone; the returns bucket is computed but not
subtracted. Which behaviour applies is the ``subtract_returns`` flag of the
metric, not a separate code path.

Example:
    >>> records = [
    ...     {"StoreCode": 35, "BillSeries": "SC", "Amount": 100},
    ...     {"StoreCode": 8, "BillSeries": "SC", "Amount": 50},
    ... ]
    >>> compute_net_mtd_revenue(records)
    {8: 150.0}
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import overload

import pandas as pd

from retail_core.config import StoreTopology
from retail_core.sales.merge import apply_multi_merge
from retail_core.sales.normalize import normalize_sales
from retail_core.sales.records import (
    AMOUNT,
    BILL_SERIES,
    POSITIVE_SERIES,
    QUANTITY,
    RETURN_SERIES,
    STORE_CODE,
    TOTAL_BILLS,
    SalesRecord,
    canonical_series,
)
from retail_core.utils import safe_number

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Metric:
    """A per-store reduction over one record field.

    Attributes:
        name: Short identifier used by the CLI and ``aggregate_frame`` columns.
        field: Record key that is summed.
        subtract_returns: Whether the LSR bucket is subtracted from the result.
    """

    name: str
    field: str
    subtract_returns: bool


NET_AMOUNT = Metric("amount", AMOUNT, subtract_returns=True)
NET_REVENUE = Metric("revenue", AMOUNT, subtract_returns=True)
# TODO: confirm with the reporting owners whether LSR rows should reduce
# quantity and bill counts; both metrics currently ignore the returns bucket.
NET_QUANTITY = Metric("quantity", QUANTITY, subtract_returns=False)
NET_BILL_CUTS = Metric("bills", TOTAL_BILLS, subtract_returns=False)

METRICS: dict[str, Metric] = {
    m.name: m for m in (NET_AMOUNT, NET_REVENUE, NET_QUANTITY, NET_BILL_CUTS)
}

StoreTotals = dict[int, float]


def get_metric(metric: Metric | str) -> Metric:
    """Resolve a metric name to its definition.

    Raises:
        ValueError: If the name is not one of amount, revenue, quantity, bills.
    """
    if isinstance(metric, Metric):
        return metric
    if metric not in METRICS:
        raise ValueError(f"Invalid metric '{metric}'. Must be one of {sorted(METRICS)}.")
    return METRICS[metric]


def prepare_records(
    records: Iterable[SalesRecord],
    topology: StoreTopology | None = None,
) -> list[SalesRecord]:
    """Run normalization then merging with one topology."""
    if topology is None:
        topology = StoreTopology.default()
    return apply_multi_merge(normalize_sales(records, topology), topology=topology)


def _column(df: pd.DataFrame, name: str) -> pd.Series:
    if name in df.columns:
        return df[name]
    return pd.Series([None] * len(df), index=df.index, dtype=object)


def _fold(df: pd.DataFrame, metric: Metric) -> pd.Series:
    """Sum one metric per store. Index is the integer store code."""
    series = _column(df, BILL_SERIES).map(canonical_series)
    values = _column(df, metric.field).map(safe_number).astype(float)

    buckets = pd.DataFrame(
        {
            "store": pd.to_numeric(_column(df, STORE_CODE), errors="coerce"),
            "positive": values.where(series.isin(POSITIVE_SERIES), 0.0),
            "returns": values.abs().where(series == RETURN_SERIES, 0.0),
        }
    )

    missing = buckets["store"].isna()
    if missing.any():
        logger.debug("Skipping %d records without a numeric StoreCode", int(missing.sum()))
        buckets = buckets[~missing]

    totals = buckets.groupby(buckets["store"].astype(int), sort=False)[["positive", "returns"]].sum()

    if metric.subtract_returns:
        net = totals["positive"] - totals["returns"]
    else:
        net = totals["positive"]
    net.index.name = STORE_CODE
    return net.rename(metric.name)


@overload
def aggregate(
    records: Iterable[SalesRecord],
    metric: Metric | str,
    store_code: None = None,
    topology: StoreTopology | None = None,
) -> StoreTotals: ...


@overload
def aggregate(
    records: Iterable[SalesRecord],
    metric: Metric | str,
    store_code: int,
    topology: StoreTopology | None = None,
) -> float: ...


def aggregate(
    records: Iterable[SalesRecord],
    metric: Metric | str,
    store_code: int | None = None,
    topology: StoreTopology | None = None,
) -> float | StoreTotals:
    """Fold sales records into per-store net totals for one metric.

    Records are always normalized and merged first. Non-numeric values count
    as 0, so the result never contains NaN. No state is kept between calls.

    Args:
        records: Raw sales records.
        metric: A ``Metric`` or one of "amount", "revenue", "quantity", "bills".
        store_code: If given, return only that store's total (0 if absent).
        topology: Lookup tables and merge rules. Defaults to
            ``StoreTopology.default()``.

    Returns:
        ``{store_code: total}`` or a single float when ``store_code`` is given.
        Empty input gives ``{}`` (or ``0.0``).

    Raises:
        ValueError: If ``metric`` is an unknown name.

    """
    metric = get_metric(metric)
    records = list(records)

    if not records:
        return 0.0 if store_code is not None else {}

    df = pd.DataFrame.from_records(prepare_records(records, topology))
    totals: StoreTotals = {int(code): float(value) for code, value in _fold(df, metric).items()}

    logger.debug("Aggregated %s over %d records into %d stores", metric.name, len(records), len(totals))

    if store_code is not None:
        return totals.get(store_code, 0.0)
    return totals


def aggregate_frame(
    records: Iterable[SalesRecord],
    topology: StoreTopology | None = None,
) -> pd.DataFrame:
    """Compute every built-in metric at once.

    Returns:
        DataFrame indexed by ``StoreCode`` with one column per metric
        (amount, revenue, quantity, bills). Empty input gives an empty frame
        with those columns.

    """
    records = list(records)
    if not records:
        return pd.DataFrame(columns=list(METRICS), index=pd.Index([], name=STORE_CODE), dtype=float)

    df = pd.DataFrame.from_records(prepare_records(records, topology))
    return pd.concat([_fold(df, metric) for metric in METRICS.values()], axis=1).fillna(0.0)


def compute_net_amount(
    records: Iterable[SalesRecord],
    store_code: int | None = None,
    topology: StoreTopology | None = None,
) -> float | StoreTotals:
    """Net amount (positive minus returns) per store."""
    return aggregate(records, NET_AMOUNT, store_code, topology)


def compute_net_mtd_revenue(
    records: Iterable[SalesRecord],
    store_code: int | None = None,
    topology: StoreTopology | None = None,
) -> float | StoreTotals:
    """Net revenue (positive minus returns) per store."""
    return aggregate(records, NET_REVENUE, store_code, topology)


def compute_net_mtd_qty(
    records: Iterable[SalesRecord],
    store_code: int | None = None,
    topology: StoreTopology | None = None,
) -> float | StoreTotals:
    """Quantity per store from positive series only; returns are not subtracted."""
    return aggregate(records, NET_QUANTITY, store_code, topology)


def compute_net_mtd_bill_cuts(
    records: Iterable[SalesRecord],
    store_code: int | None = None,
    topology: StoreTopology | None = None,
) -> float | StoreTotals:
    """Bill count per store from positive series only; returns are not subtracted."""
    return aggregate(records, NET_BILL_CUTS, store_code, topology)
