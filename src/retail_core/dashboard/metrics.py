"""Dashboard KPIs built on the sales aggregators.

The sales dashboard compares four slices of the same feed:

- **yesterday**: the previous day's sales
- **mtd**: month to date (first of month through yesterday)
- **last_month**: the same window one month earlier
- **last_year**: the same window one year earlier

Headline numbers are sums over the per-store maps returned by
``retail_core.sales.aggregate``; the store table keeps them per store.
"""

from __future__ import annotations

import calendar
import logging
import math
from collections.abc import Collection, Iterable
from dataclasses import dataclass, field
from typing import Any

import pandas as pd

from retail_core.config import StoreTopology
from retail_core.sales.aggregate import (
    NET_AMOUNT,
    NET_BILL_CUTS,
    NET_QUANTITY,
    NET_REVENUE,
    Metric,
    aggregate,
    aggregate_frame,
    prepare_records,
)
from retail_core.sales.records import STORE_CODE, STORE_NAME, SalesRecord
from retail_core.utils import parse_date, safe_number

logger = logging.getLogger(__name__)


@dataclass
class DashboardSnapshot:
    """The sales slices and targets behind one dashboard render.

    Attributes:
        yesterday: Previous-day sales records.
        mtd: Month-to-date sales records.
        last_month: Last-month comparison records.
        last_year: Last-year comparison records.
        targets: Store targets, ``{"StoreCode": ..., "Target": ...}``.
        start_date: First day of the MTD window (YYYY-MM-DD), if known.
        end_date: Last day of the MTD window (YYYY-MM-DD), if known.
    """

    yesterday: list[SalesRecord] = field(default_factory=list)
    mtd: list[SalesRecord] = field(default_factory=list)
    last_month: list[SalesRecord] = field(default_factory=list)
    last_year: list[SalesRecord] = field(default_factory=list)
    targets: list[dict[str, Any]] = field(default_factory=list)
    start_date: str | None = None
    end_date: str | None = None

    def filtered(
        self,
        selected_stores: Collection[int],
        topology: StoreTopology | None = None,
    ) -> DashboardSnapshot:
        """Return a copy restricted to the selected stores.

        Sales slices are normalized and merged before filtering, so rows that
        arrive under an alias name or a merged-away code count toward the
        store they belong to.
        """

        def select(records: list[SalesRecord]) -> list[SalesRecord]:
            return filter_by_store(prepare_records(records, topology), selected_stores)

        return DashboardSnapshot(
            yesterday=select(self.yesterday),
            mtd=select(self.mtd),
            last_month=select(self.last_month),
            last_year=select(self.last_year),
            targets=filter_by_store(self.targets, selected_stores),
            start_date=self.start_date,
            end_date=self.end_date,
        )


@dataclass
class DashboardMetrics:
    """Headline KPIs of the sales dashboard.

    IPT (items per ticket) is quantity divided by bill count, 0 without bills.
    ``percent_achieved`` is MTD revenue over target in percent, 0 without a
    target. ``mtd_growth`` is the change against last month in percent, 0
    unless last month's revenue is positive.
    """

    total_net_amount: float
    yesterday_qty: float
    yesterday_bills: float
    yesterday_ipt: float
    total_sales: float
    mtd_qty: float
    mtd_bills: float
    mtd_ipt: float
    lm_total: float
    lm_qty: float
    lm_bills: float
    lm_ipt: float
    ly_total: float
    ly_qty: float
    ly_bills: float
    ly_ipt: float
    total_target: float
    percent_achieved: float
    mtd_growth: float


def _store_code(record: dict[str, Any]) -> int | None:
    code = safe_number(record.get(STORE_CODE))
    return int(code) if code else None


def filter_by_store(
    records: Iterable[dict[str, Any]],
    selected_stores: Collection[int],
) -> list[dict[str, Any]]:
    """Keep records of the selected stores. An empty selection keeps everything."""
    records = list(records)
    if not selected_stores:
        return records
    selected = {int(code) for code in selected_stores}
    return [r for r in records if _store_code(r) in selected]


def build_store_map(*sources: Iterable[dict[str, Any]]) -> dict[int, str]:
    """Map store code -> trimmed store name from any records carrying both.

    Rows with a zero or non-numeric code, or without a name, are skipped.
    Later rows win.
    """
    store_map: dict[int, str] = {}
    for source in sources:
        for record in source:
            code = _store_code(record)
            name = record.get(STORE_NAME)
            if code is not None and name:
                store_map[code] = str(name).strip()
    return store_map


def default_store_selection(
    store_map: dict[int, str],
    topology: StoreTopology | None = None,
) -> list[int]:
    """All known stores except the topology's excluded codes, sorted."""
    if topology is None:
        topology = StoreTopology.default()
    return sorted(code for code in store_map if code not in topology.excluded_store_codes)


def _total(records: list[SalesRecord], metric: Metric, topology: StoreTopology | None) -> float:
    return float(sum(aggregate(records, metric, topology=topology).values()))


def _ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator else 0.0


def compute_dashboard_metrics(
    snapshot: DashboardSnapshot,
    selected_stores: Collection[int] = (),
    topology: StoreTopology | None = None,
) -> DashboardMetrics:
    """Compute the headline KPI block for the selected stores.

    Args:
        snapshot: Sales slices and targets.
        selected_stores: Store codes to include. Empty means all stores.
        topology: Passed through to the aggregators.

    Returns:
        DashboardMetrics instance.

    """
    snap = snapshot.filtered(selected_stores, topology)

    total_net_amount = _total(snap.yesterday, NET_AMOUNT, topology)
    yesterday_qty = _total(snap.yesterday, NET_QUANTITY, topology)
    yesterday_bills = _total(snap.yesterday, NET_BILL_CUTS, topology)

    total_sales = _total(snap.mtd, NET_REVENUE, topology)
    mtd_qty = _total(snap.mtd, NET_QUANTITY, topology)
    mtd_bills = _total(snap.mtd, NET_BILL_CUTS, topology)

    lm_total = _total(snap.last_month, NET_REVENUE, topology)
    lm_qty = _total(snap.last_month, NET_QUANTITY, topology)
    lm_bills = _total(snap.last_month, NET_BILL_CUTS, topology)

    ly_total = _total(snap.last_year, NET_REVENUE, topology)
    ly_qty = _total(snap.last_year, NET_QUANTITY, topology)
    ly_bills = _total(snap.last_year, NET_BILL_CUTS, topology)

    total_target = float(sum(safe_number(t.get("Target")) for t in snap.targets))

    metrics = DashboardMetrics(
        total_net_amount=total_net_amount,
        yesterday_qty=yesterday_qty,
        yesterday_bills=yesterday_bills,
        yesterday_ipt=_ratio(yesterday_qty, yesterday_bills),
        total_sales=total_sales,
        mtd_qty=mtd_qty,
        mtd_bills=mtd_bills,
        mtd_ipt=_ratio(mtd_qty, mtd_bills),
        lm_total=lm_total,
        lm_qty=lm_qty,
        lm_bills=lm_bills,
        lm_ipt=_ratio(lm_qty, lm_bills),
        ly_total=ly_total,
        ly_qty=ly_qty,
        ly_bills=ly_bills,
        ly_ipt=_ratio(ly_qty, ly_bills),
        total_target=total_target,
        percent_achieved=_ratio(total_sales, total_target) * 100,
        mtd_growth=(total_sales - lm_total) / lm_total * 100 if lm_total > 0 else 0.0,
    )
    logger.info(
        "Dashboard metrics: MTD revenue %.2f, target %.2f, growth %.1f%%",
        metrics.total_sales,
        metrics.total_target,
        metrics.mtd_growth,
    )
    return metrics


def _targets_by_store(targets: list[dict[str, Any]]) -> pd.Series:
    rows = [(_store_code(t), safe_number(t.get("Target"))) for t in targets]
    frame = pd.DataFrame([r for r in rows if r[0] is not None], columns=[STORE_CODE, "target"])
    return frame.groupby(STORE_CODE)["target"].sum()


def _pct_change(current: pd.Series, previous: pd.Series) -> pd.Series:
    return ((current - previous) / previous.where(previous != 0)).fillna(0.0) * 100


def _per_unit(numerator: pd.Series, denominator: pd.Series) -> pd.Series:
    return (numerator / denominator.where(denominator != 0)).fillna(0.0)


def _mtd_days(start_date: str | None, end_date: str | None) -> tuple[int, int]:
    """(days elapsed in the window, days in the window's month)."""
    if not (start_date and end_date):
        return 0, 0
    start, end = parse_date(start_date), parse_date(end_date)
    return (end - start).days + 1, calendar.monthrange(end.year, end.month)[1]


def store_performance_table(
    snapshot: DashboardSnapshot,
    store_map: dict[int, str],
    topology: StoreTopology | None = None,
    ascending: bool = False,
) -> pd.DataFrame:
    """Per-store performance against target and comparison periods.

    The monthly target is prorated to the MTD window:
    ``mtd_target = round(target / days_in_month * days_elapsed)``, where
    ``days_elapsed`` is the length of the snapshot window and
    ``days_in_month`` the length of the month its end date falls in.
    ``achieved_pct`` is measured against ``mtd_target``; ``gap`` is
    ``achieved - target`` (negative while behind the monthly target).

    Args:
        snapshot: Sales slices and targets.
        store_map: Stores to list, ``{code: name}``.
        topology: Passed through to the aggregators.
        ascending: Sort by ``achieved_pct`` ascending instead of descending.

    Returns:
        DataFrame indexed by ``StoreCode`` with columns ``store_name``,
        ``target``, ``mtd_target``, ``achieved``, ``achieved_pct``, ``gap``,
        ``avg_daily_sale``, ``ly_mtd``, ``lm_mtd``, ``goly_pct``,
        ``golm_pct``, ``ly_bills``, ``mtd_bills``, ``bill_cut_goly_pct``,
        ``asp``, ``abv`` and ``ipt``.

    """
    index = pd.Index(list(store_map), name=STORE_CODE)
    mtd = aggregate_frame(snapshot.mtd, topology).reindex(index, fill_value=0.0)
    lm = aggregate_frame(snapshot.last_month, topology).reindex(index, fill_value=0.0)
    ly = aggregate_frame(snapshot.last_year, topology).reindex(index, fill_value=0.0)
    target = _targets_by_store(snapshot.targets).reindex(index, fill_value=0.0).astype(float)

    days_elapsed, days_in_month = _mtd_days(snapshot.start_date, snapshot.end_date)
    if days_in_month:
        # Half-up, like the dashboard's Math.round.
        mtd_target = (target / days_in_month * days_elapsed).map(lambda v: float(math.floor(v + 0.5)))
    else:
        mtd_target = pd.Series(0.0, index=index)

    table = pd.DataFrame(index=index)
    table["store_name"] = [store_map[code] for code in index]
    table["target"] = target
    table["mtd_target"] = mtd_target
    table["achieved"] = mtd["revenue"]
    table["achieved_pct"] = _per_unit(table["achieved"], mtd_target) * 100
    table["gap"] = table["achieved"] - target
    table["avg_daily_sale"] = table["achieved"] / days_elapsed if days_elapsed > 0 else 0.0
    table["ly_mtd"] = ly["revenue"]
    table["lm_mtd"] = lm["revenue"]
    table["goly_pct"] = _pct_change(table["achieved"], table["ly_mtd"])
    table["golm_pct"] = _pct_change(table["achieved"], table["lm_mtd"])
    table["ly_bills"] = ly["bills"]
    table["mtd_bills"] = mtd["bills"]
    table["bill_cut_goly_pct"] = _pct_change(table["mtd_bills"], table["ly_bills"])
    table["asp"] = _per_unit(table["achieved"], mtd["quantity"])
    table["abv"] = _per_unit(table["achieved"], mtd["bills"])
    table["ipt"] = _per_unit(mtd["quantity"], mtd["bills"])

    logger.debug("Store performance table for %d stores (%d of %d days)", len(table), days_elapsed, days_in_month)
    return table.sort_values("achieved_pct", ascending=ascending, kind="stable")
