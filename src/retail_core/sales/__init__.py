"""Sales domain module.

This module turns raw per-transaction sales rows into per-store totals:

- **normalize**: rewrite store identities from alternate names
- **merge**: fold one store's rows into another per merge rules
- **aggregate**: per-store net revenue, quantity and bill counts
- **monthly**: month-on-month totals for trend tables

Example:
    >>> from retail_core.sales import compute_net_mtd_revenue
    >>> compute_net_mtd_revenue([{"StoreCode": 8, "BillSeries": "SC", "Amount": "1,000"}])
    {8: 1000.0}
"""

from retail_core.sales.aggregate import (
    METRICS,
    NET_AMOUNT,
    NET_BILL_CUTS,
    NET_QUANTITY,
    NET_REVENUE,
    Metric,
    aggregate,
    aggregate_frame,
    compute_net_amount,
    compute_net_mtd_bill_cuts,
    compute_net_mtd_qty,
    compute_net_mtd_revenue,
    prepare_records,
)
from retail_core.sales.merge import apply_multi_merge, merge_and_remove_store
from retail_core.sales.monthly import compute_monthly_sales
from retail_core.sales.normalize import normalize_sales
from retail_core.sales.records import SalesRecord

__all__ = [
    "METRICS",
    "NET_AMOUNT",
    "NET_BILL_CUTS",
    "NET_QUANTITY",
    "NET_REVENUE",
    "Metric",
    "SalesRecord",
    "aggregate",
    "aggregate_frame",
    "apply_multi_merge",
    "compute_monthly_sales",
    "compute_net_amount",
    "compute_net_mtd_bill_cuts",
    "compute_net_mtd_qty",
    "compute_net_mtd_revenue",
    "merge_and_remove_store",
    "normalize_sales",
    "prepare_records",
]
