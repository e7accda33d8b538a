"""Dashboard module.

Headline KPIs and the per-store performance table of the sales dashboard.

Example:
    >>> from retail_core.dashboard import DashboardSnapshot, compute_dashboard_metrics
    >>> snapshot = DashboardSnapshot(mtd=[{"StoreCode": 8, "BillSeries": "SC", "Amount": 500}])
    >>> compute_dashboard_metrics(snapshot).total_sales
    500.0
"""

from retail_core.dashboard.metrics import (
    DashboardMetrics,
    DashboardSnapshot,
    build_store_map,
    compute_dashboard_metrics,
    default_store_selection,
    filter_by_store,
    store_performance_table,
)

__all__ = [
    "DashboardMetrics",
    "DashboardSnapshot",
    "build_store_map",
    "compute_dashboard_metrics",
    "default_store_selection",
    "filter_by_store",
    "store_performance_table",
]
