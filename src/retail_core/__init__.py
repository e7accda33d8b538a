"""Retail Core - store sales aggregation for the retail analytics dashboard.

This package turns the backend's per-transaction sales rows into the per-store
numbers behind every KPI card and table of the dashboard:

- **Normalizer**: corrects store identities reported under alternate names
- **Merger**: folds one store's rows into another (code changes, joint reporting)
- **Aggregator**: per-store net revenue, quantity and bill counts

Module Structure:
    retail_core.sales: normalize / merge / aggregate pipeline, monthly trend
    retail_core.dashboard: headline KPIs and store performance table
    retail_core.api: REST client and per-slice fetch state
    retail_core.formatting: en-IN number formatting
    retail_core.config: StoreTopology and ApiSettings

Quick Start:
    >>> from retail_core import StoreTopology
    >>> from retail_core.sales import compute_net_mtd_revenue
    >>>
    >>> records = [
    ...     {"StoreCode": 35, "BillSeries": "SC", "Amount": 100},
    ...     {"StoreCode": 8, "BillSeries": "SC", "Amount": 50},
    ... ]
    >>> compute_net_mtd_revenue(records, topology=StoreTopology.default())
    {8: 150.0}
"""

__version__ = "0.1.0"

from retail_core.config import ApiSettings, StoreTopology
from retail_core.exceptions import (
    ConfigError,
    DataQualityError,
    FetchError,
    RetailAPIError,
)

__all__ = [
    "ApiSettings",
    "ConfigError",
    "DataQualityError",
    "FetchError",
    "RetailAPIError",
    "StoreTopology",
    "__version__",
]
