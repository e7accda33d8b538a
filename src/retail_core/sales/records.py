"""Sales record shape and bill series vocabulary.

Records are kept as the dicts decoded from the backend JSON so unknown
fields travel through the pipeline untouched.
"""

from __future__ import annotations

from typing import Any

SalesRecord = dict[str, Any]

STORE_CODE = "StoreCode"
STORE_NAME = "StoreName"
BILL_SERIES = "BillSeries"
AMOUNT = "Amount"
QUANTITY = "Quantity"
TOTAL_BILLS = "TotalBills"

# Sale counter, business-to-business, warehouse bulk, in-store sale.
POSITIVE_SERIES = frozenset({"SC", "B2B", "WB", "IS"})

# Short-credit / return series, always subtracted as an absolute value.
RETURN_SERIES = "LSR"

# Series given to synthesized merge placeholders.
DEFAULT_SERIES = "SC"


def canonical_series(value: Any) -> str:
    """Upper-case, trimmed bill series; empty string when missing."""
    if value is None:
        return ""
    return str(value).strip().upper()
