"""Month-on-month sales trend."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

import pandas as pd

from retail_core.sales.records import SalesRecord
from retail_core.utils import safe_number


def compute_monthly_sales(
    records: Iterable[SalesRecord],
    months: Sequence[dict[str, str]],
) -> list[dict[str, object]]:
    """Sum ``TotalSales`` per month window.

    A record counts toward a month when its ``Date`` (YYYY-MM-DD) lies within
    ``[start, end]`` inclusive. Records without a date are ignored.

    Args:
        records: Sales records carrying ``Date`` and ``TotalSales``.
        months: Windows as returned by ``utils.get_last_13_months``.

    Returns:
        ``[{"month": label, "totalSales": total}, ...]`` in the order of ``months``.

    """
    df = pd.DataFrame.from_records(list(records))
    if df.empty or "Date" not in df.columns:
        return [{"month": m.get("label"), "totalSales": 0.0} for m in months]

    dates = df["Date"].where(df["Date"].notna(), "").astype(str).str.slice(0, 10)
    sales = df["TotalSales"].map(safe_number) if "TotalSales" in df.columns else pd.Series(0.0, index=df.index)
    has_date = dates != ""

    result = []
    for m in months:
        in_month = has_date & (dates >= m["start"]) & (dates <= m["end"])
        result.append({"month": m.get("label"), "totalSales": float(sales[in_month].sum())})
    return result
