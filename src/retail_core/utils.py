"""Shared utilities for retail_core.

This module provides small reusable helpers used by the sales pipeline and
the dashboard layer:

- Numeric coercion: ``safe_number`` turns backend values into floats
- Date parsing/formatting: ISO date helpers and month windows
- Comparison windows: last-month and last-year ranges for MTD reports

Examples:
    >>> safe_number("1,234.50")
    1234.5
    >>> month_ago_range("2025-03-01", "2025-03-18")
    ('2025-02-01', '2025-02-18')

"""

from __future__ import annotations

import math
from collections.abc import Hashable, Iterable
from datetime import date, datetime
from typing import Any

import pandas as pd


def safe_number(value: Any) -> float:
    """Coerce a backend value into a finite float.

    Thousands separators are stripped from strings. Anything that is not a
    finite number (None, booleans, free text, NaN) becomes 0.

    Args:
        value: Raw value from a decoded JSON record.

    Returns:
        The numeric value, or 0.0.

    Examples:
        >>> safe_number("1,234.50")
        1234.5
        >>> safe_number("abc")
        0.0
        >>> safe_number(None)
        0.0

    """
    if value is None or isinstance(value, bool):
        return 0.0

    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).replace(",", "").strip()
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return 0.0

    return number if math.isfinite(number) else 0.0


def parse_date(s: str) -> date:
    """Parse a date string in YYYY-MM-DD format.

    Raises:
        ValueError: If the date string is not in YYYY-MM-DD format.

    Examples:
        >>> parse_date("2025-01-15")
        datetime.date(2025, 1, 15)

    """
    return datetime.strptime(s, "%Y-%m-%d").date()


def format_local_date(d: date | datetime | pd.Timestamp) -> str:
    """Format a date as YYYY-MM-DD."""
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def get_last_13_months(today: date | str | None = None) -> list[dict[str, str]]:
    """Return the last 13 calendar months, oldest first, current month last.

    Args:
        today: Reference day (defaults to the current date).

    Returns:
        List of ``{"label": "Jan 2025", "start": "2025-01-01", "end": "2025-01-31"}``.

    """
    current = pd.Timestamp(today if today is not None else date.today()).to_period("M")

    months = []
    for offset in range(12, -1, -1):
        period = current - offset
        months.append(
            {
                "label": period.start_time.strftime("%b %Y"),
                "start": format_local_date(period.start_time),
                "end": format_local_date(period.end_time),
            }
        )
    return months


def format_month_name(month_str: str | None) -> str:
    """Turn ``"2025-01"`` into ``"January 2025"``. Empty input gives ``""``."""
    if not month_str:
        return ""
    year, month = month_str.split("-")[:2]
    return date(int(year), int(month), 1).strftime("%B %Y")


def _shift_range(start_date: str, end_date: str, offset: pd.DateOffset) -> tuple[str, str]:
    start = pd.Timestamp(start_date) - offset
    end = pd.Timestamp(end_date) - offset
    return format_local_date(start), format_local_date(end)


def month_ago_range(start_date: str, end_date: str) -> tuple[str, str]:
    """Same window one month earlier, clamped to month end (Mar 31 -> Feb 28)."""
    return _shift_range(start_date, end_date, pd.DateOffset(months=1))


def year_ago_range(start_date: str, end_date: str) -> tuple[str, str]:
    """Same window one year earlier, clamped to month end (Feb 29 -> Feb 28)."""
    return _shift_range(start_date, end_date, pd.DateOffset(years=1))


def unique_by(items: Iterable[dict[str, Any]], key: str) -> list[dict[str, Any]]:
    """Keep the first item for each distinct value of ``key``."""
    seen: set[Hashable] = set()
    result = []
    for item in items:
        value = item.get(key)
        if value in seen:
            continue
        seen.add(value)
        result.append(item)
    return result
