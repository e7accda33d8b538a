"""Tests for shared helpers: numeric coercion, dates and month windows."""

from __future__ import annotations

from datetime import date

import pytest

from retail_core.sales import compute_monthly_sales
from retail_core.utils import (
    format_local_date,
    format_month_name,
    get_last_13_months,
    month_ago_range,
    parse_date,
    safe_number,
    unique_by,
    year_ago_range,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        (12, 12.0),
        (12.5, 12.5),
        ("12", 12.0),
        ("1,234.50", 1234.5),
        ("-1,00,000", -100000.0),
        ("  42 ", 42.0),
        ("", 0.0),
        ("abc", 0.0),
        (None, 0.0),
        (True, 0.0),
        (float("nan"), 0.0),
        (float("inf"), 0.0),
        ("nan", 0.0),
    ],
)
def test_safe_number(value: object, expected: float) -> None:
    assert safe_number(value) == expected


def test_parse_and_format_date_round_trip() -> None:
    assert parse_date("2025-01-05") == date(2025, 1, 5)
    assert format_local_date(date(2025, 1, 5)) == "2025-01-05"

    with pytest.raises(ValueError):
        parse_date("05/01/2025")


class TestLast13Months:
    def test_window_bounds(self) -> None:
        months = get_last_13_months(date(2025, 3, 15))

        assert len(months) == 13
        assert months[0] == {"label": "Mar 2024", "start": "2024-03-01", "end": "2024-03-31"}
        assert months[-1] == {"label": "Mar 2025", "start": "2025-03-01", "end": "2025-03-31"}

    def test_month_ends(self) -> None:
        months = {m["label"]: m for m in get_last_13_months("2025-03-15")}

        assert months["Feb 2025"]["end"] == "2025-02-28"
        assert months["Apr 2024"]["end"] == "2024-04-30"

    def test_months_are_consecutive(self) -> None:
        months = get_last_13_months(date(2025, 1, 1))
        starts = [m["start"] for m in months]

        assert starts == sorted(starts)
        assert starts[0] == "2024-01-01"
        assert starts[-1] == "2025-01-01"


class TestComparisonRanges:
    def test_month_ago(self) -> None:
        assert month_ago_range("2025-03-01", "2025-03-18") == ("2025-02-01", "2025-02-18")

    def test_month_ago_clamps_to_month_end(self) -> None:
        assert month_ago_range("2025-03-01", "2025-03-31") == ("2025-02-01", "2025-02-28")

    def test_month_ago_crosses_year(self) -> None:
        assert month_ago_range("2025-01-01", "2025-01-18") == ("2024-12-01", "2024-12-18")

    def test_year_ago_leap_day(self) -> None:
        assert year_ago_range("2024-02-01", "2024-02-29") == ("2023-02-01", "2023-02-28")


def test_format_month_name() -> None:
    assert format_month_name("2025-01") == "January 2025"
    assert format_month_name("2024-12-01") == "December 2024"
    assert format_month_name("") == ""
    assert format_month_name(None) == ""


def test_unique_by_keeps_first() -> None:
    items = [
        {"StoreCode": 8, "StoreName": "first"},
        {"StoreCode": 12, "StoreName": "other"},
        {"StoreCode": 8, "StoreName": "second"},
    ]

    result = unique_by(items, "StoreCode")

    assert [i["StoreName"] for i in result] == ["first", "other"]


class TestMonthlySales:
    """Month-on-month totals from dated rows."""

    @pytest.fixture
    def months(self) -> list[dict[str, str]]:
        return [
            {"label": "Jan 2025", "start": "2025-01-01", "end": "2025-01-31"},
            {"label": "Feb 2025", "start": "2025-02-01", "end": "2025-02-28"},
        ]

    def test_sums_per_month(self, months: list[dict[str, str]]) -> None:
        records = [
            {"Date": "2025-01-01", "TotalSales": 100},
            {"Date": "2025-01-31", "TotalSales": "1,000"},
            {"Date": "2025-02-10", "TotalSales": 50.5},
            {"Date": "2025-03-01", "TotalSales": 999},
            {"TotalSales": 999},
            {"Date": "2025-02-11", "TotalSales": "n/a"},
        ]

        result = compute_monthly_sales(records, months)

        assert result == [
            {"month": "Jan 2025", "totalSales": 1100.0},
            {"month": "Feb 2025", "totalSales": 50.5},
        ]

    def test_empty_records(self, months: list[dict[str, str]]) -> None:
        result = compute_monthly_sales([], months)

        assert result == [
            {"month": "Jan 2025", "totalSales": 0.0},
            {"month": "Feb 2025", "totalSales": 0.0},
        ]
