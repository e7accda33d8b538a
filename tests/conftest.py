"""Shared fixtures for the retail_core test suite."""

from __future__ import annotations

from typing import Any

import pytest

from retail_core.config import StoreTopology


@pytest.fixture
def topology() -> StoreTopology:
    """A small topology with one alias, one rename and one merge rule."""
    return StoreTopology(
        name_to_code={"NASTA BAZAR SHELA": 44},
        name_to_name_and_code={"SADAA": ("MAGSON SHANTIGRAM", 55)},
        merge_rules=[(35, 8)],
        excluded_store_codes=frozenset({30, 62}),
    )


@pytest.fixture
def no_merge_topology() -> StoreTopology:
    """Topology without lookup tables or merge rules."""
    return StoreTopology()


@pytest.fixture
def sample_records() -> list[dict[str, Any]]:
    """Mixed sales rows across three stores and several bill series."""
    return [
        {"StoreCode": 8, "StoreName": "MAGSON BOPAL", "BillSeries": "SC", "Amount": 1000, "Quantity": 50, "TotalBills": 10},
        {"StoreCode": 8, "StoreName": "MAGSON BOPAL", "BillSeries": "LSR", "Amount": -100, "Quantity": -5, "TotalBills": -1},
        {"StoreCode": 35, "StoreName": "MAGSON OLD", "BillSeries": "B2B", "Amount": "2,500.50", "Quantity": "10", "TotalBills": 2},
        {"StoreCode": 12, "StoreName": "MAGSON THALTEJ", "BillSeries": "WB", "Amount": 400, "Quantity": 20, "TotalBills": 4},
        {"StoreCode": 12, "StoreName": "MAGSON THALTEJ", "BillSeries": "IS", "Amount": 100, "Quantity": 5, "TotalBills": 1},
    ]
