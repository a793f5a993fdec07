"""Shared fixtures: a pinned "today" and a small set of API-shaped records."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pandas as pd
import pytest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config import get_settings


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Keep FARM_FINANCE_* variables from the host out of the tests."""

    for name in list(os.environ):
        if name.startswith("FARM_FINANCE_"):
            monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def today() -> pd.Timestamp:
    return pd.Timestamp("2024-03-15")


@pytest.fixture()
def sample_sales() -> list[dict]:
    return [
        {
            "sales_id": 1,
            "user_id": 7,
            "sales_date": "2024-03-01",
            "occupation": "Poultry",
            "items_sold": ["Eggs"],
            "quantities_sold": [10],
            "prices_per_unit": [5],
        },
        {
            "sales_id": 2,
            "user_id": 7,
            "sales_date": "2024-03-10T09:30:00",
            "occupation": "Apiculture",
            "items_sold": ["Honey"],
            "quantities_sold": [2],
            "prices_per_unit": [300],
        },
        {
            "sales_id": 3,
            "user_id": 7,
            "sales_date": "2024-03-12",
            "occupation": None,
            "items_sold": ["Eggs"],
            "quantities_sold": [1],
            "prices_per_unit": [5],
        },
        {
            "sales_id": 4,
            "user_id": 7,
            "sales_date": "not-a-date",
            "occupation": "Poultry",
            "items_sold": ["Eggs"],
            "quantities_sold": [3],
            "prices_per_unit": [5],
        },
    ]


@pytest.fixture()
def sample_expenses() -> list[dict]:
    return [
        {
            "expense_id": 11,
            "user_id": 7,
            "title": "Litter",
            "occupation": "Poultry",
            "category": "Farm Utilities",
            "expense": 20,
            "date_created": "2024-03-01",
        },
        {
            "expense_id": 12,
            "user_id": 7,
            "title": "Power bill",
            "occupation": "Apiculture",
            "category": "Electricity",
            "expense": "100",
            "date_created": "2024-03-10",
        },
        {
            "expense_id": 13,
            "user_id": 7,
            "title": "Feed",
            "occupation": "Poultry",
            "category": "Agricultural Feeds",
            "expense": 30,
            "date_created": "2024-02-20",
        },
        {
            "expense_id": 14,
            "user_id": 7,
            "title": "Broken",
            "occupation": "Poultry",
            "category": "Electricity",
            "expense": 999,
            "date_created": "",
        },
        {
            "expense_id": 15,
            "user_id": 7,
            "title": "Mystery",
            "occupation": "Poultry",
            "category": "Lottery Tickets",
            "expense": 5,
            "date_created": "2024-03-02",
        },
    ]
