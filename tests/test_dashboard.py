"""Tests for dashboard assembly, payload unwrapping, settings and formatting."""

from __future__ import annotations

import pandas as pd
import pytest

from analytics.categorisation import FISHERY_EXPENSE_CONFIG
from config import Settings, get_settings
from core.dashboard import prepare_finance_dashboard
from core.data_loader import extract_configured_sub_types, extract_expenses, extract_sales
from core.formatting import format_compact, format_currency, format_day_label, format_month_label
from core.logging_setup import get_logger


@pytest.fixture()
def user_payload() -> dict:
    return {"data": {"user": {"user_id": 7, "sub_type": '{"Poultry","Fishery"}'}}}


def test_prepare_finance_dashboard(user_payload, sample_sales, sample_expenses, today):
    data = prepare_finance_dashboard(
        user_payload,
        {"sales": sample_sales},
        {"expenses": sample_expenses},
        today=today,
        settings=Settings(history_days=45),
    )

    assert len(data["daily_series"]) == 45
    assert data["daily_series"][-1]["date"] == today
    assert data["configured_sub_types"] == ["Poultry", "Fishery"]
    assert data["sub_types"] == ["Poultry", "Fishery", "Apiculture", "Uncategorized"]
    assert data["skipped"] == {
        "sales": 1,
        "expenses": 1,
        "unclassified_expenses": 1,
        "unpriced_sales": 0,
    }

    cards = {card["title"]: card for card in data["summary_cards"]}
    assert list(cards) == ["Revenue", "COGS", "Gross Profit", "Expenses", "Net Profit"]
    assert cards["Revenue"]["value"] == pytest.approx(655.0)
    assert cards["Net Profit"]["value"] == pytest.approx(535.0)
    assert cards["Net Profit"]["formatted"] == "₹535"
    assert data["month_summary"]["month_label"] == "March 2024"


def test_prepare_finance_dashboard_uses_settings_defaults(sample_sales, today, monkeypatch):
    monkeypatch.setenv("FARM_FINANCE_HISTORY_DAYS", "10")
    get_settings.cache_clear()

    data = prepare_finance_dashboard({}, sample_sales, [], today=today)

    assert len(data["daily_series"]) == 10
    assert data["configured_sub_types"] == []
    assert data["sub_types"] == ["Poultry", "Apiculture", "Uncategorized"]


def test_prepare_finance_dashboard_with_fishery_profile(today):
    expenses = {
        "expenses": [
            {
                "expense_id": 1,
                "occupation": "Fishery",
                "category": "Fish Seed",
                "expense": 70,
                "date_created": "2024-03-14",
            }
        ]
    }

    poultry = prepare_finance_dashboard({}, {"sales": []}, expenses, today=today, settings=Settings(history_days=5))
    fishery = prepare_finance_dashboard(
        {},
        {"sales": []},
        expenses,
        today=today,
        settings=Settings(history_days=5),
        config=FISHERY_EXPENSE_CONFIG,
    )

    assert poultry["month_summary"]["cogs"] == 0.0
    assert poultry["skipped"]["unclassified_expenses"] == 1
    assert fishery["month_summary"]["cogs"] == pytest.approx(70.0)
    assert fishery["month_summary"]["gross_profit"] == pytest.approx(-70.0)


def test_prepare_finance_dashboard_survives_empty_payloads(today):
    data = prepare_finance_dashboard(None, None, None, today=today, settings=Settings(history_days=3))

    assert len(data["daily_series"]) == 3
    assert data["sub_types"] == []
    assert all(card["value"] == 0.0 for card in data["summary_cards"])


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("FARM_FINANCE_PAGE_SIZE", "14")
    monkeypatch.setenv("FARM_FINANCE_UNKNOWN_CATEGORY_POLICY", "operating")

    settings = Settings()

    assert settings.page_size == 14
    assert settings.unknown_category_policy == "operating"
    assert settings.history_days == 180
    assert settings.expense_profile == "poultry"


def test_extractors_accept_envelopes_and_lists(sample_sales):
    assert extract_sales({"sales": sample_sales}) == sample_sales
    assert extract_sales(sample_sales + ["junk"]) == sample_sales
    assert extract_sales({"data": {"sales": sample_sales}}) == sample_sales
    assert extract_expenses({"expenses": None}) == []
    assert extract_configured_sub_types({"user": {"sub_type": ["Poultry"]}}) == ["Poultry"]
    assert extract_configured_sub_types({"data": {}}) is None


@pytest.mark.parametrize(
    ("amount", "expected"),
    [
        (0, "₹0"),
        (999.6, "₹1,000"),
        (123456, "₹1,23,456"),
        (12345678, "₹1,23,45,678"),
        (-1500.4, "-₹1,500"),
    ],
)
def test_format_currency(amount, expected):
    assert format_currency(amount) == expected


def test_chart_label_formatting():
    assert format_compact(150000) == "1.5L"
    assert format_compact(25000000) == "2.5Cr"
    assert format_compact(2000) == "2K"
    assert format_compact(-4500) == "-4.5K"
    assert format_compact(950) == "950"
    assert format_day_label(pd.Timestamp("2024-03-01")) == "Mar 1"
    assert format_month_label(pd.Timestamp("2024-03-18")) == "March 2024"


def test_engine_loggers_share_package_root():
    assert get_logger("analytics.series").name == "farm_finance.analytics.series"


def test_prepare_sub_type_dashboard(user_payload, sample_sales, sample_expenses, today):
    data = prepare_finance_dashboard(
        user_payload,
        sample_sales,
        sample_expenses,
        today=today,
        settings=Settings(history_days=30),
        target_sub_type="Poultry",
        target_only=True,
    )

    assert data["sub_types"] == ["Poultry"]
    assert all(
        [item["name"] for item in entry["revenue"]["breakdown"]] == ["Poultry"] for entry in data["daily_series"]
    )
    cards = {card["title"]: card["value"] for card in data["summary_cards"]}
    assert cards == {
        "Poultry Revenue": pytest.approx(50.0),
        "Poultry COGS": pytest.approx(20.0),
        "Poultry Gross Profit": pytest.approx(30.0),
        "Poultry Expenses": pytest.approx(0.0),
        "Poultry Net Profit": pytest.approx(30.0),
    }


def test_sub_type_dashboard_without_records_keeps_target(today):
    data = prepare_finance_dashboard(
        None, None, None, today=today, settings=Settings(history_days=2), target_sub_type="Fishery"
    )

    assert data["sub_types"] == ["Fishery", "Uncategorized"]
    assert [item["name"] for item in data["daily_series"][0]["net_profit"]["breakdown"]] == [
        "Fishery",
        "Uncategorized",
    ]
    assert data["summary_cards"][0]["title"] == "Revenue"


def test_dashboard_reports_configured_page_size(today, monkeypatch):
    monkeypatch.setenv("FARM_FINANCE_PAGE_SIZE", "10")
    get_settings.cache_clear()

    assert prepare_finance_dashboard({}, [], [], today=today)["page_size"] == 10
