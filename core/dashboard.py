"""Assembly of the Finance Dashboard data from raw API responses."""

from __future__ import annotations

from datetime import date
from typing import Any, Mapping, Optional

import pandas as pd

from analytics.categorisation import get_expense_config
from analytics.normalize import normalize_records, parse_sub_types
from analytics.series import build_daily_series, month_to_date_summary
from config import Settings, get_settings
from core.data_loader import extract_configured_sub_types, extract_expenses, extract_sales
from core.formatting import format_currency
from core.logging_setup import get_logger
from core.models import ExpenseCategoryConfig, FinanceDashboardData, MonthSummary, SummaryCard

__all__ = ["prepare_finance_dashboard", "build_summary_cards"]

logger = get_logger(__name__)

_CARD_ORDER = (
    ("Revenue", "revenue"),
    ("COGS", "cogs"),
    ("Gross Profit", "gross_profit"),
    ("Expenses", "expenses"),
    ("Net Profit", "net_profit"),
)


def build_summary_cards(summary: MonthSummary, title_prefix: Optional[str] = None) -> list[SummaryCard]:
    cards: list[SummaryCard] = []
    for title, key in _CARD_ORDER:
        value = float(summary[key])
        if title_prefix:
            title = f"{title_prefix} {title}"
        cards.append({"title": title, "metric": key, "value": value, "formatted": format_currency(value)})
    return cards


def prepare_finance_dashboard(
    user_payload: Any,
    sales_payload: Any,
    expenses_payload: Any,
    *,
    today: date | str | pd.Timestamp,
    settings: Optional[Settings] = None,
    config: Optional[ExpenseCategoryConfig] = None,
    fallback_prices: Mapping[str, float] | None = None,
    target_sub_type: Optional[str] = None,
    target_only: bool = False,
) -> FinanceDashboardData:
    """Build the daily series, sub-types and month cards for one user.

    The three payloads are the already-fetched bodies of the user, sales and
    expenses endpoints. Malformed records are skipped and reported in
    ``skipped``; nothing here raises for bad record data.

    ``target_sub_type`` builds the view of a single farm line. By default the
    other sub-types stay in the breakdowns; with ``target_only`` only that
    line's records are counted and the cards are titled after it
    ("Poultry Revenue").
    """

    settings = settings or get_settings()
    config = config or get_expense_config(settings.expense_profile)

    configured = parse_sub_types(extract_configured_sub_types(user_payload))
    sales = extract_sales(sales_payload)
    expenses = extract_expenses(expenses_payload)

    normalized = normalize_records(
        sales,
        expenses,
        configured,
        config,
        fallback_prices=fallback_prices,
        unknown_policy=settings.unknown_category_policy,
        uncategorized=settings.uncategorized_label,
        target_sub_type=target_sub_type,
        target_only=target_only,
    )

    series = build_daily_series(
        settings.history_days,
        normalized.sub_types,
        normalized.revenue_by_day,
        normalized.expenses_by_day,
        today=today,
    )
    summary = month_to_date_summary(series, today)

    logger.info(
        "Built %d-day finance series for %d sub-type(s) from %d sale(s) and %d expense(s)",
        len(series),
        len(normalized.sub_types),
        len(sales),
        len(expenses),
    )

    return {
        "daily_series": series,
        "sub_types": normalized.sub_types,
        "configured_sub_types": configured,
        "month_summary": summary,
        "summary_cards": build_summary_cards(summary, target_sub_type if target_only else None),
        "skipped": normalized.skipped,
        "page_size": settings.page_size,
    }
