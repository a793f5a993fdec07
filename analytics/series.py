"""Daily financial series construction and month-to-date summaries."""

from __future__ import annotations

from datetime import date
from typing import Mapping, Sequence

import pandas as pd

from analytics.normalize import day_key
from core.formatting import format_month_label
from core.models import (
    METRIC_KEYS,
    DailyFinancialEntry,
    DailySeries,
    MetricBreakdown,
    MetricKey,
    MonthSummary,
    ProcessedExpensesForDay,
    zero_breakdown,
)

__all__ = [
    "as_day",
    "breakdown_value",
    "subtract_breakdowns",
    "build_daily_series",
    "series_to_frame",
    "month_to_date_summary",
]


def as_day(value: date | str | pd.Timestamp) -> pd.Timestamp:
    """Return ``value`` as a timezone-naive midnight timestamp."""

    stamp = pd.Timestamp(value)
    if stamp.tzinfo is not None:
        stamp = stamp.tz_localize(None)
    return stamp.normalize()


def breakdown_value(metric: MetricBreakdown, name: str) -> float:
    for item in metric["breakdown"]:
        if item["name"] == name:
            return float(item["value"])
    return 0.0


def subtract_breakdowns(
    minuend: MetricBreakdown,
    subtrahend: MetricBreakdown,
    sub_types: Sequence[str],
) -> MetricBreakdown:
    """Return ``minuend - subtrahend`` in total and for every sub-type named."""

    return {
        "total": float(minuend["total"]) - float(subtrahend["total"]),
        "breakdown": [
            {"name": name, "value": breakdown_value(minuend, name) - breakdown_value(subtrahend, name)}
            for name in sub_types
        ],
    }


def _copy_breakdown(metric: MetricBreakdown | None, sub_types: Sequence[str]) -> MetricBreakdown:
    """Return a fresh breakdown listing ``sub_types`` with values from ``metric``."""

    if metric is None:
        return zero_breakdown(sub_types)
    return {
        "total": float(metric["total"]),
        "breakdown": [{"name": name, "value": breakdown_value(metric, name)} for name in sub_types],
    }


def _names_for_day(sub_types: Sequence[str], *metrics: MetricBreakdown | None) -> list[str]:
    names = dict.fromkeys(sub_types)
    for metric in metrics:
        if metric is not None:
            for item in metric["breakdown"]:
                names.setdefault(item["name"], None)
    return list(names)


def build_daily_series(
    window_length_days: int,
    sub_types: Sequence[str],
    normalized_sales: Mapping[str, MetricBreakdown] | None = None,
    normalized_expenses: Mapping[str, ProcessedExpensesForDay] | None = None,
    *,
    today: date | str | pd.Timestamp,
) -> DailySeries:
    """Construct one financial entry per day for the window ending on ``today``.

    Days without contributions are zero-filled. Gross profit is revenue minus
    COGS and net profit is gross profit minus expenses, in total and for each
    sub-type listed on the day (``sub_types`` plus any sub-type present in that
    day's contributions). The inputs are not modified.
    """

    if window_length_days < 0:
        raise ValueError("window_length_days must be non-negative")

    normalized_sales = normalized_sales or {}
    normalized_expenses = normalized_expenses or {}
    end = as_day(today)
    days = pd.date_range(end=end, periods=window_length_days, freq="D")

    series: DailySeries = []
    for day in days:
        key = day_key(day)
        revenue_src = normalized_sales.get(key)
        expense_src = normalized_expenses.get(key)
        cogs_src = expense_src["cogs"] if expense_src else None
        opex_src = expense_src["expenses"] if expense_src else None

        names = _names_for_day(sub_types, revenue_src, cogs_src, opex_src)
        revenue = _copy_breakdown(revenue_src, names)
        cogs = _copy_breakdown(cogs_src, names)
        expenses = _copy_breakdown(opex_src, names)
        gross_profit = subtract_breakdowns(revenue, cogs, names)
        net_profit = subtract_breakdowns(gross_profit, expenses, names)

        entry: DailyFinancialEntry = {
            "date": day,
            "revenue": revenue,
            "cogs": cogs,
            "gross_profit": gross_profit,
            "expenses": expenses,
            "net_profit": net_profit,
        }
        series.append(entry)
    return series


def series_to_frame(series: DailySeries, metric: MetricKey) -> pd.DataFrame:
    """Return a long-form ``Day``/``SubType``/``Value`` frame for one metric."""

    if metric not in METRIC_KEYS:
        raise ValueError(f"Unknown metric: {metric!r}")

    records: list[dict[str, object]] = []
    for entry in series:
        for item in entry[metric]["breakdown"]:
            records.append({"Day": entry["date"], "SubType": item["name"], "Value": float(item["value"])})

    frame = pd.DataFrame(records, columns=["Day", "SubType", "Value"])
    if not frame.empty:
        frame = frame.sort_values(["Day", "SubType"], ignore_index=True)
    return frame


def month_to_date_summary(series: DailySeries, today: date | str | pd.Timestamp) -> MonthSummary:
    """Sum the calendar month containing ``today`` and derive profit from the sums."""

    period = as_day(today).to_period("M")
    revenue = cogs = expenses = 0.0
    for entry in series:
        if entry["date"].to_period("M") == period:
            revenue += float(entry["revenue"]["total"])
            cogs += float(entry["cogs"]["total"])
            expenses += float(entry["expenses"]["total"])

    gross_profit = revenue - cogs
    return {
        "month_label": format_month_label(period.to_timestamp()),
        "revenue": revenue,
        "cogs": cogs,
        "gross_profit": gross_profit,
        "expenses": expenses,
        "net_profit": gross_profit - expenses,
    }
