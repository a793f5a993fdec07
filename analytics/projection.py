"""Metric projection from a daily series into chart-ready data."""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Iterable, Mapping, Sequence, TypedDict

import numpy as np
import pandas as pd

from analytics.series import as_day, breakdown_value
from core.formatting import format_day_label
from core.models import (
    DailyFinancialEntry,
    DailySeries,
    MetricBreakdown,
    MetricKey,
    WorkingCapitalEntry,
)

__all__ = [
    "FinancialMetric",
    "FINANCIAL_METRICS",
    "metric_key",
    "project",
    "subtype_value",
    "TrendDataset",
    "TrendChartData",
    "CompareChartData",
    "WorkingCapitalChartData",
    "trend_chart_data",
    "compare_chart_data",
    "working_capital_chart_data",
]


class FinancialMetric(str, Enum):
    REVENUE = "Revenue"
    COGS = "COGS"
    GROSS_PROFIT = "Gross Profit"
    EXPENSES = "Expenses"
    NET_PROFIT = "Net Profit"


FINANCIAL_METRICS: tuple[str, ...] = tuple(metric.value for metric in FinancialMetric)

_METRIC_KEYS: Mapping[FinancialMetric, MetricKey] = {
    FinancialMetric.REVENUE: "revenue",
    FinancialMetric.COGS: "cogs",
    FinancialMetric.GROSS_PROFIT: "gross_profit",
    FinancialMetric.EXPENSES: "expenses",
    FinancialMetric.NET_PROFIT: "net_profit",
}


class TrendDataset(TypedDict):
    name: str
    data: list[float]


class TrendChartData(TypedDict):
    labels: list[str]
    datasets: list[TrendDataset]
    legend: list[str]


class CompareChartData(TypedDict):
    labels: list[str]
    datasets: list[TrendDataset]
    legend: list[str]


class WorkingCapitalChartData(TypedDict):
    labels: list[str]
    data: list[float]


def metric_key(metric: FinancialMetric | str) -> MetricKey:
    """Resolve a display label (``"Gross Profit"``) or entry key (``"gross_profit"``)."""

    if isinstance(metric, str) and metric in _METRIC_KEYS.values():
        return metric  # type: ignore[return-value]
    try:
        return _METRIC_KEYS[FinancialMetric(metric)]
    except ValueError:
        raise ValueError(f"Unknown metric: {metric!r}") from None


def _index_by_day(series: Iterable[DailyFinancialEntry]) -> dict[pd.Timestamp, DailyFinancialEntry]:
    lookup: dict[pd.Timestamp, DailyFinancialEntry] = {}
    for entry in series:
        lookup.setdefault(as_day(entry["date"]), entry)
    return lookup


def _copy(metric: MetricBreakdown) -> MetricBreakdown:
    return {
        "total": float(metric["total"]),
        "breakdown": [{"name": item["name"], "value": float(item["value"])} for item in metric["breakdown"]],
    }


def project(
    series: DailySeries,
    day: date | str | pd.Timestamp,
    metric: FinancialMetric | str,
) -> MetricBreakdown:
    """Return ``metric`` for the entry on the same calendar day as ``day``.

    When no entry matches, a zero breakdown with no sub-types is returned.
    """

    key = metric_key(metric)
    target = as_day(day)
    for entry in series:
        if as_day(entry["date"]) == target:
            return _copy(entry[key])
    return {"total": 0.0, "breakdown": []}


def subtype_value(metric: MetricBreakdown, name: str) -> float:
    return breakdown_value(metric, name)


def trend_chart_data(
    series: DailySeries,
    days: Sequence[pd.Timestamp],
    metric: FinancialMetric | str,
    sub_types: Sequence[str],
) -> TrendChartData:
    """Return one line per sub-type of ``metric`` over ``days``."""

    key = metric_key(metric)
    lookup = _index_by_day(series)
    labels: list[str] = []
    datasets: list[TrendDataset] = [{"name": name, "data": []} for name in sub_types]

    for day in days:
        labels.append(format_day_label(day))
        entry = lookup.get(as_day(day))
        for dataset in datasets:
            value = breakdown_value(entry[key], dataset["name"]) if entry else 0.0
            dataset["data"].append(value)

    return {"labels": labels, "datasets": datasets, "legend": list(sub_types)}


def compare_chart_data(
    series: DailySeries,
    days: Sequence[pd.Timestamp],
    first: FinancialMetric | str,
    second: FinancialMetric | str,
) -> CompareChartData:
    """Return absolute daily totals of two metrics side by side."""

    keys = (metric_key(first), metric_key(second))
    lookup = _index_by_day(series)
    labels = [format_day_label(day) for day in days]
    totals = np.zeros((2, len(days)), dtype=float)

    for col, day in enumerate(days):
        entry = lookup.get(as_day(day))
        if entry is None:
            continue
        for row, key in enumerate(keys):
            totals[row, col] = entry[key]["total"]

    totals = np.abs(totals)
    legend = [_label(first), _label(second)]
    return {
        "labels": labels,
        "datasets": [
            {"name": legend[0], "data": totals[0].tolist()},
            {"name": legend[1], "data": totals[1].tolist()},
        ],
        "legend": legend,
    }


def _label(metric: FinancialMetric | str) -> str:
    key = metric_key(metric)
    return next(member.value for member, member_key in _METRIC_KEYS.items() if member_key == key)


def working_capital_chart_data(
    entries: Sequence[WorkingCapitalEntry],
    days: Sequence[pd.Timestamp],
) -> WorkingCapitalChartData:
    """Return net working capital for each of ``days`` (0 where no entry exists)."""

    lookup = {as_day(entry["date"]): entry for entry in entries}
    labels: list[str] = []
    data: list[float] = []
    for day in days:
        labels.append(format_day_label(day))
        entry = lookup.get(as_day(day))
        data.append(float(entry["net_working_capital"]) if entry else 0.0)
    return {"labels": labels, "data": data}
