"""Shared data model definitions for the farm finance engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Mapping, NotRequired, Sequence, TypedDict

import pandas as pd

MetricKey = Literal["revenue", "cogs", "gross_profit", "expenses", "net_profit"]

METRIC_KEYS: tuple[MetricKey, ...] = (
    "revenue",
    "cogs",
    "gross_profit",
    "expenses",
    "net_profit",
)


class SubTypeValue(TypedDict):
    name: str
    value: float


class MetricBreakdown(TypedDict):
    total: float
    breakdown: list[SubTypeValue]


class DailyFinancialEntry(TypedDict):
    date: pd.Timestamp
    revenue: MetricBreakdown
    cogs: MetricBreakdown
    gross_profit: MetricBreakdown
    expenses: MetricBreakdown
    net_profit: MetricBreakdown


DailySeries = list[DailyFinancialEntry]


class ProcessedExpensesForDay(TypedDict):
    cogs: MetricBreakdown
    expenses: MetricBreakdown


class SaleRecord(TypedDict):
    """Sale as returned by ``/sales/user/<id>``."""

    sales_id: int
    user_id: NotRequired[int]
    sales_name: NotRequired[str]
    sales_date: str
    occupation: NotRequired[str | None]
    items_sold: Sequence[str]
    quantities_sold: Sequence[float]
    prices_per_unit: NotRequired[Sequence[float] | None]


class ExpenseRecord(TypedDict):
    """Expense as returned by ``/expenses/user/<id>``."""

    expense_id: int
    user_id: NotRequired[int]
    title: NotRequired[str]
    occupation: NotRequired[str | None]
    category: str
    expense: float | str
    date_created: str


class WorkingCapitalSnapshot(TypedDict):
    date: str | pd.Timestamp
    current_assets: float
    current_liabilities: float


class WorkingCapitalEntry(TypedDict):
    date: pd.Timestamp
    current_assets: float
    current_liabilities: float
    net_working_capital: float


class MonthSummary(TypedDict):
    month_label: str
    revenue: float
    cogs: float
    gross_profit: float
    expenses: float
    net_profit: float


class SummaryCard(TypedDict):
    title: str
    metric: MetricKey
    value: float
    formatted: str


class SkippedCounts(TypedDict):
    sales: int
    expenses: int
    unclassified_expenses: int
    unpriced_sales: int


class FinanceDashboardData(TypedDict):
    daily_series: DailySeries
    sub_types: list[str]
    configured_sub_types: list[str]
    month_summary: MonthSummary
    summary_cards: list[SummaryCard]
    skipped: SkippedCounts
    page_size: int


@dataclass(frozen=True, eq=False)
class ExpenseCategoryConfig:
    """Two-level expense taxonomy plus the groups that map to COGS and opex.

    Instances hash by identity so derived lookups can be cached per config.
    """

    detailed_categories: Mapping[str, Sequence[str]]
    cogs_group: str = "Goods & Services"
    operating_group: str = "Utility Expenses"


@dataclass(frozen=True)
class DateInterval:
    """Inclusive calendar-day interval; ``start``/``end`` are ``None`` when empty."""

    start: pd.Timestamp | None
    end: pd.Timestamp | None

    @property
    def is_empty(self) -> bool:
        return self.start is None or self.end is None or self.end < self.start

    @classmethod
    def empty(cls) -> "DateInterval":
        return cls(None, None)


@dataclass
class NormalizedRecords:
    revenue_by_day: dict[str, MetricBreakdown] = field(default_factory=dict)
    expenses_by_day: dict[str, ProcessedExpensesForDay] = field(default_factory=dict)
    sub_types: list[str] = field(default_factory=list)
    skipped_sales: int = 0
    skipped_expenses: int = 0
    unclassified_expenses: int = 0
    unpriced_sales: int = 0

    @property
    def skipped(self) -> SkippedCounts:
        return {
            "sales": self.skipped_sales,
            "expenses": self.skipped_expenses,
            "unclassified_expenses": self.unclassified_expenses,
            "unpriced_sales": self.unpriced_sales,
        }


def zero_breakdown(sub_types: Sequence[str] = ()) -> MetricBreakdown:
    """Return a zero-valued breakdown with one entry per sub-type."""

    return {"total": 0.0, "breakdown": [{"name": name, "value": 0.0} for name in sub_types]}


__all__ = [
    "METRIC_KEYS",
    "MetricKey",
    "SubTypeValue",
    "MetricBreakdown",
    "DailyFinancialEntry",
    "DailySeries",
    "ProcessedExpensesForDay",
    "SaleRecord",
    "ExpenseRecord",
    "WorkingCapitalSnapshot",
    "WorkingCapitalEntry",
    "MonthSummary",
    "SummaryCard",
    "SkippedCounts",
    "FinanceDashboardData",
    "ExpenseCategoryConfig",
    "DateInterval",
    "NormalizedRecords",
    "zero_breakdown",
]
