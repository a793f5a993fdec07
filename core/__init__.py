"""Core domain package for the farm finance engine."""

from .logging_setup import configure_logging, get_logger
from .models import (
    DailyFinancialEntry,
    DailySeries,
    DateInterval,
    ExpenseCategoryConfig,
    ExpenseRecord,
    FinanceDashboardData,
    MetricBreakdown,
    MonthSummary,
    NormalizedRecords,
    SaleRecord,
    SubTypeValue,
    WorkingCapitalEntry,
)

__all__ = [
    "DailyFinancialEntry",
    "DailySeries",
    "DateInterval",
    "ExpenseCategoryConfig",
    "ExpenseRecord",
    "FinanceDashboardData",
    "MetricBreakdown",
    "MonthSummary",
    "NormalizedRecords",
    "SaleRecord",
    "SubTypeValue",
    "WorkingCapitalEntry",
    "configure_logging",
    "get_logger",
]
