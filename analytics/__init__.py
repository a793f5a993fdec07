"""Financial aggregation and windowing helpers behind the Finance Dashboard."""

from analytics.categorisation import (
    DEFAULT_EXPENSE_CONFIG,
    FISHERY_EXPENSE_CONFIG,
    POULTRY_EXPENSE_CONFIG,
    ExpenseGroup,
    build_category_index,
    category_breakdown,
    classify,
    get_expense_config,
)
from analytics.normalize import (
    MalformedRecordError,
    normalize_expenses,
    normalize_records,
    normalize_sales,
    parse_sub_types,
    resolve_sub_types,
)
from analytics.series import build_daily_series, month_to_date_summary, series_to_frame
from analytics.windowing import (
    ROLLING_VIEW_CLIPPING,
    TimeRange,
    interval_days,
    is_custom_range_active,
    parse_date_input,
    select_interval,
)
from analytics.pagination import ChartViewState, clamp_page, paginate, total_pages
from analytics.projection import (
    FinancialMetric,
    compare_chart_data,
    project,
    trend_chart_data,
    working_capital_chart_data,
)
from analytics.working_capital import build_working_capital_series

__all__ = [
    "DEFAULT_EXPENSE_CONFIG",
    "FISHERY_EXPENSE_CONFIG",
    "POULTRY_EXPENSE_CONFIG",
    "ExpenseGroup",
    "build_category_index",
    "category_breakdown",
    "classify",
    "get_expense_config",
    "MalformedRecordError",
    "normalize_expenses",
    "normalize_records",
    "normalize_sales",
    "parse_sub_types",
    "resolve_sub_types",
    "build_daily_series",
    "month_to_date_summary",
    "series_to_frame",
    "ROLLING_VIEW_CLIPPING",
    "TimeRange",
    "interval_days",
    "is_custom_range_active",
    "parse_date_input",
    "select_interval",
    "ChartViewState",
    "clamp_page",
    "paginate",
    "total_pages",
    "FinancialMetric",
    "compare_chart_data",
    "project",
    "trend_chart_data",
    "working_capital_chart_data",
    "build_working_capital_series",
]
