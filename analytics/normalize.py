"""Normalisation of raw sale and expense records into per-day contributions."""

from __future__ import annotations

import re
from typing import Any, Iterable, Mapping, Sequence

import numpy as np
import pandas as pd

from analytics.categorisation import DEFAULT_EXPENSE_CONFIG, ExpenseGroup, UnknownCategoryPolicy, classify
from config import UNCATEGORIZED_LABEL
from core.logging_setup import get_logger
from core.models import (
    ExpenseCategoryConfig,
    ExpenseRecord,
    MetricBreakdown,
    NormalizedRecords,
    ProcessedExpensesForDay,
    SaleRecord,
    zero_breakdown,
)

__all__ = [
    "MalformedRecordError",
    "parse_record_day",
    "day_key",
    "sale_revenue",
    "parse_sub_types",
    "resolve_sub_types",
    "normalize_sales",
    "normalize_expenses",
    "normalize_records",
]

logger = get_logger(__name__)

_ARRAY_LITERAL_NOISE = re.compile(r'[{}"]')


class MalformedRecordError(ValueError):
    """Raised when a raw record lacks a parsable date or numeric field."""


def parse_record_day(value: Any) -> pd.Timestamp:
    """Return the calendar day (midnight, timezone-naive) of an API date value."""

    if value is None or (isinstance(value, str) and not value.strip()):
        raise MalformedRecordError("missing date")
    try:
        parsed = pd.to_datetime(value, errors="coerce")
    except (TypeError, ValueError, OverflowError) as exc:
        raise MalformedRecordError(f"unparsable date {value!r}") from exc
    if not isinstance(parsed, pd.Timestamp) or pd.isna(parsed):
        raise MalformedRecordError(f"unparsable date {value!r}")
    if parsed.tzinfo is not None:
        parsed = parsed.tz_localize(None)
    return parsed.normalize()


def day_key(day: pd.Timestamp) -> str:
    return day.strftime("%Y-%m-%d")


def _to_amount(value: Any, field_name: str) -> float:
    try:
        amount = float(value)
    except (TypeError, ValueError, OverflowError) as exc:
        raise MalformedRecordError(f"non-numeric {field_name} {value!r}") from exc
    if np.isnan(amount) or np.isinf(amount):
        raise MalformedRecordError(f"non-finite {field_name} {value!r}")
    return amount


def _line_values(sale: Mapping[str, Any], field_name: str) -> Sequence[Any]:
    values = sale.get(field_name)
    if values is None:
        return []
    if isinstance(values, (str, bytes)) or not isinstance(values, Sequence):
        raise MalformedRecordError(f"{field_name} is not a list: {values!r}")
    return values


def _sub_type_of(record: Mapping[str, Any], uncategorized: str) -> str:
    occupation = record.get("occupation")
    if isinstance(occupation, str) and occupation.strip():
        return occupation.strip()
    return uncategorized


def sale_revenue(
    sale: SaleRecord,
    fallback_prices: Mapping[str, float] | None = None,
) -> tuple[float, bool]:
    """Return ``(revenue, fully_priced)`` for a sale record.

    Revenue is ``sum(quantity_i * price_i)``. Line prices come from
    ``prices_per_unit`` when it is aligned with ``items_sold``, otherwise from
    ``fallback_prices`` keyed by item name. A line with a non-zero quantity and
    no resolvable price contributes nothing and marks the sale as not fully
    priced. Missing quantity or price entries count as zero.
    """

    items = _line_values(sale, "items_sold")
    quantities = _line_values(sale, "quantities_sold")
    if len(items) != len(quantities):
        raise MalformedRecordError(
            f"{len(items)} items_sold but {len(quantities)} quantities_sold"
        )

    prices = _line_values(sale, "prices_per_unit")
    aligned_prices = len(prices) == len(items)
    fallback_prices = fallback_prices or {}

    revenue = 0.0
    fully_priced = True
    for i, item in enumerate(items):
        quantity = 0.0 if quantities[i] is None else _to_amount(quantities[i], "quantity")
        if aligned_prices:
            price = 0.0 if prices[i] is None else _to_amount(prices[i], "price")
        elif isinstance(item, str) and item in fallback_prices:
            price = _to_amount(fallback_prices[item], "fallback price")
        else:
            if quantity != 0:
                fully_priced = False
            continue
        revenue += quantity * price
    return revenue, fully_priced


def parse_sub_types(raw: Any) -> list[str]:
    """Return configured sub-types from a list or a Postgres array literal.

    ``'{"Poultry","Apiculture"}'`` and ``["Poultry", "Apiculture"]`` both yield
    ``["Poultry", "Apiculture"]``. Anything else yields an empty list.
    """

    if isinstance(raw, str):
        values: Iterable[Any] = _ARRAY_LITERAL_NOISE.sub("", raw).split(",")
    elif isinstance(raw, (list, tuple)):
        values = raw
    else:
        return []

    seen: dict[str, None] = {}
    for value in values:
        if isinstance(value, str) and value.strip():
            seen.setdefault(value.strip(), None)
    return list(seen)


def resolve_sub_types(
    configured: Sequence[str],
    sales: Iterable[Mapping[str, Any]] = (),
    expenses: Iterable[Mapping[str, Any]] = (),
    *,
    uncategorized: str = UNCATEGORIZED_LABEL,
) -> list[str]:
    """Return configured sub-types followed by any new sub-type seen on a record."""

    universe: dict[str, None] = dict.fromkeys(configured)
    for record in [*sales, *expenses]:
        universe.setdefault(_sub_type_of(record, uncategorized), None)
    return list(universe)


def _breakdowns_by_day(
    contributions: pd.DataFrame,
    sub_types: Sequence[str],
) -> dict[str, MetricBreakdown]:
    """Fold ``day``/``sub_type``/``amount`` rows into per-day breakdowns."""

    result: dict[str, MetricBreakdown] = {}
    if contributions.empty:
        return result

    grouped = contributions.groupby(["day", "sub_type"], sort=False)["amount"].sum()
    for (day, sub_type), amount in grouped.items():
        entry = result.get(day)
        if entry is None:
            entry = zero_breakdown(sub_types)
            result[day] = entry
        entry["total"] += float(amount)
        for item in entry["breakdown"]:
            if item["name"] == sub_type:
                item["value"] += float(amount)
                break
        else:
            entry["breakdown"].append({"name": str(sub_type), "value": float(amount)})
    return result


def _observed_sub_types(sub_types: Sequence[str], contributions: pd.DataFrame) -> list[str]:
    observed = dict.fromkeys(sub_types)
    if not contributions.empty:
        for name in contributions["sub_type"]:
            observed.setdefault(str(name), None)
    return list(observed)


def normalize_sales(
    sales: Iterable[SaleRecord],
    sub_types: Sequence[str] = (),
    *,
    fallback_prices: Mapping[str, float] | None = None,
    uncategorized: str = UNCATEGORIZED_LABEL,
) -> tuple[dict[str, MetricBreakdown], int, int]:
    """Return ``(revenue_by_day, skipped, unpriced)`` for the given sales.

    ``revenue_by_day`` is keyed by ISO date. Each entry lists ``sub_types``
    (zero-filled) followed by any other sub-type that sold on that day.
    """

    base = list(dict.fromkeys(sub_types))
    rows: list[dict[str, Any]] = []
    skipped = 0
    unpriced = 0

    for sale in sales:
        try:
            day = parse_record_day(sale.get("sales_date"))
            revenue, fully_priced = sale_revenue(sale, fallback_prices)
        except MalformedRecordError as exc:
            skipped += 1
            logger.warning("Skipping sale %s: %s", sale.get("sales_id"), exc)
            continue

        if not fully_priced:
            unpriced += 1
            logger.warning(
                "Sale %s has quantities without unit prices; unpriced lines add no revenue",
                sale.get("sales_id"),
            )
        rows.append({"day": day_key(day), "sub_type": _sub_type_of(sale, uncategorized), "amount": revenue})

    contributions = pd.DataFrame(rows, columns=["day", "sub_type", "amount"])
    return _breakdowns_by_day(contributions, base), skipped, unpriced


def normalize_expenses(
    expenses: Iterable[ExpenseRecord],
    sub_types: Sequence[str] = (),
    config: ExpenseCategoryConfig = DEFAULT_EXPENSE_CONFIG,
    *,
    unknown_policy: UnknownCategoryPolicy = "exclude",
    uncategorized: str = UNCATEGORIZED_LABEL,
) -> tuple[dict[str, ProcessedExpensesForDay], int, int]:
    """Return ``(expenses_by_day, skipped, unclassified)`` for the given expenses.

    COGS and operating expenses are disjoint: a COGS-classified amount is added
    to ``cogs`` only and an operating amount to ``expenses`` only. Unclassified
    amounts are left out of both and counted.
    """

    base = list(dict.fromkeys(sub_types))
    rows: list[dict[str, Any]] = []
    skipped = 0
    unclassified = 0

    for expense in expenses:
        try:
            day = parse_record_day(expense.get("date_created"))
            amount = _to_amount(expense.get("expense"), "expense amount")
        except MalformedRecordError as exc:
            skipped += 1
            logger.warning("Skipping expense %s: %s", expense.get("expense_id"), exc)
            continue

        group = classify(expense.get("category"), config, unknown_policy=unknown_policy)
        if group is ExpenseGroup.UNCLASSIFIED:
            unclassified += 1
            logger.debug(
                "Expense %s has unknown category %r; excluded from COGS and expenses",
                expense.get("expense_id"),
                expense.get("category"),
            )
            continue

        rows.append(
            {
                "day": day_key(day),
                "sub_type": _sub_type_of(expense, uncategorized),
                "metric": "cogs" if group is ExpenseGroup.COGS else "expenses",
                "amount": amount,
            }
        )

    contributions = pd.DataFrame(rows, columns=["day", "sub_type", "metric", "amount"])
    observed = _observed_sub_types(base, contributions)
    cogs = _breakdowns_by_day(contributions[contributions["metric"] == "cogs"], observed)
    operating = _breakdowns_by_day(contributions[contributions["metric"] == "expenses"], observed)

    result: dict[str, ProcessedExpensesForDay] = {}
    for day in dict.fromkeys([*contributions["day"]]):
        result[day] = {
            "cogs": cogs.get(day) or zero_breakdown(observed),
            "expenses": operating.get(day) or zero_breakdown(observed),
        }
    return result, skipped, unclassified


def normalize_records(
    sales: Iterable[SaleRecord],
    expenses: Iterable[ExpenseRecord],
    sub_types: Sequence[str] = (),
    config: ExpenseCategoryConfig = DEFAULT_EXPENSE_CONFIG,
    *,
    fallback_prices: Mapping[str, float] | None = None,
    unknown_policy: UnknownCategoryPolicy = "exclude",
    uncategorized: str = UNCATEGORIZED_LABEL,
    target_sub_type: str | None = None,
    target_only: bool = False,
) -> NormalizedRecords:
    """Normalise sales and expenses and resolve the sub-type universe.

    With ``target_sub_type`` the universe always contains that sub-type and
    ``uncategorized``, even when no configured sub-type or record names them.
    Adding ``target_only`` keeps just the records of the target sub-type and
    reduces the universe to ``[target_sub_type]``.
    """

    sales = list(sales)
    expenses = list(expenses)

    if target_sub_type is None:
        universe = resolve_sub_types(sub_types, sales, expenses, uncategorized=uncategorized)
    elif target_only:
        sales = [sale for sale in sales if _sub_type_of(sale, uncategorized) == target_sub_type]
        expenses = [expense for expense in expenses if _sub_type_of(expense, uncategorized) == target_sub_type]
        universe = [target_sub_type]
    else:
        universe = resolve_sub_types(
            [*sub_types, target_sub_type, uncategorized], sales, expenses, uncategorized=uncategorized
        )

    revenue_by_day, skipped_sales, unpriced = normalize_sales(
        sales, universe, fallback_prices=fallback_prices, uncategorized=uncategorized
    )
    expenses_by_day, skipped_expenses, unclassified = normalize_expenses(
        expenses, universe, config, unknown_policy=unknown_policy, uncategorized=uncategorized
    )

    if skipped_sales or skipped_expenses:
        logger.info(
            "Normalised records with %d sale(s) and %d expense(s) skipped",
            skipped_sales,
            skipped_expenses,
        )

    return NormalizedRecords(
        revenue_by_day=revenue_by_day,
        expenses_by_day=expenses_by_day,
        sub_types=universe,
        skipped_sales=skipped_sales,
        skipped_expenses=skipped_expenses,
        unclassified_expenses=unclassified,
        unpriced_sales=unpriced,
    )
