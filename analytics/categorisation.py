"""Expense category taxonomy and COGS / operating-expense classification."""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from types import MappingProxyType
from typing import Iterable, Literal, Mapping

import pandas as pd

from core.logging_setup import get_logger
from core.models import ExpenseCategoryConfig, ExpenseRecord

__all__ = [
    "ExpenseGroup",
    "POULTRY_EXPENSE_CONFIG",
    "FISHERY_EXPENSE_CONFIG",
    "DEFAULT_EXPENSE_CONFIG",
    "get_expense_config",
    "build_category_index",
    "classify",
    "category_breakdown",
]

logger = get_logger(__name__)

UnknownCategoryPolicy = Literal["exclude", "operating"]


class ExpenseGroup(str, Enum):
    COGS = "COGS"
    OPERATING_EXPENSE = "OperatingExpense"
    UNCLASSIFIED = "Unclassified"


POULTRY_EXPENSE_CONFIG = ExpenseCategoryConfig(
    detailed_categories=MappingProxyType(
        {
            "Goods & Services": ("Farm Utilities", "Agricultural Feeds", "Consulting"),
            "Utility Expenses": (
                "Electricity",
                "Labour Salary",
                "Water Supply",
                "Taxes",
                "Others",
            ),
        }
    ),
)

FISHERY_EXPENSE_CONFIG = ExpenseCategoryConfig(
    detailed_categories=MappingProxyType(
        {
            "Goods & Services": (
                "Farm Utilities",
                "Agricultural Feeds",
                "Consulting",
                "Fish Seed",
                "Pond Preparation",
            ),
            "Utility Expenses": (
                "Electricity",
                "Labour Salary",
                "Water Supply",
                "Taxes",
                "Others",
                "Equipment Maintenance",
            ),
        }
    ),
)

DEFAULT_EXPENSE_CONFIG = POULTRY_EXPENSE_CONFIG

_PROFILES: Mapping[str, ExpenseCategoryConfig] = MappingProxyType(
    {"poultry": POULTRY_EXPENSE_CONFIG, "fishery": FISHERY_EXPENSE_CONFIG}
)


def get_expense_config(profile: str) -> ExpenseCategoryConfig:
    """Return the built-in taxonomy for an occupation profile name."""

    try:
        return _PROFILES[profile.strip().lower()]
    except KeyError:
        raise ValueError(f"Unknown expense profile: {profile!r}") from None


@lru_cache(maxsize=32)
def build_category_index(config: ExpenseCategoryConfig) -> Mapping[str, str]:
    """Return a read-only ``sub-category label -> top-level group`` lookup.

    A label listed under more than one group keeps its first group.
    """

    index: dict[str, str] = {}
    for group, labels in config.detailed_categories.items():
        for label in labels:
            index.setdefault(label, group)
    return MappingProxyType(index)


def classify(
    label: str | None,
    config: ExpenseCategoryConfig = DEFAULT_EXPENSE_CONFIG,
    *,
    unknown_policy: UnknownCategoryPolicy = "exclude",
) -> ExpenseGroup:
    """Map a declared expense category to its accounting group. Never raises."""

    group = build_category_index(config).get(label.strip()) if isinstance(label, str) else None
    if group is not None and group == config.cogs_group:
        return ExpenseGroup.COGS
    if group is not None and group == config.operating_group:
        return ExpenseGroup.OPERATING_EXPENSE

    if unknown_policy == "operating":
        logger.debug("Category %r not in taxonomy; treating as operating expense", label)
        return ExpenseGroup.OPERATING_EXPENSE
    return ExpenseGroup.UNCLASSIFIED


def category_breakdown(
    expenses: Iterable[ExpenseRecord],
    config: ExpenseCategoryConfig = DEFAULT_EXPENSE_CONFIG,
    *,
    unknown_policy: UnknownCategoryPolicy = "exclude",
) -> pd.DataFrame:
    """Return expense totals per sub-category label within each accounting group.

    Columns: ``Group``, ``Category``, ``Amount``, ``Share`` (of the group total).
    Records with a non-numeric amount are ignored.
    """

    columns = ["Group", "Category", "Amount", "Share"]
    frame = pd.DataFrame(list(expenses), columns=["category", "expense"])
    if frame.empty:
        return pd.DataFrame(columns=columns)

    frame["Amount"] = pd.to_numeric(frame["expense"], errors="coerce")
    frame = frame.dropna(subset=["Amount"])
    frame["Category"] = frame["category"].fillna("").astype(str).str.strip()
    frame["Group"] = frame["Category"].map(
        lambda label: classify(label, config, unknown_policy=unknown_policy).value
    )
    frame = frame[frame["Group"] != ExpenseGroup.UNCLASSIFIED.value]
    if frame.empty:
        return pd.DataFrame(columns=columns)

    totals = frame.groupby(["Group", "Category"], sort=False)["Amount"].sum().reset_index()
    group_totals = totals.groupby("Group")["Amount"].transform("sum")
    totals["Share"] = (totals["Amount"] / group_totals.where(group_totals != 0)).fillna(0.0)
    totals = totals.sort_values(["Group", "Amount"], ascending=[True, False], ignore_index=True)
    return totals[columns]
