"""Unwrapping of REST API response bodies into record lists."""

from __future__ import annotations

from typing import Any, Mapping

from core.models import ExpenseRecord, SaleRecord

__all__ = ["extract_sales", "extract_expenses", "extract_user", "extract_configured_sub_types"]


def _records(payload: Any, key: str) -> list[Any]:
    if isinstance(payload, list):
        return [record for record in payload if isinstance(record, Mapping)]
    if isinstance(payload, Mapping):
        records = payload.get(key)
        if records is None and isinstance(payload.get("data"), Mapping):
            records = payload["data"].get(key)
        if isinstance(records, list):
            return [record for record in records if isinstance(record, Mapping)]
    return []


def extract_sales(payload: Any) -> list[SaleRecord]:
    """Return the sale records of a ``/sales/user/<id>`` body (``{"sales": [...]}``)."""

    return _records(payload, "sales")


def extract_expenses(payload: Any) -> list[ExpenseRecord]:
    """Return the expense records of a ``/expenses/user/<id>`` body."""

    return _records(payload, "expenses")


def extract_user(payload: Any) -> Mapping[str, Any]:
    """Return the user object from ``{"user": ...}`` or ``{"data": {"user": ...}}``."""

    if not isinstance(payload, Mapping):
        return {}
    user = payload.get("user")
    if user is None and isinstance(payload.get("data"), Mapping):
        user = payload["data"].get("user")
    return user if isinstance(user, Mapping) else {}


def extract_configured_sub_types(payload: Any) -> Any:
    """Return the raw ``sub_type`` value of the user, or ``None``."""

    return extract_user(payload).get("sub_type")
