"""Formatting helpers for dashboard cards and chart labels."""

from __future__ import annotations

from datetime import date

import numpy as np
import pandas as pd

__all__ = ["format_currency", "format_compact", "format_day_label", "format_month_label"]

_COMPACT_SUFFIXES = ((1e7, "Cr"), (1e5, "L"), (1e3, "K"))


def _group_indian(digits: str) -> str:
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs + [tail])


def format_currency(amount: float) -> str:
    """Return ``amount`` as whole rupees with Indian digit grouping, e.g. ``₹1,23,456``."""

    rounded = int(np.round(amount))
    sign = "-" if rounded < 0 else ""
    return f"{sign}₹{_group_indian(str(abs(rounded)))}"


def format_compact(amount: float) -> str:
    """Short axis label using the Indian lakh/crore scale."""

    value = float(amount)
    for threshold, suffix in _COMPACT_SUFFIXES:
        if abs(value) >= threshold:
            scaled = value / threshold
            return f"{scaled:.1f}".rstrip("0").rstrip(".") + suffix
    return f"{value:.0f}"


def format_day_label(day: date | pd.Timestamp) -> str:
    stamp = pd.Timestamp(day)
    return f"{stamp.strftime('%b')} {stamp.day}"


def format_month_label(day: date | pd.Timestamp) -> str:
    return pd.Timestamp(day).strftime("%B %Y")
