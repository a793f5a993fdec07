"""Date interval selection for chart views: rolling presets or custom ranges."""

from __future__ import annotations

import re
from datetime import date
from enum import Enum
from typing import Any, Collection, Union

import pandas as pd

from analytics.series import as_day
from core.logging_setup import get_logger
from core.models import DateInterval

__all__ = [
    "TimeRange",
    "TIME_RANGE_OPTIONS",
    "ROLLING_VIEW_CLIPPING",
    "parse_date_input",
    "is_custom_range_active",
    "select_interval",
    "interval_days",
]

logger = get_logger(__name__)

_ISO_DAY = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class TimeRange(str, Enum):
    WEEKLY = "Weekly"
    MONTHLY = "Monthly"
    THREE_MONTHS = "3 Months"


TIME_RANGE_OPTIONS: tuple[str, ...] = tuple(option.value for option in TimeRange)

# Trend and working-capital charts stop the 3-month view at today but keep the
# full current month for the Monthly preset.
ROLLING_VIEW_CLIPPING: frozenset[TimeRange] = frozenset({TimeRange.THREE_MONTHS})

ClipPolicy = Union[bool, Collection[Union[TimeRange, str]]]


def _clips(preset: TimeRange, clip_to_today: ClipPolicy) -> bool:
    if isinstance(clip_to_today, bool):
        return clip_to_today
    return preset in {TimeRange(option) for option in clip_to_today}


def parse_date_input(text: str | None) -> pd.Timestamp | None:
    """Parse a ``YYYY-MM-DD`` text field; anything else (including blank) is ``None``."""

    if text is None:
        return None
    text = text.strip()
    if not _ISO_DAY.match(text):
        return None
    try:
        return pd.Timestamp(text).normalize()
    except ValueError:
        return None


def _coerce_day(value: Any) -> pd.Timestamp | None:
    if value is None:
        return None
    if isinstance(value, str):
        return parse_date_input(value)
    try:
        stamp = as_day(value)
    except (TypeError, ValueError):
        return None
    return None if pd.isna(stamp) else stamp


def is_custom_range_active(start: Any, end: Any) -> bool:
    """True when both ends are valid dates and ``end`` is not before ``start``."""

    start_day, end_day = _coerce_day(start), _coerce_day(end)
    return start_day is not None and end_day is not None and end_day >= start_day


def select_interval(
    preset: TimeRange | str,
    custom_start: Any = None,
    custom_end: Any = None,
    *,
    today: date | str | pd.Timestamp,
    clip_to_today: ClipPolicy = False,
    series_empty: bool = False,
) -> DateInterval:
    """Return the inclusive interval a chart should display.

    A valid custom range always wins over the preset. Otherwise ``Weekly`` is
    the seven days ending on ``today``, ``Monthly`` the calendar month of
    ``today`` and ``3 Months`` runs from the first day of the month two months
    back to the end of the current month. ``clip_to_today`` is either a flag
    for all presets or the set of presets whose end never goes past ``today``
    (see :data:`ROLLING_VIEW_CLIPPING`). An empty historical series gives an
    empty interval.
    """

    if series_empty:
        return DateInterval.empty()

    start_day, end_day = _coerce_day(custom_start), _coerce_day(custom_end)
    if start_day is not None and end_day is not None:
        if end_day >= start_day:
            return DateInterval(start_day, end_day)
        logger.debug("Custom range %s..%s ends before it starts; using preset", start_day, end_day)

    preset = TimeRange(preset)
    anchor = as_day(today)
    month = anchor.to_period("M")

    if preset is TimeRange.WEEKLY:
        return DateInterval(anchor - pd.Timedelta(days=6), anchor)

    if preset is TimeRange.MONTHLY:
        start = month.start_time
    else:
        start = (month - 2).start_time
    end = month.end_time.normalize()
    if _clips(preset, clip_to_today):
        end = min(end, anchor)
    return DateInterval(start, end)


def interval_days(interval: DateInterval) -> list[pd.Timestamp]:
    """Return every calendar day in ``interval`` in ascending order."""

    if interval.is_empty:
        return []
    return list(pd.date_range(interval.start, interval.end, freq="D"))
