"""Fixed-size paging of chart intervals and per-chart view state."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Sequence, TypeVar

import pandas as pd

from analytics.windowing import ClipPolicy, TimeRange, interval_days, select_interval
from config import DEFAULT_PAGE_SIZE, get_settings
from core.models import DateInterval

__all__ = ["paginate", "total_pages", "clamp_page", "ChartViewState"]

T = TypeVar("T")


def _check_page_size(page_size: int) -> None:
    if page_size < 1:
        raise ValueError("page_size must be at least 1")


def paginate(days: Sequence[T], page: int, page_size: int = DEFAULT_PAGE_SIZE) -> list[T]:
    """Return ``days[page * page_size : page * page_size + page_size]``.

    Pages outside ``[0, total_pages - 1]`` give an empty list; callers clamp
    with :func:`clamp_page` first when they need a non-empty page.
    """

    _check_page_size(page_size)
    if page < 0:
        return []
    start = page * page_size
    return list(days[start : start + page_size])


def total_pages(n_days: int, page_size: int = DEFAULT_PAGE_SIZE) -> int:
    _check_page_size(page_size)
    return math.ceil(max(n_days, 0) / page_size)


def clamp_page(page: int, pages: int) -> int:
    """Clamp ``page`` into ``[0, pages - 1]`` (``0`` when there are no pages)."""

    if pages <= 0:
        return 0
    return min(max(page, 0), pages - 1)


@dataclass(frozen=True)
class ChartViewState:
    """Ephemeral selection state of one chart.

    Every ``with_*`` method returns a new state; changing the metrics, the
    preset or the custom range resets the page to 0.
    """

    metrics: tuple[str, ...] = ("Revenue",)
    preset: TimeRange = TimeRange.MONTHLY
    custom_start: pd.Timestamp | None = None
    custom_end: pd.Timestamp | None = None
    page: int = 0
    page_size: int = field(default_factory=lambda: get_settings().page_size)
    clip_to_today: ClipPolicy = False

    def with_metrics(self, *metrics: str) -> "ChartViewState":
        return replace(self, metrics=tuple(metrics), page=0)

    def with_preset(self, preset: TimeRange | str) -> "ChartViewState":
        return replace(self, preset=TimeRange(preset), page=0)

    def with_custom_range(
        self,
        start: pd.Timestamp | None,
        end: pd.Timestamp | None,
    ) -> "ChartViewState":
        return replace(self, custom_start=start, custom_end=end, page=0)

    def interval(self, today: date | str | pd.Timestamp, *, series_empty: bool = False) -> DateInterval:
        return select_interval(
            self.preset,
            self.custom_start,
            self.custom_end,
            today=today,
            clip_to_today=self.clip_to_today,
            series_empty=series_empty,
        )

    def days(self, today: date | str | pd.Timestamp, *, series_empty: bool = False) -> list[pd.Timestamp]:
        return interval_days(self.interval(today, series_empty=series_empty))

    def total_pages(self, today: date | str | pd.Timestamp, *, series_empty: bool = False) -> int:
        return total_pages(len(self.days(today, series_empty=series_empty)), self.page_size)

    def visible_days(self, today: date | str | pd.Timestamp, *, series_empty: bool = False) -> list[pd.Timestamp]:
        days = self.days(today, series_empty=series_empty)
        page = clamp_page(self.page, total_pages(len(days), self.page_size))
        return paginate(days, page, self.page_size)

    def next_page(self, today: date | str | pd.Timestamp) -> "ChartViewState":
        return replace(self, page=clamp_page(self.page + 1, self.total_pages(today)))

    def previous_page(self, today: date | str | pd.Timestamp) -> "ChartViewState":
        return replace(self, page=clamp_page(self.page - 1, self.total_pages(today)))
