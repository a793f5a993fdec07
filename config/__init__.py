"""Engine configuration utilities."""

from .settings import (
    DEFAULT_HISTORY_DAYS,
    DEFAULT_PAGE_SIZE,
    UNCATEGORIZED_LABEL,
    Settings,
    get_settings,
)

__all__ = [
    "DEFAULT_HISTORY_DAYS",
    "DEFAULT_PAGE_SIZE",
    "UNCATEGORIZED_LABEL",
    "Settings",
    "get_settings",
]
