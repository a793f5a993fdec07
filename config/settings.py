"""Centralised configuration handling for the farm finance engine."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_HISTORY_DAYS = 180
DEFAULT_PAGE_SIZE = 7
UNCATEGORIZED_LABEL = "Uncategorized"


class Settings(BaseSettings):
    """Engine settings sourced from ``FARM_FINANCE_*`` environment variables."""

    history_days: int = Field(default=DEFAULT_HISTORY_DAYS, ge=1)
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1)
    uncategorized_label: str = UNCATEGORIZED_LABEL
    unknown_category_policy: Literal["exclude", "operating"] = "exclude"
    expense_profile: Literal["poultry", "fishery"] = "poultry"
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="FARM_FINANCE_", env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """Load and cache engine settings."""

    return Settings()
