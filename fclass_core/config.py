"""Engine configuration.

Values can be overridden through ``FCLASS_*`` environment variables
(e.g. ``FCLASS_MIN_YEAR=2021``) or by passing keyword arguments.
"""
from __future__ import annotations

import logging
import re
from datetime import date
from functools import lru_cache
from typing import Dict, List, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_CLASS_NAMES: Dict[str, str] = {
    "1": "FTR",
    "2": "Open",
    "3": "Magnum",
    "4": "Semi-Auto",
    "5": "Semi-Auto Open",
    "6": "Sniper",
    "7": "Sniper Open",
    "8": "Ultra Magnum",
}


class EngineConfig(BaseSettings):
    """Settings for validation, ranking rules and the Long-Range variant."""

    model_config = SettingsConfigDict(
        env_prefix="FCLASS_", case_sensitive=False, frozen=True
    )

    # Day identifiers
    min_year: int = Field(default=2020, ge=1900, le=9999, description="Earliest accepted year")
    max_year: Optional[int] = Field(
        default=None, ge=1900, le=9999, description="Latest accepted year (None = current year + 1)"
    )

    # Event catalog
    championship_phrase: str = Field(
        default="EUROPEAN CHAMPIONSHIPS", min_length=1, description="Marks a championship event"
    )
    excluded_keywords: List[str] = Field(default_factory=lambda: ["22lr", "test"])

    # Display sort defaults
    default_sort: str = Field(default="rank", min_length=1)
    default_direction: str = Field(default="asc")

    # Annual ranking
    min_championship_events: int = Field(default=1, ge=0, le=50)
    min_other_events: int = Field(default=2, ge=0, le=50)
    track_tens: bool = True

    # Teams
    name_pattern: str = Field(default=r"^(?:[^\W\d_]|[\s\-.']){1,50}$")

    class_names: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_CLASS_NAMES))

    # Long Range
    long_range_leg: int = Field(default=4, ge=1, le=9)
    long_range_championship_label: str = "1000m"
    long_range_other_label: str = "1000y"

    # Cache
    cache_enabled: bool = True
    cache_ttl: int = Field(default=300, ge=0, le=86400)
    cache_prefix: str = "fclass_v9_"

    @field_validator("default_direction")
    @classmethod
    def validate_direction(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in {"asc", "desc"}:
            raise ValueError("default_direction must be 'asc' or 'desc'")
        return v

    @field_validator("excluded_keywords")
    @classmethod
    def normalize_keywords(cls, v: List[str]) -> List[str]:
        return [kw.strip().lower() for kw in v if kw and kw.strip()]

    @field_validator("name_pattern")
    @classmethod
    def validate_name_pattern(cls, v: str) -> str:
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"name_pattern is not a valid regex: {e}")
        return v

    @model_validator(mode="after")
    def validate_year_range(self) -> "EngineConfig":
        if self.max_year is not None and self.max_year < self.min_year:
            raise ValueError("max_year must be >= min_year")
        return self

    def effective_max_year(self, today: date | None = None) -> int:
        if self.max_year is not None:
            return self.max_year
        return (today or date.today()).year + 1


@lru_cache(maxsize=1)
def get_config() -> EngineConfig:
    """Default configuration, read once from the environment."""
    config = EngineConfig()
    logger.debug(f"Loaded engine config: min_year={config.min_year} max_year={config.max_year}")
    return config
