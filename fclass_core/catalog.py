"""Competition days and the per-year event catalog."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Mapping

from .config import EngineConfig, get_config
from .validation import normalize_day

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompetitionDay:
    day: str
    description: str
    is_championship: bool
    is_long_range: bool = False
    # For a Long-Range virtual day: the real day it is derived from.
    source_day: str | None = None
    label: str | None = None

    @property
    def year(self) -> int:
        return int(self.day[:4])


def is_championship_description(description: str, config: EngineConfig | None = None) -> bool:
    config = config or get_config()
    return config.championship_phrase.casefold() in (description or "").casefold()


def is_excluded_description(description: str, config: EngineConfig | None = None) -> bool:
    config = config or get_config()
    lowered = (description or "").lower()
    return any(keyword in lowered for keyword in config.excluded_keywords)


def competition_day(day: str, description: str | None, config: EngineConfig | None = None) -> CompetitionDay:
    description = (description or "").strip()
    return CompetitionDay(
        day=day,
        description=description,
        is_championship=is_championship_description(description, config),
    )


def build_catalog(
    year: int,
    rows: Iterable[Mapping[str, Any]],
    config: EngineConfig | None = None,
) -> list[CompetitionDay]:
    """
    Turn raw catalog rows into the ordered event list of one year.

    Skips (and logs) blank descriptions, excluded keywords, invalid day
    identifiers and days of another year; one bad row never aborts the scan.
    """
    config = config or get_config()
    by_day: dict[str, CompetitionDay] = {}
    for row in rows:
        raw_day = row.get("day")
        description = str(row.get("description") or "").strip()
        if not description:
            continue
        if is_excluded_description(description, config):
            logger.debug(f"Excluded event {raw_day!r}: {description!r}")
            continue
        day = normalize_day(raw_day, config)
        if day is None:
            logger.warning(f"Skipping catalog entry with invalid day {raw_day!r}")
            continue
        if int(day[:4]) != year:
            continue
        if day in by_day:
            logger.warning(f"Duplicate catalog entry for {day}, keeping the first")
            continue
        by_day[day] = competition_day(day, description, config)
    return [by_day[day] for day in sorted(by_day)]


def latest_year(
    rows: Iterable[Mapping[str, Any]],
    config: EngineConfig | None = None,
    today: date | None = None,
) -> int:
    """
    Latest year with a valid event day, used as the default ranking year.

    Falls back to the current year (clamped to the accepted range) when no
    row carries a usable day.
    """
    config = config or get_config()
    years = [int(day[:4]) for day in (normalize_day(row.get("day"), config) for row in rows) if day]
    if years:
        return max(years)
    current = (today or date.today()).year
    return min(max(current, config.min_year), config.effective_max_year(today))


def championship_days(catalog: Iterable[CompetitionDay]) -> list[CompetitionDay]:
    return [event for event in catalog if event.is_championship and not event.is_long_range]


def find_day(catalog: Iterable[CompetitionDay], day: str) -> CompetitionDay | None:
    for event in catalog:
        if event.day == day:
            return event
    return None
