"""Results service: wires storage collaborators, cache and the ranking engine.

Every operation is recomputed from source rows (optionally memoized by the
injected cache). Expected "no data" outcomes come back as NotFound / Invalid
values; an invalid explicit day or year is rejected before storage is queried.
Storage failures are logged and degrade to "no data"; they are never cached.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Protocol

from .aggregation import EventAggregate, aggregate_event_rows
from .annual import AnnualRanking, compute_annual_ranking
from .cache import ResultCache, cache_key, cached
from .catalog import CompetitionDay, build_catalog, competition_day, find_day
from .config import EngineConfig, get_config
from .errors import Found, Invalid, Lookup, NotFound, ValidationError
from .event_ranking import EventTables, build_event_tables
from .identity import IdentityMemo
from .long_range import build_long_range_tables
from .teams import TeamTables, compute_team_tables, team_statistics
from .types import CatalogRowDict, ResultRowDict, RosterRowDict
from .validation import STANDARD_LEGS, validate_day, validate_year

logger = logging.getLogger(__name__)


class ResultSource(Protocol):
    def fetch_results(self, day: str) -> Iterable[ResultRowDict]:
        ...

    def fetch_roster(self, day: str) -> Iterable[RosterRowDict]:
        ...


class CatalogSource(Protocol):
    def fetch_catalog(self, year: int) -> Iterable[CatalogRowDict]:
        ...


@dataclass
class ResultsService:
    results: ResultSource
    catalog: CatalogSource
    cache: ResultCache | None = None
    config: EngineConfig = field(default_factory=get_config)

    # ---------- helpers ----------

    def _cache(self) -> ResultCache | None:
        return self.cache if self.config.cache_enabled else None

    def _key(self, name: str, *parts: Any) -> str:
        return cache_key(self.config.cache_prefix, name, *parts)

    def _event_for_day(self, day: str) -> CompetitionDay:
        event = find_day(self._load_catalog(int(day[:4])), day)
        return event if event is not None else competition_day(day, "", self.config)

    # ---------- catalog ----------

    def _load_catalog(self, year: int) -> list[CompetitionDay]:
        return cached(
            self._cache(),
            self._key("catalog", year),
            self.config.cache_ttl,
            lambda: build_catalog(year, self.catalog.fetch_catalog(year), self.config),
        )

    def event_catalog(self, year: int) -> list[CompetitionDay]:
        """Ordered events of a year; an invalid year or unreadable catalog yields an empty list."""
        try:
            year = validate_year(year, self.config)
        except ValidationError as e:
            logger.warning(f"Event catalog requested for invalid year: {e}")
            return []
        try:
            return self._load_catalog(year)
        except Exception as e:
            logger.warning(f"Event catalog for {year} unavailable: {e}")
            return []

    # ---------- per-event ----------

    def event_tables(self, day: Any, sort: str | None = None, direction: str | None = None) -> Lookup[EventTables]:
        try:
            day = validate_day(day, self.config)
        except ValidationError as e:
            return Invalid(str(e))

        def compute() -> EventTables | None:
            rows = list(self.results.fetch_results(day))
            if not rows:
                return None
            event = self._event_for_day(day)
            return build_event_tables(
                day,
                rows,
                sort,
                direction,
                description=event.description,
                is_championship=event.is_championship,
                config=self.config,
            )

        try:
            tables = cached(self._cache(), self._key("event", day, sort, direction), self.config.cache_ttl, compute)
        except Exception as e:
            logger.warning(f"Event tables for {day} unavailable: {e}")
            return NotFound(f"results for {day} unavailable")
        if tables is None:
            return NotFound(f"no results for {day}")
        return Found(tables)

    def long_range_tables(
        self, source_day: Any, sort: str | None = None, direction: str | None = None
    ) -> Lookup[EventTables]:
        """Long-Range tables of the virtual day derived from ``source_day``."""
        try:
            source_day = validate_day(source_day, self.config)
        except ValidationError as e:
            return Invalid(str(e))

        def compute() -> EventTables | None:
            rows = list(self.results.fetch_results(source_day))
            if not rows:
                return None
            tables = build_long_range_tables(
                self._event_for_day(source_day), rows, sort, direction, config=self.config
            )
            return tables if tables.classes else None

        try:
            tables = cached(
                self._cache(),
                self._key("long_range", source_day, sort, direction),
                self.config.cache_ttl,
                compute,
            )
        except Exception as e:
            logger.warning(f"Long-Range tables for {source_day} unavailable: {e}")
            return NotFound(f"Long-Range results for {source_day} unavailable")
        if tables is None:
            return NotFound(f"no Long-Range results for {source_day}")
        return Found(tables)

    # ---------- annual ----------

    def _load_year(self, events: list[CompetitionDay]) -> dict[str, EventAggregate]:
        memo = IdentityMemo()
        aggregates: dict[str, EventAggregate] = {}
        for event in events:
            try:
                rows = self.results.fetch_results(event.day)
                aggregates[event.day] = aggregate_event_rows(rows, STANDARD_LEGS, memo)
            except Exception as e:
                # One unreadable day must not abort the whole year.
                logger.warning(f"Skipping event {event.day} in annual ranking: {e}")
        return aggregates

    def annual_ranking(self, year: Any) -> Lookup[AnnualRanking]:
        try:
            year = validate_year(year, self.config)
        except ValidationError as e:
            return Invalid(str(e))

        def compute() -> AnnualRanking | None:
            events = self._load_catalog(year)
            if not events:
                return None
            aggregates = self._load_year(events)
            return compute_annual_ranking(year, events, aggregates, self.config)

        try:
            ranking = cached(self._cache(), self._key("annual", year), self.config.cache_ttl, compute)
        except Exception as e:
            logger.warning(f"Annual ranking for {year} unavailable: {e}")
            return NotFound(f"events of {year} unavailable")
        if ranking is None:
            return NotFound(f"no events in {year}")
        return Found(ranking)

    # ---------- teams ----------

    def team_tables(self, day: Any) -> Lookup[TeamTables]:
        try:
            day = validate_day(day, self.config)
        except ValidationError as e:
            return Invalid(str(e))

        def compute() -> TeamTables | None:
            roster = list(self.results.fetch_roster(day))
            if not roster:
                return None
            aggregate = aggregate_event_rows(self.results.fetch_results(day), STANDARD_LEGS)
            return compute_team_tables(event, roster, aggregate, self.config)

        try:
            event = self._event_for_day(day)
            if not event.is_championship:
                return NotFound(f"{day} is not a championship event")
            tables = cached(self._cache(), self._key("teams", day), self.config.cache_ttl, compute)
        except Exception as e:
            logger.warning(f"Team tables for {day} unavailable: {e}")
            return NotFound(f"teams for {day} unavailable")
        if tables is None:
            return NotFound(f"no teams declared for {day}")
        return Found(tables)

    def team_statistics(self, day: Any) -> Lookup[dict]:
        lookup = self.team_tables(day)
        if isinstance(lookup, Found):
            return Found(team_statistics(lookup.value))
        return lookup

    def championship_days(self, year: int) -> list[CompetitionDay]:
        return [e for e in self.event_catalog(year) if e.is_championship]

    def clear_cache(self) -> int:
        cache = self.cache
        return cache.clear() if cache is not None else 0
