"""Long-Range variant: a virtual single-distance event derived from a real day.

The virtual day is the source day + 1 calendar day. Its results use only the
configured Long-Range leg, so the average precision is that leg's own value
and only that leg's columns can be sorted on. Long-Range results never feed
the annual ranking or team standings.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from .aggregation import aggregate_event_rows
from .catalog import CompetitionDay
from .config import EngineConfig, get_config
from .event_ranking import EventTables, build_class_tables
from .identity import IdentityMemo
from .validation import shift_day

logger = logging.getLogger(__name__)


def long_range_day(day: str) -> str:
    return shift_day(day, 1)


def long_range_label(is_championship: bool, config: EngineConfig | None = None) -> str:
    config = config or get_config()
    if is_championship:
        return config.long_range_championship_label
    return config.long_range_other_label


def long_range_event(source: CompetitionDay, config: EngineConfig | None = None) -> CompetitionDay:
    if source.is_long_range:
        raise ValueError(f"{source.day} is already a Long-Range day")
    label = long_range_label(source.is_championship, config)
    return CompetitionDay(
        day=long_range_day(source.day),
        description=f"{source.description} {label}".strip(),
        is_championship=source.is_championship,
        is_long_range=True,
        source_day=source.day,
        label=label,
    )


def with_long_range_days(
    catalog: Iterable[CompetitionDay],
    config: EngineConfig | None = None,
    *,
    championship_only: bool = True,
) -> list[CompetitionDay]:
    """Catalog extended with the virtual day of each (championship) event."""
    out: list[CompetitionDay] = []
    for event in catalog:
        out.append(event)
        if event.is_long_range:
            continue
        if championship_only and not event.is_championship:
            continue
        out.append(long_range_event(event, config))
    return sorted(out, key=lambda e: (e.day, e.is_long_range))


def build_long_range_tables(
    source: CompetitionDay,
    rows: Iterable[Mapping[str, Any]],
    sort: str | None = None,
    direction: str | None = None,
    *,
    config: EngineConfig | None = None,
    memo: IdentityMemo | None = None,
) -> EventTables:
    """
    Per-class Long-Range tables for the virtual day of ``source``.

    Args:
      source: the real event day whose rows carry the Long-Range leg.
      rows: raw result rows of the source day.
    """
    config = config or get_config()
    virtual = long_range_event(source, config)
    legs = (config.long_range_leg,)
    aggregate = aggregate_event_rows(rows, legs, memo)
    column, direction, classes = build_class_tables(aggregate, sort, direction, legs, config)
    logger.debug(f"Long-Range {virtual.day} ({virtual.label}): {len(classes)} class table(s)")
    return EventTables(
        day=virtual.day,
        description=virtual.description,
        is_championship=source.is_championship,
        sort=column,
        direction=direction,
        classes=classes,
        is_long_range=True,
        label=virtual.label,
    )
