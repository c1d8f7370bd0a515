"""Per-event results: class statistics, competition ranks and display order.

Ranks always come from the canonical comparator:
- total (desc), then summed X-count (desc),
- then average precision (asc, undefined last),
- then last name, first name (ordinal, asc).
A caller-chosen display sort only reorders rows; it never changes a rank.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Iterable, Mapping, Sequence

from .aggregation import EventAggregate, EventResultRecord, Leg, aggregate_event_rows
from .classes import class_name
from .config import EngineConfig, get_config
from .identity import IdentityMemo
from .ranking import assign_shared_ranks, nulls_last
from .validation import STANDARD_LEGS, validate_sort

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParticipantClassStat:
    class_id: str
    key: str
    first_name: str
    last_name: str
    legs: tuple[Leg, ...]
    total: int
    sum_x: int
    avg_precision: float | None
    rank: int | None = None


@dataclass(frozen=True)
class ClassTable:
    class_id: str
    class_name: str
    rows: tuple[ParticipantClassStat, ...]


@dataclass(frozen=True)
class EventTables:
    day: str
    description: str
    is_championship: bool
    sort: str
    direction: str
    classes: dict[str, ClassTable]
    is_long_range: bool = False
    label: str | None = None

    @property
    def participant_count(self) -> int:
        return sum(len(table.rows) for table in self.classes.values())


def _average_precision(legs: Sequence[Leg]) -> float | None:
    # Defined only when every leg has a precision value.
    if not legs or any(leg.precision is None for leg in legs):
        return None
    return sum(float(leg.precision) for leg in legs) / len(legs)


def compute_participant_stat(record: EventResultRecord) -> ParticipantClassStat:
    return ParticipantClassStat(
        class_id=record.class_id,
        key=record.key,
        first_name=record.first_name,
        last_name=record.last_name,
        legs=record.legs,
        total=record.total,
        sum_x=record.sum_x,
        avg_precision=_average_precision(record.legs),
    )


def compute_class_stats(records: Iterable[EventResultRecord]) -> list[ParticipantClassStat]:
    """Unranked statistics for one class; participants with total <= 0 are dropped."""
    stats = [compute_participant_stat(record) for record in records]
    return [stat for stat in stats if stat.total > 0]


def _ranking_sort_key(stat: ParticipantClassStat) -> tuple:
    return (
        -stat.total,
        -stat.sum_x,
        nulls_last(stat.avg_precision),
        stat.last_name,
        stat.first_name,
    )


def _ranking_signature(stat: ParticipantClassStat) -> tuple:
    """Numeric levels only: names order a tie but never break it."""
    return (stat.total, stat.sum_x, stat.avg_precision)


def assign_competition_ranks(stats: Iterable[ParticipantClassStat]) -> list[ParticipantClassStat]:
    """Sort by the canonical comparator and assign shared-on-tie ranks."""
    ordered = sorted(stats, key=_ranking_sort_key)
    ranks = assign_shared_ranks(ordered, _ranking_signature)
    return [replace(stat, rank=rank) for stat, rank in zip(ordered, ranks)]


def column_value(stat: ParticipantClassStat, column: str) -> Any:
    if column in {"rank", "total", "sum_x", "avg_precision", "first_name", "last_name"}:
        return getattr(stat, column)
    prefix, _, number = column.rpartition("_")
    if prefix in {"score", "x", "precision"} and number.isdigit():
        leg = next((leg for leg in stat.legs if leg.number == int(number)), None)
        if leg is None:
            return None
        if prefix == "score":
            return leg.score
        if prefix == "x":
            return leg.x_count
        return leg.precision
    raise KeyError(column)


def sort_for_display(
    stats: Sequence[ParticipantClassStat],
    column: str,
    direction: str,
) -> list[ParticipantClassStat]:
    """
    Stable re-sort by a validated column; undefined values last in both
    directions, equal values by last name then first name. Ranks are untouched.
    """
    by_name = sorted(stats, key=lambda s: (s.last_name, s.first_name))
    defined = [s for s in by_name if column_value(s, column) is not None]
    undefined = [s for s in by_name if column_value(s, column) is None]
    # sorted() keeps equal elements in input (name) order, also with reverse=True.
    defined = sorted(defined, key=lambda s: column_value(s, column), reverse=(direction == "desc"))
    return defined + undefined


def rank_class(
    records: Iterable[EventResultRecord],
    column: str,
    direction: str,
) -> list[ParticipantClassStat]:
    ranked = assign_competition_ranks(compute_class_stats(records))
    return sort_for_display(ranked, column, direction)


def build_class_tables(
    aggregate: EventAggregate,
    sort: str | None,
    direction: str | None,
    leg_numbers: Sequence[int] = STANDARD_LEGS,
    config: EngineConfig | None = None,
) -> tuple[str, str, dict[str, ClassTable]]:
    config = config or get_config()
    column, direction = validate_sort(sort, direction, leg_numbers, config)
    classes: dict[str, ClassTable] = {}
    for class_id, records in aggregate.items():
        rows = rank_class(records.values(), column, direction)
        if not rows:
            continue
        classes[class_id] = ClassTable(
            class_id=class_id,
            class_name=class_name(class_id, config=config),
            rows=tuple(rows),
        )
    return column, direction, classes


def build_event_tables(
    day: str,
    rows: Iterable[Mapping[str, Any]],
    sort: str | None = None,
    direction: str | None = None,
    *,
    description: str = "",
    is_championship: bool = False,
    config: EngineConfig | None = None,
    memo: IdentityMemo | None = None,
) -> EventTables:
    """
    Build the per-class result tables of one (already validated) event day.

    Args:
      day: validated YYYYMMDD identifier.
      rows: raw result rows of that day.
      sort/direction: requested display order; invalid values fall back to defaults.
    """
    config = config or get_config()
    aggregate = aggregate_event_rows(rows, STANDARD_LEGS, memo)
    column, direction, classes = build_class_tables(aggregate, sort, direction, STANDARD_LEGS, config)
    logger.debug(f"Event {day}: {len(classes)} class table(s)")
    return EventTables(
        day=day,
        description=description,
        is_championship=is_championship,
        sort=column,
        direction=direction,
        classes=classes,
    )
