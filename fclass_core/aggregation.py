"""Event result aggregation.

Raw rows of one event are grouped by (class, participant identity); rows of the
same group are merged into one EventResultRecord:
- scores and X-counts are summed per leg,
- precision keeps the minimum non-null value (lower = tighter group = better).

The output does not depend on row order: groups are keyed, the representative
spelling of a name is the smallest (last, first) pair seen, and classes and
participants are emitted in a canonical order.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Sequence

from .classes import sort_classes
from .identity import IdentityMemo
from .validation import STANDARD_LEGS, ValidatedResultRow, parse_result_row

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Leg:
    number: int
    score: int = 0
    x_count: int = 0
    precision: float | None = None


@dataclass(frozen=True)
class EventResultRecord:
    class_id: str
    key: str
    first_name: str
    last_name: str
    legs: tuple[Leg, ...]
    row_ids: tuple[str, ...] = ()

    @property
    def total(self) -> int:
        return sum(leg.score for leg in self.legs)

    @property
    def sum_x(self) -> int:
        return sum(leg.x_count for leg in self.legs)

    def leg(self, number: int) -> Leg | None:
        for leg in self.legs:
            if leg.number == number:
                return leg
        return None


@dataclass(frozen=True)
class ParticipantTotals:
    """Raw per-event total/X-count of one participant (no zero filtering)."""
    class_id: str
    key: str
    first_name: str
    last_name: str
    total: int
    tens: int


# class_id -> identity key -> record
EventAggregate = dict[str, dict[str, EventResultRecord]]


@dataclass
class _Accumulator:
    class_id: str
    key: str
    names: set[tuple[str, str]]
    scores: dict[int, int]
    x_counts: dict[int, int]
    precisions: dict[int, float | None]
    row_ids: set[str] = field(default_factory=set)

    def merge(self, row: ValidatedResultRow) -> None:
        self.names.add((row.last_name, row.first_name))
        if row.row_id is not None:
            self.row_ids.add(row.row_id)
        for number, leg in row.legs.items():
            self.scores[number] += leg.score
            self.x_counts[number] += leg.x_count
            if leg.precision is not None:
                current = self.precisions[number]
                if current is None or leg.precision < current:
                    self.precisions[number] = leg.precision

    def freeze(self) -> EventResultRecord:
        last_name, first_name = min(self.names)
        return EventResultRecord(
            class_id=self.class_id,
            key=self.key,
            first_name=first_name,
            last_name=last_name,
            legs=tuple(
                Leg(
                    number=n,
                    score=self.scores[n],
                    x_count=self.x_counts[n],
                    precision=self.precisions[n],
                )
                for n in sorted(self.scores)
            ),
            row_ids=tuple(sorted(self.row_ids)),
        )


def _start(row: ValidatedResultRow, key: str) -> _Accumulator:
    acc = _Accumulator(
        class_id=row.class_id,
        key=key,
        names={(row.last_name, row.first_name)},
        scores={n: leg.score for n, leg in row.legs.items()},
        x_counts={n: leg.x_count for n, leg in row.legs.items()},
        precisions={n: leg.precision for n, leg in row.legs.items()},
    )
    if row.row_id is not None:
        acc.row_ids.add(row.row_id)
    return acc


def aggregate_event_rows(
    rows: Iterable[Mapping[str, Any]],
    leg_numbers: Sequence[int] = STANDARD_LEGS,
    memo: IdentityMemo | None = None,
) -> EventAggregate:
    """
    Merge raw rows of one event into one record per (class, participant).

    Args:
      rows: raw result rows (see types.ResultRowDict).
      leg_numbers: legs to read; (1, 2, 3) standard, a single leg for Long Range.
      memo: optional identity memo shared across calls of one request.
    """
    memo = memo if memo is not None else IdentityMemo()
    groups: dict[tuple[str, str], _Accumulator] = {}
    dropped = 0

    for raw in rows:
        row = parse_result_row(dict(raw), leg_numbers)
        key = memo.key(row.first_name, row.last_name)
        if key is None:
            dropped += 1
            continue
        group_key = (row.class_id, key)
        acc = groups.get(group_key)
        if acc is None:
            groups[group_key] = _start(row, key)
        else:
            acc.merge(row)

    if dropped:
        logger.debug(f"Dropped {dropped} row(s) without participant names")

    by_class: dict[str, list[_Accumulator]] = {}
    for (class_id, _), acc in groups.items():
        by_class.setdefault(class_id, []).append(acc)

    out: EventAggregate = {}
    for class_id in sort_classes(by_class):
        accs = sorted(by_class[class_id], key=lambda a: a.key)
        out[class_id] = {acc.key: acc.freeze() for acc in accs}
    return out


def event_totals(aggregate: EventAggregate) -> dict[str, dict[str, ParticipantTotals]]:
    """Per-class raw totals/tens used by the annual scorer and team ranker."""
    out: dict[str, dict[str, ParticipantTotals]] = {}
    for class_id, records in aggregate.items():
        out[class_id] = {
            key: ParticipantTotals(
                class_id=class_id,
                key=key,
                first_name=record.first_name,
                last_name=record.last_name,
                total=record.total,
                tens=record.sum_x,
            )
            for key, record in records.items()
        }
    return out


def index_row_ids(aggregate: EventAggregate) -> dict[tuple[str, str], EventResultRecord]:
    """Map (class_id, storage row id) to the merged record containing that row."""
    index: dict[tuple[str, str], EventResultRecord] = {}
    for class_id, records in aggregate.items():
        for record in records.values():
            for row_id in record.row_ids:
                index[(class_id, row_id)] = record
    return index
