"""Annual ranking: qualification, counted-event selection and tie-break chain.

A participant qualifies in a class when they scored (> 0) in at least
``min_championship_events`` championship events and ``min_other_events``
other events of the year. The annual total is the best championship score plus
the two best other scores. Equal-scoring candidate events are picked by
earliest day.

Ranking (desc unless noted):
  total > tens (if tracked) > championship score > best other > second other
  > number of scored starts > last name, first name (asc).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Iterable, Mapping, Sequence

from .aggregation import EventAggregate, ParticipantTotals, aggregate_event_rows, event_totals
from .catalog import CompetitionDay
from .classes import class_name, sort_classes
from .config import EngineConfig, get_config
from .identity import IdentityMemo
from .ranking import assign_shared_ranks
from .validation import STANDARD_LEGS

logger = logging.getLogger(__name__)

CHAMPIONSHIP_PICKS = 1
OTHER_PICKS = 2


@dataclass(frozen=True)
class AnnualCell:
    day: str
    score: int | None
    tens: int | None
    selected: bool


@dataclass(frozen=True)
class AnnualParticipantRecord:
    class_id: str
    key: str
    first_name: str
    last_name: str
    qualified: bool
    championship_day: str | None
    other_days: tuple[str, ...]
    championship_score: int
    best_other_score: int
    second_other_score: int
    total: int
    tens: int
    starts: int
    championship_starts: int
    other_starts: int
    cells: tuple[AnnualCell, ...]
    rank: int | None = None

    def cell(self, day: str) -> AnnualCell | None:
        for cell in self.cells:
            if cell.day == day:
                return cell
        return None


@dataclass(frozen=True)
class AnnualClassTable:
    class_id: str
    class_name: str
    rows: tuple[AnnualParticipantRecord, ...]


@dataclass(frozen=True)
class AnnualRanking:
    year: int
    days: tuple[str, ...]
    classes: dict[str, AnnualClassTable]
    total_events: int
    championship_events: int
    track_tens: bool


@dataclass(frozen=True)
class _Start:
    day: str
    is_championship: bool
    score: int
    tens: int


@dataclass
class _YearEntry:
    class_id: str
    key: str
    first_name: str
    last_name: str
    starts: list[_Start]


def _collect(
    events: Sequence[CompetitionDay],
    totals_by_day: Mapping[str, Mapping[str, Mapping[str, ParticipantTotals]]],
) -> dict[str, dict[str, _YearEntry]]:
    participants: dict[str, dict[str, _YearEntry]] = {}
    for event in events:
        for class_id, class_totals in totals_by_day.get(event.day, {}).items():
            bucket = participants.setdefault(class_id, {})
            for key, totals in class_totals.items():
                entry = bucket.get(key)
                if entry is None:
                    entry = bucket[key] = _YearEntry(
                        class_id=class_id,
                        key=key,
                        first_name=totals.first_name,
                        last_name=totals.last_name,
                        starts=[],
                    )
                entry.starts.append(
                    _Start(
                        day=event.day,
                        is_championship=event.is_championship,
                        score=totals.total,
                        tens=totals.tens,
                    )
                )
    return participants


def _best(starts: list[_Start], count: int) -> list[_Start]:
    # Stable: starts are in day order, so equal scores keep the earliest day first.
    return sorted(starts, key=lambda s: -s.score)[:count]


def score_participant(
    entry: _YearEntry,
    days: Sequence[str],
    config: EngineConfig,
) -> AnnualParticipantRecord:
    scored = [s for s in entry.starts if s.score > 0]
    championship = [s for s in scored if s.is_championship]
    other = [s for s in scored if not s.is_championship]
    qualified = (
        len(championship) >= config.min_championship_events
        and len(other) >= config.min_other_events
    )

    picked_championship = _best(championship, CHAMPIONSHIP_PICKS) if qualified else []
    picked_other = _best(other, OTHER_PICKS) if qualified else []
    selected = picked_championship + picked_other
    selected_days = {s.day for s in selected}

    by_day = {s.day: s for s in entry.starts}
    cells = tuple(
        AnnualCell(
            day=day,
            score=by_day[day].score if day in by_day else None,
            tens=by_day[day].tens if day in by_day else None,
            selected=day in selected_days,
        )
        for day in days
    )
    other_scores = [s.score for s in picked_other] + [0, 0]
    return AnnualParticipantRecord(
        class_id=entry.class_id,
        key=entry.key,
        first_name=entry.first_name,
        last_name=entry.last_name,
        qualified=qualified,
        championship_day=picked_championship[0].day if picked_championship else None,
        other_days=tuple(s.day for s in picked_other),
        championship_score=picked_championship[0].score if picked_championship else 0,
        best_other_score=other_scores[0],
        second_other_score=other_scores[1],
        total=sum(s.score for s in selected),
        tens=sum(s.tens for s in selected),
        starts=len(championship) + len(other),
        championship_starts=len(championship),
        other_starts=len(other),
        cells=cells,
    )


def _numeric_levels(record: AnnualParticipantRecord, track_tens: bool) -> tuple[int, ...]:
    levels = [record.total]
    if track_tens:
        levels.append(record.tens)
    levels.extend(
        (
            record.championship_score,
            record.best_other_score,
            record.second_other_score,
            record.starts,
        )
    )
    return tuple(levels)


def rank_annual_records(
    records: Iterable[AnnualParticipantRecord],
    track_tens: bool = True,
) -> list[AnnualParticipantRecord]:
    ordered = sorted(
        records,
        key=lambda r: (
            tuple(-v for v in _numeric_levels(r, track_tens)),
            r.last_name,
            r.first_name,
        ),
    )
    ranks = assign_shared_ranks(ordered, lambda r: _numeric_levels(r, track_tens))
    return [replace(record, rank=rank) for record, rank in zip(ordered, ranks)]


def compute_annual_ranking(
    year: int,
    events: Iterable[CompetitionDay],
    results_by_day: Mapping[str, EventAggregate],
    config: EngineConfig | None = None,
    *,
    include_unqualified: bool = False,
) -> AnnualRanking:
    """
    Rank every class of a year from per-day aggregated results.

    Args:
      year: ranking year (events of other years are ignored).
      events: catalog of the year; Long-Range virtual days are ignored and a
        repeated day counts once (first entry wins).
      results_by_day: day -> aggregated standard-leg results of that day.
      include_unqualified: append non-qualified participants (rank None) after
        the ranked ones.
    """
    config = config or get_config()
    by_day: dict[str, CompetitionDay] = {}
    for event in events:
        if event.is_long_range or event.year != year:
            continue
        if event.day in by_day:
            logger.warning(f"Duplicate event {event.day} in annual ranking, keeping the first")
            continue
        by_day[event.day] = event
    year_events = [by_day[day] for day in sorted(by_day)]
    days = tuple(e.day for e in year_events)
    totals_by_day = {
        day: event_totals(results_by_day[day]) for day in days if day in results_by_day
    }
    participants = _collect(year_events, totals_by_day)

    classes: dict[str, AnnualClassTable] = {}
    for class_id in sort_classes(participants):
        records = [
            score_participant(entry, days, config)
            for entry in participants[class_id].values()
        ]
        qualified = [r for r in records if r.qualified]
        rows = rank_annual_records(qualified, config.track_tens)
        if include_unqualified:
            rows.extend(
                sorted(
                    (r for r in records if not r.qualified),
                    key=lambda r: (r.last_name, r.first_name),
                )
            )
        if not rows:
            continue
        classes[class_id] = AnnualClassTable(
            class_id=class_id,
            class_name=class_name(class_id, config=config),
            rows=tuple(rows),
        )

    logger.debug(
        f"Annual ranking {year}: {len(year_events)} event(s), {len(classes)} class(es)"
    )
    return AnnualRanking(
        year=year,
        days=days,
        classes=classes,
        total_events=len(year_events),
        championship_events=sum(1 for e in year_events if e.is_championship),
        track_tens=config.track_tens,
    )


def build_annual_ranking(
    year: int,
    events: Iterable[CompetitionDay],
    rows_by_day: Mapping[str, Iterable[Mapping[str, Any]]],
    config: EngineConfig | None = None,
    *,
    include_unqualified: bool = False,
) -> AnnualRanking:
    """Same as compute_annual_ranking, starting from raw rows per day."""
    memo = IdentityMemo()
    aggregates = {
        day: aggregate_event_rows(rows, STANDARD_LEGS, memo)
        for day, rows in rows_by_day.items()
    }
    return compute_annual_ranking(
        year, events, aggregates, config, include_unqualified=include_unqualified
    )
