"""Two-person team standings for a championship event.

Members are looked up by (class, member row id) in the event's standard
three-leg results; Long-Range legs never count for teams.

Ranking (desc unless noted):
  team total > team tens > better member total > better member tens
  > other member total > team name (asc, ordinal).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Iterable, Mapping

from .aggregation import EventAggregate, aggregate_event_rows, index_row_ids
from .catalog import CompetitionDay
from .classes import class_name, sort_classes
from .config import EngineConfig, get_config
from .ranking import assign_shared_ranks
from .validation import STANDARD_LEGS, is_valid_member_name

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TeamMember:
    member_id: str
    first_name: str
    last_name: str
    total: int
    tens: int
    resolved: bool
    valid: bool

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class Team:
    class_id: str
    team_name: str
    member1: TeamMember
    member2: TeamMember
    team_total: int
    team_tens: int
    valid_team: bool
    rank: int | None = None

    @property
    def better_member(self) -> TeamMember:
        if (self.member2.total, self.member2.tens) > (self.member1.total, self.member1.tens):
            return self.member2
        return self.member1

    @property
    def other_member(self) -> TeamMember:
        return self.member2 if self.better_member is self.member1 else self.member1


@dataclass(frozen=True)
class TeamClassTable:
    class_id: str
    class_name: str
    teams: tuple[Team, ...]


@dataclass(frozen=True)
class TeamTables:
    day: str
    description: str
    classes: dict[str, TeamClassTable]


def _member_id(value: Any) -> str:
    return "" if value is None else str(value).strip()


def resolve_member(
    class_id: str,
    member_id: str,
    index: Mapping[tuple[str, str], Any],
    config: EngineConfig,
) -> TeamMember:
    record = index.get((class_id, member_id)) if member_id else None
    if record is None:
        logger.info(f"Team member {member_id!r} not found in class {class_id}")
        return TeamMember(
            member_id=member_id,
            first_name="",
            last_name="",
            total=0,
            tens=0,
            resolved=False,
            valid=False,
        )
    total, tens = record.total, record.sum_x
    valid = total >= 0 and is_valid_member_name(record.first_name, record.last_name, config)
    return TeamMember(
        member_id=member_id,
        first_name=record.first_name,
        last_name=record.last_name,
        total=total,
        tens=tens,
        resolved=True,
        valid=valid,
    )


def build_team(
    roster_row: Mapping[str, Any],
    index: Mapping[tuple[str, str], Any],
    config: EngineConfig | None = None,
) -> Team | None:
    """Build one team from a roster row; None when the row has no team name or class."""
    config = config or get_config()
    team_name = str(roster_row.get("team_name") or "").strip()
    class_id = str(roster_row.get("class_id") or "").strip()
    if not team_name or not class_id:
        logger.warning(f"Skipping roster row without team name or class: {dict(roster_row)!r}")
        return None
    member1 = resolve_member(class_id, _member_id(roster_row.get("member1_id")), index, config)
    member2 = resolve_member(class_id, _member_id(roster_row.get("member2_id")), index, config)
    return Team(
        class_id=class_id,
        team_name=team_name,
        member1=member1,
        member2=member2,
        team_total=member1.total + member2.total,
        team_tens=member1.tens + member2.tens,
        valid_team=member1.valid and member2.valid,
    )


def _team_levels(team: Team) -> tuple[int, int, int, int, int]:
    better, other = team.better_member, team.other_member
    return (team.team_total, team.team_tens, better.total, better.tens, other.total)


def rank_teams(teams: Iterable[Team]) -> list[Team]:
    ordered = sorted(teams, key=lambda t: (tuple(-v for v in _team_levels(t)), t.team_name))
    ranks = assign_shared_ranks(ordered, _team_levels)
    return [replace(team, rank=rank) for team, rank in zip(ordered, ranks)]


def compute_team_tables(
    event: CompetitionDay,
    roster: Iterable[Mapping[str, Any]],
    aggregate: EventAggregate,
    config: EngineConfig | None = None,
) -> TeamTables:
    """
    Rank declared teams of one event per class.

    Args:
      event: the championship day the roster belongs to.
      roster: team rows (class_id, team_name, member1_id, member2_id).
      aggregate: standard-leg aggregate of that day's rows.
    """
    config = config or get_config()
    if event.is_long_range:
        logger.warning(f"Team standings are not computed for Long-Range day {event.day}")
        return TeamTables(day=event.day, description=event.description, classes={})

    index = index_row_ids(aggregate)
    by_class: dict[str, list[Team]] = {}
    for row in roster:
        team = build_team(row, index, config)
        if team is not None:
            by_class.setdefault(team.class_id, []).append(team)

    classes = {
        class_id: TeamClassTable(
            class_id=class_id,
            class_name=class_name(class_id, config=config),
            teams=tuple(rank_teams(by_class[class_id])),
        )
        for class_id in sort_classes(by_class)
    }
    return TeamTables(day=event.day, description=event.description, classes=classes)


def build_team_tables(
    event: CompetitionDay,
    roster: Iterable[Mapping[str, Any]],
    rows: Iterable[Mapping[str, Any]],
    config: EngineConfig | None = None,
) -> TeamTables:
    """Same as compute_team_tables, starting from the day's raw result rows."""
    return compute_team_tables(event, roster, aggregate_event_rows(rows, STANDARD_LEGS), config)


# ==================== REPORTING ====================


def flatten_teams(tables: TeamTables) -> list[dict[str, Any]]:
    """One flat record per team, in class then rank order."""
    flat: list[dict[str, Any]] = []
    for class_id, table in tables.classes.items():
        for team in table.teams:
            record: dict[str, Any] = {
                "class_id": class_id,
                "class_name": table.class_name,
                "rank": team.rank,
                "team_name": team.team_name,
                "team_total": team.team_total,
                "team_tens": team.team_tens,
                "valid_team": team.valid_team,
            }
            for prefix, member in (("member1", team.member1), ("member2", team.member2)):
                record.update(
                    {
                        f"{prefix}_id": member.member_id,
                        f"{prefix}_first_name": member.first_name,
                        f"{prefix}_last_name": member.last_name,
                        f"{prefix}_full_name": member.full_name,
                        f"{prefix}_total": member.total,
                        f"{prefix}_tens": member.tens,
                        f"{prefix}_valid": member.valid,
                    }
                )
            flat.append(record)
    return flat


def _mean(values: list[int]) -> float:
    return round(sum(values) / len(values), 1) if values else 0.0


def team_statistics(tables: TeamTables) -> dict[str, Any]:
    all_scores: list[int] = []
    breakdown: dict[str, dict[str, Any]] = {}
    total_tens = 0
    valid_teams = 0
    for class_id, table in tables.classes.items():
        scores = [team.team_total for team in table.teams]
        tens = [team.team_tens for team in table.teams]
        class_valid = sum(1 for team in table.teams if team.valid_team)
        all_scores.extend(scores)
        total_tens += sum(tens)
        valid_teams += class_valid
        breakdown[class_id] = {
            "name": table.class_name,
            "teams": len(table.teams),
            "valid_teams": class_valid,
            "min_score": min(scores) if scores else 0,
            "max_score": max(scores) if scores else 0,
            "avg_score": _mean(scores),
            "total_tens": sum(tens),
            "avg_tens": _mean(tens),
        }
    return {
        "total_classes": len(tables.classes),
        "total_teams": len(all_scores),
        "valid_teams": valid_teams,
        "total_participants": 2 * len(all_scores),
        "total_tens": total_tens,
        "classes_breakdown": breakdown,
        "score_ranges": {
            "min": min(all_scores) if all_scores else None,
            "max": max(all_scores) if all_scores else None,
            "average": _mean(all_scores),
        },
    }


def search_teams(
    tables: TeamTables,
    *,
    class_id: str | None = None,
    team_name: str | None = None,
    member_name: str | None = None,
    min_score: int | None = None,
    max_score: int | None = None,
    max_rank: int | None = None,
    min_tens: int | None = None,
) -> list[dict[str, Any]]:
    """Filter flattened teams; name filters are case-insensitive substrings."""
    found = []
    for record in flatten_teams(tables):
        if class_id and record["class_id"] != str(class_id):
            continue
        if team_name and team_name.casefold() not in record["team_name"].casefold():
            continue
        if member_name:
            needle = member_name.casefold()
            if (
                needle not in record["member1_full_name"].casefold()
                and needle not in record["member2_full_name"].casefold()
            ):
                continue
        if min_score is not None and record["team_total"] < min_score:
            continue
        if max_score is not None and record["team_total"] > max_score:
            continue
        if max_rank is not None and record["rank"] > max_rank:
            continue
        if min_tens is not None and record["team_tens"] < min_tens:
            continue
        found.append(record)
    return found
