from .aggregation import (
    EventResultRecord,
    Leg,
    ParticipantTotals,
    aggregate_event_rows,
    event_totals,
)
from .annual import (
    AnnualCell,
    AnnualClassTable,
    AnnualParticipantRecord,
    AnnualRanking,
    build_annual_ranking,
    compute_annual_ranking,
    rank_annual_records,
)
from .cache import InMemoryTTLCache, NullCache, ResultCache, cache_key
from .catalog import CompetitionDay, build_catalog, championship_days, latest_year
from .classes import class_name, sort_classes
from .config import EngineConfig, get_config
from .errors import (
    DataIntegrityError,
    Found,
    Invalid,
    Lookup,
    NotFound,
    NotFoundError,
    ResultsError,
    ValidationError,
)
from .event_ranking import (
    ClassTable,
    EventTables,
    ParticipantClassStat,
    assign_competition_ranks,
    build_event_tables,
    compute_class_stats,
    sort_for_display,
)
from .identity import IdentityMemo, ParticipantIdentity, participant_key, resolve_identity
from .long_range import (
    build_long_range_tables,
    long_range_day,
    long_range_event,
    long_range_label,
    with_long_range_days,
)
from .service import CatalogSource, ResultSource, ResultsService
from .teams import (
    Team,
    TeamClassTable,
    TeamMember,
    TeamTables,
    build_team_tables,
    compute_team_tables,
    flatten_teams,
    rank_teams,
    search_teams,
    team_statistics,
)
from .validation import normalize_day, validate_day, validate_sort, validate_year

__all__ = [
    "AnnualCell",
    "AnnualClassTable",
    "AnnualParticipantRecord",
    "AnnualRanking",
    "CatalogSource",
    "ClassTable",
    "CompetitionDay",
    "DataIntegrityError",
    "EngineConfig",
    "EventResultRecord",
    "EventTables",
    "Found",
    "IdentityMemo",
    "InMemoryTTLCache",
    "Invalid",
    "Leg",
    "Lookup",
    "NotFound",
    "NotFoundError",
    "NullCache",
    "ParticipantClassStat",
    "ParticipantIdentity",
    "ParticipantTotals",
    "ResultCache",
    "ResultSource",
    "ResultsError",
    "ResultsService",
    "Team",
    "TeamClassTable",
    "TeamMember",
    "TeamTables",
    "ValidationError",
    "aggregate_event_rows",
    "assign_competition_ranks",
    "build_annual_ranking",
    "build_catalog",
    "build_event_tables",
    "build_long_range_tables",
    "build_team_tables",
    "cache_key",
    "championship_days",
    "class_name",
    "compute_annual_ranking",
    "compute_class_stats",
    "compute_team_tables",
    "event_totals",
    "flatten_teams",
    "get_config",
    "latest_year",
    "long_range_day",
    "long_range_event",
    "long_range_label",
    "normalize_day",
    "participant_key",
    "rank_annual_records",
    "rank_teams",
    "resolve_identity",
    "search_teams",
    "sort_classes",
    "sort_for_display",
    "team_statistics",
    "validate_day",
    "validate_sort",
    "validate_year",
    "with_long_range_days",
]
