"""Type definitions for rows supplied by storage collaborators."""
from __future__ import annotations

from typing import Any, Optional, TypedDict, Union

Numeric = Union[int, float, str, None]


class ResultRowDict(TypedDict, total=False):
    """
    One raw row of an event result table.

    All fields are optional (total=False): storage may omit columns, and the
    aggregator treats a missing score/X-count as 0 and a missing precision as absent.
    Leg fields are numbered ``score_N`` / ``x_N`` / ``precision_N``
    (1-3 standard legs, plus the Long-Range leg).
    """
    id: Any  # storage row id, referenced by team rosters
    class_id: Any
    first_name: Optional[str]
    last_name: Optional[str]

    score_1: Numeric
    x_1: Numeric
    precision_1: Numeric
    score_2: Numeric
    x_2: Numeric
    precision_2: Numeric
    score_3: Numeric
    x_3: Numeric
    precision_3: Numeric

    # Long Range leg
    score_4: Numeric
    x_4: Numeric
    precision_4: Numeric


class CatalogRowDict(TypedDict, total=False):
    """An entry of the competition catalog (one per event day)."""
    day: Any  # YYYYMMDD, int or str
    description: Optional[str]


class RosterRowDict(TypedDict, total=False):
    """A declared two-person team for one championship day."""
    class_id: Any
    team_name: Optional[str]
    member1_id: Any
    member2_id: Any
