"""
Input validation: day identifiers, result rows and sort requests.
Result rows are parsed with Pydantic v2 at the aggregator boundary.
"""

import logging
import math
import re
from datetime import date, timedelta
from typing import Any, Dict, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from .config import EngineConfig, get_config
from .errors import DataIntegrityError, ValidationError

logger = logging.getLogger(__name__)

DAY_PATTERN = re.compile(r"^\d{8}$")
# Storage objects are named after the day; nothing else may reach a query.
SAFE_IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z0-9_]{1,64}$")

STANDARD_LEGS: Tuple[int, ...] = (1, 2, 3)

# ==================== DAY IDENTIFIERS ====================


def day_to_date(day: str) -> date:
    return date(int(day[0:4]), int(day[4:6]), int(day[6:8]))


def date_to_day(value: date) -> str:
    return value.strftime("%Y%m%d")


def shift_day(day: str, days: int) -> str:
    return date_to_day(day_to_date(day) + timedelta(days=days))


def validate_day(day: Any, config: EngineConfig | None = None) -> str:
    """
    Validate an event day identifier (YYYYMMDD).

    Returns:
        str: The validated identifier

    Raises:
        ValidationError: If the value is not 8 digits, not a calendar date,
            outside the accepted year range, or not a safe storage identifier
    """
    config = config or get_config()
    if isinstance(day, bool) or day is None:
        raise ValidationError("invalid_day_format", "day must be an 8-digit string")
    day = str(day).strip()

    if not DAY_PATTERN.match(day) or not day.isascii():
        raise ValidationError("invalid_day_format", f"day must be YYYYMMDD, got {day!r}")

    try:
        parsed = day_to_date(day)
    except ValueError:
        raise ValidationError("invalid_day_date", f"{day} is not a calendar date")

    max_year = config.effective_max_year()
    if parsed.year < config.min_year or parsed.year > max_year:
        raise ValidationError(
            "day_out_of_range",
            f"year {parsed.year} outside {config.min_year}-{max_year}",
        )

    if not SAFE_IDENTIFIER_PATTERN.match(day):
        raise ValidationError("unsafe_identifier", day)

    return day


def normalize_day(day: Any, config: EngineConfig | None = None) -> Optional[str]:
    """Return the validated day or None; used while scanning many days."""
    try:
        return validate_day(day, config)
    except ValidationError as e:
        logger.debug(f"Skipping day {day!r}: {e}")
        return None


def validate_year(year: Any, config: EngineConfig | None = None) -> int:
    config = config or get_config()
    if isinstance(year, bool):
        raise ValidationError("invalid_year", "year must be an integer")
    try:
        year = int(str(year).strip())
    except (TypeError, ValueError):
        raise ValidationError("invalid_year", f"year must be an integer, got {year!r}")
    max_year = config.effective_max_year()
    if year < config.min_year or year > max_year:
        raise ValidationError("year_out_of_range", f"{year} outside {config.min_year}-{max_year}")
    return year


# ==================== RESULT ROWS ====================


def _parse_number(value: Any, field: str) -> Optional[float]:
    """Blank -> None; unparseable or non-finite raises DataIntegrityError."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise DataIntegrityError(f"{field}: boolean is not a number")
    if isinstance(value, str):
        value = value.strip().replace(",", ".")
        if not value:
            return None
    elif not isinstance(value, (int, float)):
        raise DataIntegrityError(f"{field}: unsupported type {type(value).__name__}")
    try:
        parsed = float(value)
    except ValueError:
        raise DataIntegrityError(f"{field}: {value!r} is not numeric")
    if not math.isfinite(parsed):
        raise DataIntegrityError(f"{field}: non-finite value")
    return parsed


class ValidatedLeg(BaseModel):
    """One leg of a result row; unparseable cells fall back to the default."""

    score: int = 0
    x_count: int = 0
    precision: Optional[float] = None

    model_config = ConfigDict(frozen=True)

    @field_validator("score", "x_count", mode="before")
    @classmethod
    def validate_count(cls, v: Any, info: ValidationInfo) -> int:
        """Missing -> 0; unparseable -> 0 with a warning."""
        if isinstance(v, int) and not isinstance(v, bool):
            return v
        try:
            parsed = _parse_number(v, info.field_name)
        except DataIntegrityError as e:
            logger.warning(f"Row integrity problem, using 0: {e}")
            return 0
        return int(parsed) if parsed is not None else 0

    @field_validator("precision", mode="before")
    @classmethod
    def validate_precision(cls, v: Any, info: ValidationInfo) -> Optional[float]:
        """Missing or blank -> None (never 0)."""
        if isinstance(v, bool):
            return None
        try:
            return _parse_number(v, info.field_name)
        except DataIntegrityError as e:
            logger.warning(f"Row integrity problem, precision treated as absent: {e}")
            return None


class ValidatedResultRow(BaseModel):
    """A raw result row after shape validation and numeric coercion."""

    row_id: Optional[str] = None
    class_id: str = Field("", max_length=32)
    first_name: str = Field("", max_length=255)
    last_name: str = Field("", max_length=255)
    legs: Dict[int, ValidatedLeg] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @field_validator("class_id", mode="before")
    @classmethod
    def validate_class_id(cls, v: Any) -> str:
        if v is None:
            return ""
        if isinstance(v, float) and v.is_integer():
            v = int(v)
        return str(v).strip()

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def validate_name(cls, v: Any) -> str:
        if v is None:
            return ""
        # Remove null bytes and surrounding whitespace
        return str(v).replace("\0", "").strip()

    @field_validator("row_id", mode="before")
    @classmethod
    def validate_row_id(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @property
    def has_name(self) -> bool:
        return bool(self.first_name or self.last_name)


def parse_result_row(row: Dict[str, Any], leg_numbers: Sequence[int] = STANDARD_LEGS) -> ValidatedResultRow:
    """
    Validate one raw row, keeping only the requested legs.

    Unparseable numeric fields are treated as 0 (precision as absent) and
    logged, so a single corrupt cell never drops a whole event.
    """
    legs = {
        n: ValidatedLeg(
            score=row.get(f"score_{n}"),
            x_count=row.get(f"x_{n}"),
            precision=row.get(f"precision_{n}"),
        )
        for n in leg_numbers
    }
    return ValidatedResultRow(
        row_id=row.get("id"),
        class_id=row.get("class_id"),
        first_name=row.get("first_name"),
        last_name=row.get("last_name"),
        legs=legs,
    )


# ==================== NAMES ====================


def is_valid_member_name(first_name: str, last_name: str, config: EngineConfig | None = None) -> bool:
    """Both name parts must match the configured name pattern."""
    config = config or get_config()
    pattern = re.compile(config.name_pattern)
    full_name = f"{first_name} {last_name}".strip()
    if not full_name:
        return False
    return bool(pattern.match(first_name or "")) and bool(pattern.match(last_name or ""))


# ==================== SORT REQUESTS ====================


def leg_sort_columns(leg_numbers: Sequence[int]) -> Tuple[str, ...]:
    columns = []
    for n in leg_numbers:
        columns.extend((f"score_{n}", f"x_{n}", f"precision_{n}"))
    return tuple(columns)


def allowed_sort_columns(leg_numbers: Sequence[int] = STANDARD_LEGS) -> Tuple[str, ...]:
    return (
        ("rank", "total", "sum_x", "avg_precision")
        + leg_sort_columns(leg_numbers)
        + ("first_name", "last_name")
    )


def validate_sort(
    sort: Optional[str],
    direction: Optional[str],
    leg_numbers: Sequence[int] = STANDARD_LEGS,
    config: EngineConfig | None = None,
) -> Tuple[str, str]:
    """Return (column, direction); unknown values fall back to configured defaults."""
    config = config or get_config()
    allowed = allowed_sort_columns(leg_numbers)

    column = sort.strip() if isinstance(sort, str) else None
    if column not in allowed:
        if column:
            logger.debug(f"Unknown sort column {column!r}, using {config.default_sort!r}")
        column = config.default_sort
    if column not in allowed:
        # A configured default outside the allow-list (e.g. a leg the variant lacks)
        column = "rank"

    normalized = direction.strip().lower() if isinstance(direction, str) else ""
    if normalized not in {"asc", "desc"}:
        normalized = config.default_direction
    return column, normalized


__all__ = [
    "STANDARD_LEGS",
    "ValidatedLeg",
    "ValidatedResultRow",
    "allowed_sort_columns",
    "date_to_day",
    "day_to_date",
    "is_valid_member_name",
    "normalize_day",
    "parse_result_row",
    "shift_day",
    "validate_day",
    "validate_sort",
    "validate_year",
]
