"""Error taxonomy and explicit lookup results.

Expected "no data" outcomes are returned as values (Found / NotFound / Invalid);
exceptions are reserved for invalid explicit input and truly unexpected failures.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")


class ResultsError(Exception):
    """Base class for engine errors."""


class ValidationError(ResultsError, ValueError):
    """Malformed or out-of-range input (day identifier, year)."""

    def __init__(self, kind: str, message: str | None = None):
        self.kind = kind
        self.message = message
        super().__init__(f"{kind}: {message}" if message else kind)


class NotFoundError(ResultsError, LookupError):
    """Event or table has no data."""


class DataIntegrityError(ResultsError, ValueError):
    """A row field could not be interpreted (e.g. non-numeric score)."""


@dataclass(frozen=True)
class Found(Generic[T]):
    value: T

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class NotFound:
    reason: str

    def unwrap(self):
        raise NotFoundError(self.reason)


@dataclass(frozen=True)
class Invalid:
    reason: str

    def unwrap(self):
        raise ValidationError("invalid_input", self.reason)


Lookup = Union[Found[T], NotFound, Invalid]
