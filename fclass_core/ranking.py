"""Shared competition-rank walker.

Tied entries share a rank; the next distinct entry's rank equals its 1-based
position, so ranks can skip (1, 1, 3, 4).
"""
from __future__ import annotations

from typing import Any, Callable, Hashable, Sequence, TypeVar

T = TypeVar("T")


def assign_shared_ranks(items: Sequence[T], signature: Callable[[T], Hashable]) -> list[int]:
    """
    Return the rank of each item of an already-sorted sequence.

    Args:
      items: entries sorted best-first.
      signature: values that must all be equal for two neighbours to share a rank.
    """
    ranks: list[int] = []
    previous: Any = None
    rank = 0
    for position, item in enumerate(items, start=1):
        current = signature(item)
        if position == 1 or current != previous:
            rank = position
        ranks.append(rank)
        previous = current
    return ranks


def nulls_last(value: float | None, *, descending: bool = False) -> tuple[int, float]:
    """Sort key placing None after every defined value in either direction."""
    if value is None:
        return (1, 0.0)
    return (0, -value if descending else value)
