"""Cache collaborator protocol and an in-process TTL implementation.

The engine treats any cache as pure acceleration: results are identical with
or without it. Concurrent writers of one key are last-writer-wins.
"""
from __future__ import annotations

import hashlib
import json
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol

logger = logging.getLogger(__name__)


class ResultCache(Protocol):
    def get(self, key: str, ttl: int | None = None) -> Any | None:
        ...

    def set(self, key: str, value: Any, metadata: dict | None = None) -> bool:
        ...

    def delete(self, key: str) -> bool:
        ...

    def clear(self) -> int:
        ...


class NullCache:
    """Cache that never stores anything."""

    def get(self, key: str, ttl: int | None = None) -> Any | None:
        return None

    def set(self, key: str, value: Any, metadata: dict | None = None) -> bool:
        return False

    def delete(self, key: str) -> bool:
        return False

    def clear(self) -> int:
        return 0


@dataclass
class _Entry:
    value: Any
    stored_at: float
    metadata: dict


@dataclass
class InMemoryTTLCache:
    default_ttl: int = 300
    clock: Callable[[], float] = time.monotonic
    _entries: dict[str, _Entry] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def get(self, key: str, ttl: int | None = None) -> Any | None:
        ttl = self.default_ttl if ttl is None else ttl
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.stored_at + ttl < self.clock():
                del self._entries[key]
                return None
            return entry.value

    def set(self, key: str, value: Any, metadata: dict | None = None) -> bool:
        with self._lock:
            self._entries[key] = _Entry(value=value, stored_at=self.clock(), metadata=dict(metadata or {}))
        return True

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> int:
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        return count

    def metadata(self, key: str) -> dict | None:
        with self._lock:
            entry = self._entries.get(key)
            return dict(entry.metadata) if entry else None

    def __len__(self) -> int:
        return len(self._entries)


def cache_key(prefix: str, name: str, *parts: Any) -> str:
    """Deterministic key from a name and the inputs of a computation."""
    raw = json.dumps([str(p) for p in parts], ensure_ascii=False, separators=(",", ":"))
    digest = hashlib.sha1(raw.encode("utf-8")).hexdigest()[:16]
    return f"{prefix}{name}:{digest}"


def cached(
    cache: ResultCache | None,
    key: str,
    ttl: int | None,
    compute: Callable[[], Any],
    metadata: dict | None = None,
) -> Any:
    """Return the cached value for ``key`` or compute and store it."""
    if cache is None:
        return compute()
    hit = cache.get(key, ttl)
    if hit is not None:
        logger.debug(f"Cache hit {key}")
        return hit
    logger.debug(f"Cache miss {key}")
    value = compute()
    cache.set(key, value, metadata)
    return value
