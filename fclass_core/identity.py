"""Participant identity: a stable key over (first name, last name)."""
from __future__ import annotations

import hashlib
from dataclasses import dataclass, field


@dataclass(frozen=True)
class ParticipantIdentity:
    key: str
    first_name: str
    last_name: str


def _normalize_part(value: str | None) -> str:
    return (value or "").strip().casefold()


def participant_key(first_name: str | None, last_name: str | None) -> str | None:
    """Return the identity key, or None when both names are blank."""
    first = _normalize_part(first_name)
    last = _normalize_part(last_name)
    if not first and not last:
        return None
    raw = f"{first}|{last}"
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


def resolve_identity(first_name: str | None, last_name: str | None) -> ParticipantIdentity | None:
    key = participant_key(first_name, last_name)
    if key is None:
        return None
    return ParticipantIdentity(
        key=key,
        first_name=(first_name or "").strip(),
        last_name=(last_name or "").strip(),
    )


@dataclass
class IdentityMemo:
    """Caller-owned memo of resolved keys; pass one per request or batch."""

    _keys: dict[tuple[str, str], str | None] = field(default_factory=dict)

    def key(self, first_name: str | None, last_name: str | None) -> str | None:
        raw = ((first_name or "").strip(), (last_name or "").strip())
        if raw not in self._keys:
            self._keys[raw] = participant_key(*raw)
        return self._keys[raw]

    def resolve(self, first_name: str | None, last_name: str | None) -> ParticipantIdentity | None:
        key = self.key(first_name, last_name)
        if key is None:
            return None
        return ParticipantIdentity(
            key=key,
            first_name=(first_name or "").strip(),
            last_name=(last_name or "").strip(),
        )

    def __len__(self) -> int:
        return len(self._keys)
