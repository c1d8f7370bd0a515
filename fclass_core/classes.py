"""Equipment-class display names and ordering."""
from __future__ import annotations

import re
from typing import Iterable, Literal

from .config import EngineConfig, get_config

ClassNameFormat = Literal["display", "short", "code", "slug"]


def format_class_name(name: str, fmt: ClassNameFormat = "display") -> str:
    if fmt == "short":
        return name.split(" ")[0][:8]
    if fmt == "code":
        return name.replace(" ", "_").replace("-", "_").upper()
    if fmt == "slug":
        return re.sub(r"[^a-zA-Z0-9]+", "-", name).lower()
    return name


def class_name(class_id: str | int, fmt: ClassNameFormat = "display", config: EngineConfig | None = None) -> str:
    """Display name for a class id; unknown ids are returned unchanged."""
    config = config or get_config()
    key = str(class_id)
    name = config.class_names.get(key)
    if name is None:
        return key
    return format_class_name(name, fmt)


def _class_sort_key(class_id: str) -> tuple[int, int, str]:
    # Numeric ids first in numeric order, then the rest ordinally.
    if class_id.isdigit():
        return (0, int(class_id), class_id)
    return (1, 0, class_id)


def sort_classes(class_ids: Iterable[str]) -> list[str]:
    return sorted((str(c) for c in class_ids), key=_class_sort_key)
