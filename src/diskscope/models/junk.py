"""Junk category dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(slots=True)
class JunkItem:
    """A top-level entry inside one of a category's directories."""

    path: Path
    size_bytes: int


@dataclass(slots=True)
class JunkCategory:
    """Sized result for one junk category."""

    id: str
    name: str
    description: str
    size_bytes: int = 0
    items: list[JunkItem] = field(default_factory=list)
