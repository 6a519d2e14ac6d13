"""Cleaning result dataclass."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class CleanResult:
    """Result of a junk cleaning operation."""

    freed_bytes: int = 0
    deleted_count: int = 0
    errors: list[str] = field(default_factory=list)
