"""Duplicate search dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(slots=True)
class DuplicateGroup:
    """Files sharing one size and one fingerprint."""

    fingerprint: str
    size_bytes: int
    files: list[Path] = field(default_factory=list)

    @property
    def wasted_bytes(self) -> int:
        """Space reclaimable by keeping a single copy."""
        return self.size_bytes * (len(self.files) - 1)


@dataclass(slots=True)
class DuplicateResult:
    """Duplicate groups ranked by wasted space.

    ``total_groups`` counts every group found, before truncation to the
    returned ``groups``; ``total_wasted_bytes`` covers only returned groups.
    """

    groups: list[DuplicateGroup] = field(default_factory=list)
    total_wasted_bytes: int = 0
    total_groups: int = 0
    verified: bool = False
