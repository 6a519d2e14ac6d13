"""Directory scan dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

NO_EXTENSION = "none"


@dataclass(frozen=True, slots=True)
class ScanRequest:
    """Parameters of a single directory scan."""

    root: Path
    limit: int = 20
    min_size: int | None = None
    stale_days: int = 90


@dataclass(frozen=True, slots=True)
class FileRecord:
    """A regular file seen during a walk.

    ``extension`` is the lowercased final suffix without the dot, or None.
    ``modified_at`` is a POSIX timestamp.
    """

    path: Path
    size_bytes: int
    extension: str | None
    modified_at: float


@dataclass(slots=True)
class ScanSummary:
    """Aggregate counters for one traversal."""

    total_files: int = 0
    total_bytes: int = 0
    total_dirs: int = 0

    def merge(self, other: ScanSummary) -> None:
        self.total_files += other.total_files
        self.total_bytes += other.total_bytes
        self.total_dirs += other.total_dirs


@dataclass(slots=True)
class ExtensionStat:
    """Count and byte total for one extension (``"none"`` for files without one)."""

    extension: str
    file_count: int = 0
    total_bytes: int = 0


@dataclass(slots=True)
class ScanReport:
    """Everything one scan produces."""

    root: Path
    summary: ScanSummary
    top_files: list[FileRecord] = field(default_factory=list)
    by_extension: list[ExtensionStat] = field(default_factory=list)
    stale_files: list[FileRecord] = field(default_factory=list)
    stale_truncated: bool = False
    elapsed_seconds: float = 0.0
