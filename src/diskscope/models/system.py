"""Dataclasses for system telemetry views."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class DiskUsage:
    """Capacity of the filesystem holding a path."""

    total_bytes: int
    used_bytes: int
    free_bytes: int

    @property
    def usage_percent(self) -> float:
        if self.total_bytes == 0:
            return 0.0
        return self.used_bytes / self.total_bytes * 100.0


@dataclass(frozen=True, slots=True)
class ProcessInfo:
    pid: int
    name: str
    cpu_percent: float
    memory_mb: float
    command: str


@dataclass(frozen=True, slots=True)
class StartupItem:
    """An XDG autostart entry."""

    name: str
    path: Path
    kind: str  # "user" or "system"
    enabled: bool


@dataclass(frozen=True, slots=True)
class HealthTip:
    """One finding of the system health report."""

    level: str  # "critical", "warning" or "ok"
    message: str
