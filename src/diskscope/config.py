"""Engine configuration, resolved once and passed explicitly to components."""

from __future__ import annotations

import logging
import tempfile
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from diskscope.settings import Settings
from diskscope.utils import xdg_cache_home, xdg_data_home, xdg_state_home

log = logging.getLogger(__name__)

DEFAULT_LIMIT = 20
DEFAULT_STALE_DAYS = 90
DEFAULT_DUPLICATE_MIN_SIZE = 1024 * 1024
DEFAULT_WORKERS = 4

# Generated-content and VCS directories that are never descended into
DEFAULT_EXCLUDED_DIRS = frozenset(
    {
        "node_modules",
        "__pycache__",
        ".git",
        ".hg",
        ".svn",
        ".venv",
        "venv",
        ".tox",
        ".mypy_cache",
        ".pytest_cache",
        "target",
        "build",
        "dist",
        ".gradle",
        "DerivedData",
        "Pods",
    }
)


@dataclass(frozen=True)
class EngineConfig:
    """Base paths and scan defaults shared by every engine component.

    Build one with :meth:`from_environment` at program start, or construct
    it directly in tests to point the engine at a fake home directory.
    """

    home: Path
    cache_home: Path
    data_home: Path
    state_home: Path
    temp_dirs: tuple[Path, ...] = ()
    default_limit: int = DEFAULT_LIMIT
    default_stale_days: int = DEFAULT_STALE_DAYS
    default_duplicate_min_size: int = DEFAULT_DUPLICATE_MIN_SIZE
    workers: int = DEFAULT_WORKERS
    skip_hidden: bool = True
    excluded_dir_names: frozenset[str] = field(default=DEFAULT_EXCLUDED_DIRS)
    stale_limit: int | None = None

    @classmethod
    def for_home(cls, home: Path, **overrides: Any) -> EngineConfig:
        """Config with every base directory laid out under *home* the XDG way."""
        home = Path(home)
        values: dict[str, Any] = {
            "home": home,
            "cache_home": home / ".cache",
            "data_home": home / ".local" / "share",
            "state_home": home / ".local" / "state",
            "temp_dirs": (home / "tmp",),
        }
        values.update(overrides)
        return cls(**values)

    @classmethod
    def from_environment(cls, settings: Settings | None = None) -> EngineConfig:
        """Resolve base directories from the environment and layer user settings on top."""
        config = cls(
            home=Path.home(),
            cache_home=xdg_cache_home(),
            data_home=xdg_data_home(),
            state_home=xdg_state_home(),
            temp_dirs=(Path(tempfile.gettempdir()),),
        )
        if settings is None:
            return config
        return config.with_settings(settings)

    def with_settings(self, settings: Settings) -> EngineConfig:
        """Return a copy with overrides read from *settings* applied."""
        overrides: dict[str, Any] = {}
        for key, attr, kind in (
            ("scan.limit", "default_limit", int),
            ("scan.stale_days", "default_stale_days", int),
            ("scan.stale_limit", "stale_limit", int),
            ("duplicates.min_size", "default_duplicate_min_size", int),
            ("engine.workers", "workers", int),
            ("scan.skip_hidden", "skip_hidden", bool),
        ):
            value = settings.get(key)
            if value is None:
                continue
            # bool is an int subclass; true/false is never a valid count
            if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
                log.warning("Ignoring setting %s: expected %s, got %r", key, kind.__name__, value)
                continue
            overrides[attr] = value

        excluded = settings.get("scan.excluded_dirs")
        if isinstance(excluded, list) and all(isinstance(n, str) for n in excluded):
            overrides["excluded_dir_names"] = frozenset(excluded)
        elif excluded is not None:
            log.warning("Ignoring setting scan.excluded_dirs: expected a list of names")

        extra_temp = settings.get("junk.temp_dirs")
        if isinstance(extra_temp, list):
            overrides["temp_dirs"] = tuple(Path(p).expanduser() for p in extra_temp)

        if "workers" in overrides and overrides["workers"] < 1:
            log.warning("Ignoring setting engine.workers: must be at least 1")
            del overrides["workers"]

        return replace(self, **overrides) if overrides else self
