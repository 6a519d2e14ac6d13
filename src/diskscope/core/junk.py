"""Junk categories: sizing and best-effort cleanup of well-known reclaimable directories."""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from diskscope.config import EngineConfig
from diskscope.models.clean_result import CleanResult
from diskscope.models.junk import JunkCategory, JunkItem
from diskscope.utils import entry_size, remove_entry

log = logging.getLogger(__name__)

MAX_ERRORS = 10


class JunkKind(enum.Enum):
    """The closed set of junk categories."""

    SYSTEM_CACHE = "system_cache"
    APP_LOGS = "app_logs"
    TRASH = "trash"
    TEMP_FILES = "temp_files"
    BUILD_CACHE = "build_cache"
    NPM_CACHE = "npm_cache"
    CARGO_CACHE = "cargo_cache"

    @classmethod
    def parse(cls, value: str | JunkKind) -> JunkKind | None:
        """Look up a kind by id; None for unknown ids."""
        if isinstance(value, JunkKind):
            return value
        try:
            return cls(value)
        except ValueError:
            return None

    @property
    def definition(self) -> JunkDefinition:
        return _DEFINITIONS[self]

    def roots(self, config: EngineConfig) -> tuple[Path, ...]:
        return self.definition.roots(config)


@dataclass(frozen=True)
class JunkDefinition:
    name: str
    description: str
    roots: Callable[[EngineConfig], tuple[Path, ...]]
    # Conditional categories are reported only when present and non-empty
    conditional: bool = False


_DEFINITIONS: dict[JunkKind, JunkDefinition] = {
    JunkKind.SYSTEM_CACHE: JunkDefinition(
        "System & App Cache",
        "Cached data in ~/.cache. Applications regenerate these files as needed.",
        lambda c: (c.cache_home,),
    ),
    JunkKind.APP_LOGS: JunkDefinition(
        "Application Logs",
        "Log files written by desktop sessions and applications.",
        lambda c: (c.state_home / "log", c.data_home / "xorg"),
    ),
    JunkKind.TRASH: JunkDefinition(
        "Trash Bin",
        "Files already moved to the trash, and their trash metadata.",
        lambda c: (c.data_home / "Trash" / "files", c.data_home / "Trash" / "info"),
    ),
    JunkKind.TEMP_FILES: JunkDefinition(
        "Temporary Files",
        "Contents of shared temporary directories. Active applications may still use some of them.",
        lambda c: tuple(c.temp_dirs),
    ),
    JunkKind.BUILD_CACHE: JunkDefinition(
        "Build Tool Caches",
        "Gradle and Android build caches. Rebuilt on the next build.",
        lambda c: (c.home / ".gradle" / "caches", c.home / ".android" / "build-cache"),
        conditional=True,
    ),
    JunkKind.NPM_CACHE: JunkDefinition(
        "npm Cache",
        "Downloaded npm package tarballs. Re-fetched on the next install.",
        lambda c: (c.home / ".npm" / "_cacache",),
        conditional=True,
    ),
    JunkKind.CARGO_CACHE: JunkDefinition(
        "Cargo Registry Cache",
        "Downloaded Rust crate archives. Re-fetched on the next build.",
        lambda c: (c.home / ".cargo" / "registry" / "cache",),
        conditional=True,
    ),
}


class JunkCategorizer:
    """Sizes and cleans the junk categories rooted in one EngineConfig."""

    def __init__(self, config: EngineConfig) -> None:
        self.config = config

    def scan(self) -> list[JunkCategory]:
        """Size every category, largest first.

        Conditional categories are left out unless one of their directories
        exists and holds at least one byte.
        """
        categories: list[JunkCategory] = []
        for kind in JunkKind:
            category = self.scan_kind(kind)
            if kind.definition.conditional and category.size_bytes == 0:
                log.debug("Skipping empty category: %s", kind.value)
                continue
            categories.append(category)
        # Stable: equal sizes keep definition order
        categories.sort(key=lambda c: c.size_bytes, reverse=True)
        return categories

    def scan_kind(self, kind: JunkKind) -> JunkCategory:
        definition = kind.definition
        items: list[JunkItem] = []
        for root in kind.roots(self.config):
            for entry in _top_level_entries(root):
                try:
                    items.append(JunkItem(path=entry, size_bytes=entry_size(entry)))
                except OSError:
                    log.debug("Cannot access: %s", entry)
        items.sort(key=lambda i: i.size_bytes, reverse=True)
        return JunkCategory(
            id=kind.value,
            name=definition.name,
            description=definition.description,
            size_bytes=sum(i.size_bytes for i in items),
            items=items,
        )

    def clean(self, category_ids: Iterable[str | JunkKind]) -> CleanResult:
        """Delete every top-level entry in the selected categories' directories.

        Files are unlinked, directories removed as a whole.  Each entry is
        attempted once; failures are collected (first ten kept) and do not
        stop the rest.  Unknown ids are ignored.
        """
        kinds: list[JunkKind] = []
        for value in category_ids:
            kind = JunkKind.parse(value)
            if kind is None:
                log.debug("Ignoring unknown junk category: %r", value)
            elif kind not in kinds:
                kinds.append(kind)

        result = CleanResult()
        failures = 0
        for kind in kinds:
            for root in kind.roots(self.config):
                if not root.is_dir():
                    continue
                try:
                    entries = sorted(root.iterdir())
                except OSError as e:
                    failures += 1
                    _add_error(result, f"{root}: {e}")
                    log.warning("Cannot list %s: %s", root, e)
                    continue
                for entry in entries:
                    try:
                        result.freed_bytes += remove_entry(entry)
                        result.deleted_count += 1
                    except OSError as e:
                        failures += 1
                        _add_error(result, f"{entry}: {e}")
                        log.warning("Failed to delete %s: %s", entry, e)

        log.info(
            "Cleaned %s: freed %d bytes from %d entries, %d failure(s)",
            ", ".join(k.value for k in kinds) or "nothing",
            result.freed_bytes,
            result.deleted_count,
            failures,
        )
        return result


def _top_level_entries(root: Path) -> list[Path]:
    if not root.is_dir():
        return []
    try:
        return sorted(root.iterdir())
    except OSError:
        log.debug("Cannot read directory: %s", root)
        return []


def _add_error(result: CleanResult, message: str) -> None:
    if len(result.errors) < MAX_ERRORS:
        result.errors.append(message)
