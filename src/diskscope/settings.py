"""JSON-backed user settings."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from diskscope.exceptions import DiskscopeError
from diskscope.utils import xdg_config_home

log = logging.getLogger(__name__)


def default_settings_path() -> Path:
    return xdg_config_home() / "diskscope" / "settings.json"


class Settings:
    """User settings stored as one JSON object and addressed by dotted keys.

    ``scan.limit`` names ``{"scan": {"limit": ...}}``.  Writes are saved
    immediately; a missing or unreadable file reads as empty.
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or default_settings_path()
        self._data = self._read()

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str, default: Any = None) -> Any:
        parent, leaf = self._parent(key, create=False)
        if parent is None or leaf not in parent:
            return default
        return parent[leaf]

    def set(self, key: str, value: Any) -> None:
        """Store *value* under *key*, creating intermediate objects, and save.

        Raises:
            DiskscopeError: The settings file could not be written.
        """
        parent, leaf = self._parent(key, create=True)
        parent[leaf] = value
        self._write()

    def unset(self, key: str) -> bool:
        """Remove *key*; returns False when it was not set."""
        parent, leaf = self._parent(key, create=False)
        if parent is None or leaf not in parent:
            return False
        del parent[leaf]
        self._write()
        return True

    def _parent(self, key: str, create: bool) -> tuple[dict[str, Any] | None, str]:
        *branches, leaf = key.split(".")
        node = self._data
        for part in branches:
            child = node.get(part)
            if not isinstance(child, dict):
                if not create:
                    return None, leaf
                child = node[part] = {}
            node = child
        return node, leaf

    def _read(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            log.warning("Could not load settings from %s: %s", self._path, e)
            return {}
        if not isinstance(data, dict):
            log.warning("Ignoring settings in %s: top level is not an object", self._path)
            return {}
        return data

    def _write(self) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(self._data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
        except OSError as e:
            raise DiskscopeError(f"Could not save settings to {self._path}: {e}") from e
        log.debug("Saved settings to %s", self._path)
