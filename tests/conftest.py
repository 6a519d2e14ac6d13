"""Shared test fixtures."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from diskscope.config import EngineConfig
from diskscope.utils import xdg_config_home

MB = 1024 * 1024


def write_file(path: Path, size: int = 0, content: bytes | None = None, mtime: float | None = None) -> Path:
    """Create *path* (and parents) holding *content*, or *size* sparse bytes."""
    path.parent.mkdir(parents=True, exist_ok=True)
    if content is not None:
        path.write_bytes(content)
    else:
        with path.open("wb") as f:
            f.truncate(size)
    if mtime is not None:
        os.utime(path, (mtime, mtime))
    return path


@pytest.fixture
def home(tmp_path):
    """An empty fake home directory."""
    home = tmp_path / "home"
    home.mkdir()
    return home


@pytest.fixture
def config(home):
    """Sequential engine config rooted in the fake home."""
    return EngineConfig.for_home(home, workers=1)


@pytest.fixture
def isolate_settings(tmp_path, monkeypatch):
    """Point XDG_CONFIG_HOME at a temp directory and return the settings file path."""
    config_home = tmp_path / "config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    return xdg_config_home() / "diskscope" / "settings.json"


@pytest.fixture
def broken_find(tmp_path, monkeypatch):
    """Put a ``find`` that rejects ``-printf`` (like BSD or BusyBox find) first on PATH."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    script = bin_dir / "find"
    script.write_text("#!/bin/sh\necho \"find: unknown primary or operator\" >&2\nexit 1\n")
    script.chmod(0o755)
    monkeypatch.setenv("PATH", f"{bin_dir}{os.pathsep}{os.environ.get('PATH', '')}")
    return script
