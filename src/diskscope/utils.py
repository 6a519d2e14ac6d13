"""Shared utility functions."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from pathlib import Path

log = logging.getLogger(__name__)

_KB = 1024
_MB = _KB * 1024
_GB = _MB * 1024


def has_command(name: str) -> bool:
    """Check if a command exists on the system."""
    return shutil.which(name) is not None


def xdg_cache_home() -> Path:
    """Return XDG_CACHE_HOME, defaulting to ~/.cache."""
    return Path(os.environ.get("XDG_CACHE_HOME", Path.home() / ".cache"))


def xdg_config_home() -> Path:
    """Return XDG_CONFIG_HOME, defaulting to ~/.config."""
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


def xdg_data_home() -> Path:
    """Return XDG_DATA_HOME, defaulting to ~/.local/share."""
    return Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share"))


def xdg_state_home() -> Path:
    """Return XDG_STATE_HOME, defaulting to ~/.local/state."""
    return Path(os.environ.get("XDG_STATE_HOME", Path.home() / ".local" / "state"))


def dir_info(path: Path | str) -> tuple[int, int]:
    """Calculate total size and file count of a directory tree.

    Uses GNU ``find`` (C-speed walk) when available, falling back to
    ``os.scandir`` on systems without it.  Symlinks are never followed.

    Returns:
        (total_bytes, file_count) tuple.
    """
    if has_command("find"):
        try:
            return _dir_info_find(str(path))
        except (OSError, subprocess.SubprocessError, ValueError):
            log.debug("find failed for %s, falling back to scandir", path)
    return _dir_info_scandir(path)


def _dir_info_find(path_str: str) -> tuple[int, int]:
    """Walk a directory tree using GNU find (pure C, no Python per-file overhead)."""
    proc = subprocess.run(
        ["find", path_str, "-type", "f", "-printf", "%s\n"],
        capture_output=True, timeout=60,
    )
    if proc.returncode != 0 and not proc.stdout:
        # non-GNU find without -printf, or a root find could not open
        raise subprocess.CalledProcessError(proc.returncode, proc.args, stderr=proc.stderr)
    total = count = 0
    for line in proc.stdout.split(b"\n"):
        if line:
            total += int(line)
            count += 1
    return total, count


def _dir_info_scandir(path: Path | str) -> tuple[int, int]:
    """Walk a directory tree using os.scandir (pure Python fallback)."""
    total = 0
    count = 0
    stack: list[Path | str] = [path]
    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as it:
                for entry in it:
                    try:
                        if entry.is_file(follow_symlinks=False):
                            total += entry.stat(follow_symlinks=False).st_size
                            count += 1
                        elif entry.is_dir(follow_symlinks=False):
                            stack.append(entry.path)
                    except OSError:
                        pass
        except OSError:
            pass
    return total, count


def dir_size(path: Path | str) -> int:
    """Calculate total size of a directory tree."""
    return dir_info(path)[0]


def entry_size(path: Path) -> int:
    """Size of a single top-level entry: recursive for real directories, 0 for symlinks."""
    if path.is_symlink():
        return 0
    if path.is_dir():
        return dir_size(path)
    return path.lstat().st_size


def remove_entry(path: Path) -> int:
    """Remove a file, symlink or whole directory tree and return the bytes it held.

    The size is measured immediately before removal.  Raises ``OSError``
    when the entry cannot be measured or removed.
    """
    size = entry_size(path)
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()
    return size


def human_size(size_bytes: int | float) -> str:
    """Convert byte count to a human-readable string.

    >>> human_size(1536)
    '1.5 KB'
    """
    size_bytes = int(size_bytes)
    if size_bytes < 0:
        return f"-{human_size(-size_bytes)}"
    if size_bytes >= _GB:
        return f"{size_bytes / _GB:.1f} GB"
    if size_bytes >= _MB:
        return f"{size_bytes / _MB:.1f} MB"
    if size_bytes >= _KB:
        return f"{size_bytes / _KB:.1f} KB"
    return f"{size_bytes} B"


def format_elapsed(seconds: float) -> str:
    """Format an elapsed time as a human-readable string."""
    if seconds < 1:
        return f"{seconds * 1000:.0f} ms"
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes = int(seconds) // 60
    secs = seconds - minutes * 60
    return f"{minutes}m {secs:.0f}s"
