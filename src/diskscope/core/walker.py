"""Depth-first, streaming directory traversal."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterator

from diskscope.core.cancel import CancelToken
from diskscope.core.classifier import Decision, PathClassifier
from diskscope.models.scan import FileRecord

log = logging.getLogger(__name__)


def file_extension(name: str) -> str | None:
    """Lowercased final suffix of *name* without the dot, or None."""
    suffix = Path(name).suffix
    return suffix[1:].lower() if suffix else None


class DirectoryWalker:
    """Yields a FileRecord for every regular file under a root.

    The walk keeps an explicit stack of pending directories, so memory
    grows with tree breadth, not with the number of files.  Directories
    that cannot be opened are skipped and logged at DEBUG level.

    One walker serves one traversal at a time; ``dirs_visited`` counts the
    directories it managed to open.
    """

    def __init__(self, classifier: PathClassifier, cancel: CancelToken | None = None) -> None:
        self.classifier = classifier
        self.cancel = cancel
        self.dirs_visited = 0

    def walk(self, root: Path | str) -> Iterator[FileRecord]:
        stack: list[str] = [os.fspath(root)]
        while stack:
            current = stack.pop()
            files, subdirs = self.list_dir(current)
            yield from files
            # Reversed so the first enumerated subdirectory is visited first
            stack.extend(reversed(subdirs))

    def list_dir(self, path: Path | str) -> tuple[list[FileRecord], list[str]]:
        """Read one directory: its recordable files and the subdirectories to descend into."""
        if self.cancel is not None:
            self.cancel.raise_if_cancelled()

        files: list[FileRecord] = []
        subdirs: list[str] = []
        try:
            with os.scandir(path) as it:
                for entry in it:
                    try:
                        record = self._visit(entry, subdirs)
                    except OSError:
                        log.debug("Cannot access: %s", entry.path)
                        continue
                    if record is not None:
                        files.append(record)
        except OSError as e:
            log.debug("Cannot read directory %s: %s", path, e)
            return [], []

        self.dirs_visited += 1
        return files, subdirs

    def _visit(self, entry: os.DirEntry, subdirs: list[str]) -> FileRecord | None:
        is_dir = entry.is_dir(follow_symlinks=False)
        decision = self.classifier.classify(entry.name, is_dir, entry.is_symlink())
        if decision is Decision.DESCEND:
            subdirs.append(entry.path)
            return None
        if decision is Decision.SKIP or not entry.is_file(follow_symlinks=False):
            return None
        st = entry.stat(follow_symlinks=False)
        return FileRecord(
            path=Path(entry.path),
            size_bytes=st.st_size,
            extension=file_extension(entry.name),
            modified_at=st.st_mtime,
        )
