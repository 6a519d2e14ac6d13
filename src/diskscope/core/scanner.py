"""Single-pass directory scan feeding every per-file consumer at once."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from diskscope.core.aggregators import ScanAccumulator
from diskscope.core.cancel import CancelToken
from diskscope.core.classifier import PathClassifier
from diskscope.core.walker import DirectoryWalker
from diskscope.exceptions import ScanError
from diskscope.models.scan import ScanReport, ScanRequest

log = logging.getLogger(__name__)


def validate_root(root: Path) -> Path:
    """Return *root* if it is an existing directory, else raise ScanError."""
    if not root.exists():
        raise ScanError(f"Path does not exist: {root}")
    if not root.is_dir():
        raise ScanError(f"Not a directory: {root}")
    return root


class Scanner:
    """Walks a tree once, collecting the summary, top files, extension stats and stale files.

    With more than one worker the root's immediate subdirectories are walked
    concurrently, each into its own accumulator.  Partials are merged in
    subdirectory-name order so the result does not depend on which worker
    finishes first.
    """

    def __init__(
        self,
        classifier: PathClassifier,
        workers: int = 1,
        stale_limit: int | None = None,
        cancel: CancelToken | None = None,
    ) -> None:
        self.classifier = classifier
        self.workers = max(1, workers)
        self.stale_limit = stale_limit
        self.cancel = cancel

    def scan(self, request: ScanRequest, now: float | None = None) -> ScanReport:
        """Scan ``request.root``.

        Raises:
            ScanError: The root is missing or is not a directory.
            ScanCancelled: The cancel token was tripped mid-walk.
        """
        root = validate_root(Path(request.root))
        started = time.monotonic()
        acc = ScanAccumulator(
            limit=request.limit,
            stale_days=request.stale_days,
            min_size=request.min_size,
            now=now,
            stale_limit=self.stale_limit,
        )

        if self.workers > 1:
            self._scan_parallel(root, acc)
        else:
            self._scan_sequential(root, acc)

        elapsed = time.monotonic() - started
        log.info(
            "Scanned %s: %d files, %d bytes, %d directories in %.2fs",
            root,
            acc.summary.total_files,
            acc.summary.total_bytes,
            acc.summary.total_dirs,
            elapsed,
        )
        return ScanReport(
            root=root,
            summary=acc.summary,
            top_files=acc.top.results(),
            by_extension=acc.extensions.results(),
            stale_files=acc.stale.results(),
            stale_truncated=acc.stale.truncated,
            elapsed_seconds=elapsed,
        )

    def _scan_sequential(self, root: Path, acc: ScanAccumulator) -> None:
        walker = DirectoryWalker(self.classifier, self.cancel)
        for record in walker.walk(root):
            acc.add(record)
        acc.summary.total_dirs += walker.dirs_visited

    def _scan_parallel(self, root: Path, acc: ScanAccumulator) -> None:
        top_walker = DirectoryWalker(self.classifier, self.cancel)
        files, subdirs = top_walker.list_dir(root)
        for record in files:
            acc.add(record)
        acc.summary.total_dirs += top_walker.dirs_visited

        if not subdirs:
            return

        def _walk_subtree(subdir: str) -> ScanAccumulator:
            partial = acc.spawn()
            walker = DirectoryWalker(self.classifier, self.cancel)
            for record in walker.walk(subdir):
                partial.add(record)
            partial.summary.total_dirs += walker.dirs_visited
            return partial

        subdirs.sort()
        max_workers = min(self.workers, len(subdirs))
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = [executor.submit(_walk_subtree, subdir) for subdir in subdirs]
            try:
                for future in futures:
                    acc.merge(future.result())
            except BaseException:
                for future in futures:
                    future.cancel()
                raise
