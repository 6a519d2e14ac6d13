"""Entry points for every analysis operation."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from diskscope.config import EngineConfig
from diskscope.core.cancel import CancelToken
from diskscope.core.classifier import PathClassifier
from diskscope.core.duplicates import DuplicateDetector
from diskscope.core.junk import JunkCategorizer, JunkKind
from diskscope.core.scanner import Scanner
from diskscope.models.clean_result import CleanResult
from diskscope.models.duplicates import DuplicateResult
from diskscope.models.junk import JunkCategory
from diskscope.models.scan import ScanReport, ScanRequest

log = logging.getLogger(__name__)


class AnalysisEngine:
    """Runs scans, duplicate searches and junk cleanup against one EngineConfig.

    Every call is independent: no results are cached between calls, and
    only :meth:`clean_junk` touches the filesystem.
    """

    def __init__(self, config: EngineConfig) -> None:
        self.config = config
        self.classifier = PathClassifier.from_config(config)
        self.junk = JunkCategorizer(config)

    def scan(
        self,
        root: Path | str,
        limit: int | None = None,
        min_size: int | None = None,
        stale_days: int | None = None,
        cancel: CancelToken | None = None,
    ) -> ScanReport:
        """Summarise *root*: totals, largest files, extension breakdown, stale files.

        Raises:
            ScanError: *root* does not exist or is not a directory.
        """
        request = ScanRequest(
            root=Path(root).expanduser(),
            limit=self.config.default_limit if limit is None else limit,
            min_size=min_size,
            stale_days=self.config.default_stale_days if stale_days is None else stale_days,
        )
        scanner = Scanner(
            self.classifier,
            workers=self.config.workers,
            stale_limit=self.config.stale_limit,
            cancel=cancel,
        )
        return scanner.scan(request)

    def find_duplicates(
        self,
        root: Path | str,
        min_size: int | None = None,
        verify: bool = False,
        cancel: CancelToken | None = None,
    ) -> DuplicateResult:
        """Group likely-identical files under *root*.

        Raises:
            ScanError: *root* is missing, not a directory, or unreadable.
        """
        detector = DuplicateDetector(self.classifier, workers=self.config.workers, cancel=cancel)
        if min_size is None:
            min_size = self.config.default_duplicate_min_size
        return detector.find(Path(root).expanduser(), min_size=min_size, verify=verify)

    def scan_junk(self) -> list[JunkCategory]:
        """Size every junk category, largest first. Never raises for missing directories."""
        return self.junk.scan()

    def clean_junk(self, category_ids: Iterable[str | JunkKind]) -> CleanResult:
        """Delete the contents of the given categories; unknown ids are ignored."""
        return self.junk.clean(category_ids)
