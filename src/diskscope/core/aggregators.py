"""Streaming consumers of the FileRecord stream.

Each consumer sees every record exactly once and keeps only what it
reports, so a single walk can feed all of them.  Partial consumers built
by parallel workers are combined with ``merge``.
"""

from __future__ import annotations

import heapq
import itertools
import time

from diskscope.models.scan import (
    NO_EXTENSION,
    ExtensionStat,
    FileRecord,
    ScanSummary,
)

_SECONDS_PER_DAY = 86400


class TopKTracker:
    """Keeps the ``limit`` largest records seen.

    Backed by a min-heap of at most ``limit`` entries.  On equal sizes the
    record seen first wins: a newcomer only displaces the current minimum
    when it is strictly larger, and among equal minimums the most recently
    seen one is evicted first.
    """

    def __init__(self, limit: int, min_size: int | None = None) -> None:
        self.limit = max(0, limit)
        self.min_size = min_size or 0
        self._heap: list[tuple[int, int, FileRecord]] = []
        self._seq = itertools.count()

    def add(self, record: FileRecord) -> None:
        if self.limit == 0 or record.size_bytes < self.min_size:
            return
        # Heap key (size, -seq): the smallest, latest-seen record sits on top
        item = (record.size_bytes, -next(self._seq), record)
        if len(self._heap) < self.limit:
            heapq.heappush(self._heap, item)
        elif record.size_bytes > self._heap[0][0]:
            heapq.heapreplace(self._heap, item)

    def merge(self, other: TopKTracker) -> None:
        """Fold in another tracker; its records count as seen after ours."""
        for record in other.results():
            self.add(record)

    def results(self) -> list[FileRecord]:
        """Largest first; equal sizes in first-seen order."""
        ordered = sorted(self._heap, key=lambda item: (-item[0], -item[1]))
        return [record for _, _, record in ordered]

    def __len__(self) -> int:
        return len(self._heap)


class ExtensionAggregator:
    """Per-extension file count and byte totals."""

    def __init__(self) -> None:
        self._stats: dict[str, ExtensionStat] = {}

    def add(self, record: FileRecord) -> None:
        key = record.extension or NO_EXTENSION
        stat = self._stats.get(key)
        if stat is None:
            stat = self._stats[key] = ExtensionStat(extension=key)
        stat.file_count += 1
        stat.total_bytes += record.size_bytes

    def merge(self, other: ExtensionAggregator) -> None:
        for key, theirs in other._stats.items():
            stat = self._stats.get(key)
            if stat is None:
                stat = self._stats[key] = ExtensionStat(extension=key)
            stat.file_count += theirs.file_count
            stat.total_bytes += theirs.total_bytes

    def results(self) -> list[ExtensionStat]:
        """Largest byte total first, then by extension name."""
        return sorted(self._stats.values(), key=lambda s: (-s.total_bytes, s.extension))

    @property
    def total_bytes(self) -> int:
        return sum(s.total_bytes for s in self._stats.values())


class StalenessFilter:
    """Collects records last modified strictly before ``now - stale_days``.

    Unbounded unless ``max_results`` is given; when the cap is hit further
    matches are dropped and ``truncated`` is set.
    """

    def __init__(self, stale_days: int, now: float | None = None, max_results: int | None = None) -> None:
        self.stale_days = stale_days
        self.now = time.time() if now is None else now
        self.cutoff = self.now - stale_days * _SECONDS_PER_DAY
        self.max_results = max_results
        self.truncated = False
        self._matches: list[FileRecord] = []

    def is_stale(self, record: FileRecord) -> bool:
        return record.modified_at < self.cutoff

    def add(self, record: FileRecord) -> None:
        if not self.is_stale(record):
            return
        if self.max_results is not None and len(self._matches) >= self.max_results:
            self.truncated = True
            return
        self._matches.append(record)

    def merge(self, other: StalenessFilter) -> None:
        for record in other._matches:
            self.add(record)
        self.truncated = self.truncated or other.truncated

    def results(self) -> list[FileRecord]:
        """Oldest first; ties by path."""
        return sorted(self._matches, key=lambda r: (r.modified_at, str(r.path)))


class ScanAccumulator:
    """All per-scan consumers behind one ``add`` call."""

    def __init__(
        self,
        limit: int,
        stale_days: int,
        min_size: int | None = None,
        now: float | None = None,
        stale_limit: int | None = None,
    ) -> None:
        self.summary = ScanSummary()
        self.top = TopKTracker(limit, min_size)
        self.extensions = ExtensionAggregator()
        self.stale = StalenessFilter(stale_days, now=now, max_results=stale_limit)

    def add(self, record: FileRecord) -> None:
        self.summary.total_files += 1
        self.summary.total_bytes += record.size_bytes
        self.top.add(record)
        self.extensions.add(record)
        self.stale.add(record)

    def merge(self, other: ScanAccumulator) -> None:
        self.summary.merge(other.summary)
        self.top.merge(other.top)
        self.extensions.merge(other.extensions)
        self.stale.merge(other.stale)

    def spawn(self) -> ScanAccumulator:
        """An empty accumulator with the same parameters, for a worker."""
        return ScanAccumulator(
            limit=self.top.limit,
            stale_days=self.stale.stale_days,
            min_size=self.top.min_size,
            now=self.stale.now,
            stale_limit=self.stale.max_results,
        )
