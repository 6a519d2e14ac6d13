"""Size-then-fingerprint duplicate detection.

Files are first bucketed by exact size.  Within a bucket each file gets a
fingerprint built from a handful of bytes sampled out of its first 4 KiB,
and files with equal fingerprints form a group.

The sampled fingerprint is a cheap filter, not a content comparison: two
files of equal size that agree on the sampled bytes are reported together
even when they differ elsewhere.  Pass ``verify=True`` to re-split every
candidate group by a full-content BLAKE2b digest.
"""

from __future__ import annotations

import hashlib
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from diskscope.core.cancel import CancelToken
from diskscope.core.classifier import PathClassifier
from diskscope.core.scanner import validate_root
from diskscope.core.walker import DirectoryWalker
from diskscope.exceptions import ScanError
from diskscope.models.duplicates import DuplicateGroup, DuplicateResult

log = logging.getLogger(__name__)

PREFIX_BYTES = 4096
MAX_GROUPS = 50
_CHUNK_SIZE = 65_536  # 64 KB


def sample_offsets(length: int) -> list[int]:
    """Offsets sampled from a prefix of *length* bytes: first, quarters, last."""
    if length <= 0:
        return []
    offsets = [0, length // 4, length // 2, (3 * length) // 4, length - 1]
    return sorted(set(offsets))


def fingerprint_bytes(prefix: bytes) -> str:
    """Hex digest of the bytes found at :func:`sample_offsets` in *prefix*."""
    return bytes(prefix[i] for i in sample_offsets(len(prefix))).hex()


def fingerprint_file(path: Path, size: int) -> str:
    """Fingerprint the first ``min(4096, size)`` bytes of *path*."""
    with open(path, "rb") as f:
        prefix = f.read(min(PREFIX_BYTES, size))
    return fingerprint_bytes(prefix)


def content_digest(path: Path) -> str:
    """Full-content BLAKE2b digest using chunked reads."""
    h = hashlib.blake2b()
    with open(path, "rb") as f:
        while chunk := f.read(_CHUNK_SIZE):
            h.update(chunk)
    return h.hexdigest()


class DuplicateDetector:
    """Finds groups of same-size, same-fingerprint files under a root."""

    def __init__(
        self,
        classifier: PathClassifier,
        workers: int = 1,
        cancel: CancelToken | None = None,
        max_groups: int = MAX_GROUPS,
    ) -> None:
        self.classifier = classifier
        self.workers = max(1, workers)
        self.cancel = cancel
        self.max_groups = max_groups

    def find(self, root: Path, min_size: int = 0, verify: bool = False) -> DuplicateResult:
        """Search *root* for duplicates among files of at least *min_size* bytes.

        Raises:
            ScanError: The root is missing, not a directory, or unreadable.
            ScanCancelled: The cancel token was tripped.
        """
        root = validate_root(Path(root))
        try:
            with os.scandir(root):
                pass
        except OSError as e:
            raise ScanError(f"Cannot read directory {root}: {e}") from e

        buckets = self._bucket_by_size(root, min_size)
        candidates = sum(len(paths) for paths in buckets.values())
        log.info("Fingerprinting %d files in %d size buckets under %s", candidates, len(buckets), root)

        groups = self._group_by_fingerprint(buckets)
        if verify:
            groups = self._confirm_by_content(groups)

        groups.sort(key=lambda g: (-g.wasted_bytes, -g.size_bytes, str(g.files[0])))
        total_groups = len(groups)
        shown = groups[: self.max_groups]
        return DuplicateResult(
            groups=shown,
            total_wasted_bytes=sum(g.wasted_bytes for g in shown),
            total_groups=total_groups,
            verified=verify,
        )

    def _bucket_by_size(self, root: Path, min_size: int) -> dict[int, list[Path]]:
        """Group candidate files by exact size, dropping buckets of one."""
        by_size: dict[int, list[Path]] = {}
        walker = DirectoryWalker(self.classifier, self.cancel)
        for record in walker.walk(root):
            # Empty files waste nothing
            if record.size_bytes == 0 or record.size_bytes < min_size:
                continue
            by_size.setdefault(record.size_bytes, []).append(record.path)
        return {size: paths for size, paths in sorted(by_size.items()) if len(paths) >= 2}

    def _group_by_fingerprint(self, buckets: dict[int, list[Path]]) -> list[DuplicateGroup]:
        jobs = [(path, size) for size, paths in buckets.items() for path in paths]
        prints = self._run(self._safe_fingerprint, jobs)

        groups: list[DuplicateGroup] = []
        by_key: dict[tuple[int, str], DuplicateGroup] = {}
        for (path, size), fp in zip(jobs, prints):
            if fp is None:
                continue
            group = by_key.get((size, fp))
            if group is None:
                group = by_key[(size, fp)] = DuplicateGroup(fingerprint=fp, size_bytes=size)
                groups.append(group)
            group.files.append(path)
        return [g for g in groups if len(g.files) >= 2]

    def _confirm_by_content(self, groups: list[DuplicateGroup]) -> list[DuplicateGroup]:
        """Split sampled groups into groups of byte-identical content."""
        jobs = [(path, group.size_bytes) for group in groups for path in group.files]
        digests = iter(self._run(self._safe_digest, jobs))

        confirmed: list[DuplicateGroup] = []
        for group in groups:
            by_digest: dict[str, list[Path]] = {}
            for path in group.files:
                digest = next(digests)
                if digest is not None:
                    by_digest.setdefault(digest, []).append(path)
            for digest, paths in by_digest.items():
                if len(paths) >= 2:
                    confirmed.append(DuplicateGroup(fingerprint=digest, size_bytes=group.size_bytes, files=paths))
        return confirmed

    def _run(self, fn, jobs: list[tuple[Path, int]]) -> list[str | None]:
        """Apply *fn* to every job, in order, across the worker pool."""
        if self.workers == 1 or len(jobs) < 2:
            return [fn(job) for job in jobs]
        with ThreadPoolExecutor(max_workers=min(self.workers, len(jobs))) as executor:
            return list(executor.map(fn, jobs))

    def _safe_fingerprint(self, job: tuple[Path, int]) -> str | None:
        path, size = job
        if self.cancel is not None:
            self.cancel.raise_if_cancelled()
        try:
            return fingerprint_file(path, size)
        except OSError:
            log.debug("Cannot read: %s", path)
            return None

    def _safe_digest(self, job: tuple[Path, int]) -> str | None:
        path, _size = job
        if self.cancel is not None:
            self.cancel.raise_if_cancelled()
        try:
            return content_digest(path)
        except OSError:
            log.debug("Cannot hash: %s", path)
            return None
