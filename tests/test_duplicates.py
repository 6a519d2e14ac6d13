"""Tests for duplicate detection."""

from __future__ import annotations

import os

import pytest

from diskscope.core import duplicates as duplicates_module
from diskscope.core.cancel import CancelToken
from diskscope.core.classifier import PathClassifier
from diskscope.core.duplicates import (
    DuplicateDetector,
    fingerprint_bytes,
    sample_offsets,
)
from diskscope.exceptions import ScanCancelled, ScanError

from conftest import write_file


@pytest.fixture(params=[1, 3], ids=["sequential", "parallel"])
def detector(request):
    return DuplicateDetector(PathClassifier(), workers=request.param)


def pattern(size: int, seed: int = 0) -> bytes:
    return bytes((i * 7 + seed) % 251 for i in range(size))


class TestFingerprint:
    def test_offsets_cover_first_last_and_quarters(self):
        assert sample_offsets(4096) == [0, 1024, 2048, 3072, 4095]

    def test_short_prefix_offsets_deduplicated(self):
        assert sample_offsets(1) == [0]
        assert sample_offsets(2) == [0, 1]
        assert sample_offsets(0) == []

    def test_fingerprint_is_sampled_bytes(self):
        prefix = bytearray(4096)
        prefix[0], prefix[1024], prefix[2048], prefix[3072], prefix[4095] = 1, 2, 3, 4, 5
        assert fingerprint_bytes(bytes(prefix)) == "0102030405"


class TestDuplicateDetector:
    def test_identical_files_grouped(self, detector, tmp_path):
        data = pattern(10_000)
        write_file(tmp_path / "a.bin", content=data)
        write_file(tmp_path / "copy" / "a.bin", content=data)
        write_file(tmp_path / "other.bin", content=pattern(10_000, seed=3))

        result = detector.find(tmp_path)

        assert result.total_groups == 1
        (group,) = result.groups
        assert group.size_bytes == 10_000
        assert sorted(p.relative_to(tmp_path).as_posix() for p in group.files) == ["a.bin", "copy/a.bin"]
        assert result.total_wasted_bytes == 10_000

    def test_different_sizes_never_grouped(self, detector, tmp_path):
        write_file(tmp_path / "a", content=b"x" * 100)
        write_file(tmp_path / "b", content=b"x" * 101)
        result = detector.find(tmp_path)
        assert result.groups == [] and result.total_groups == 0 and result.total_wasted_bytes == 0

    def test_difference_outside_sampled_bytes_is_reported_as_duplicate(self, detector, tmp_path):
        original = bytearray(b"a" * 8192)
        altered = bytearray(original)
        altered[100] = ord("b")  # inside the prefix but not sampled
        altered[6000] = ord("c")  # beyond the 4 KiB prefix
        write_file(tmp_path / "one", content=bytes(original))
        write_file(tmp_path / "two", content=bytes(altered))

        result = detector.find(tmp_path)

        assert len(result.groups) == 1
        assert len(result.groups[0].files) == 2

    def test_verify_splits_false_positives(self, detector, tmp_path):
        original = b"a" * 8192
        altered = bytearray(original)
        altered[6000] = ord("c")
        write_file(tmp_path / "one", content=original)
        write_file(tmp_path / "two", content=bytes(altered))
        write_file(tmp_path / "three", content=original)

        result = detector.find(tmp_path, verify=True)

        assert result.verified
        (group,) = result.groups
        assert sorted(p.name for p in group.files) == ["one", "three"]

    def test_difference_at_sampled_byte_splits_group(self, detector, tmp_path):
        write_file(tmp_path / "one", content=b"a" * 4096)
        write_file(tmp_path / "two", content=b"a" * 4095 + b"z")
        assert detector.find(tmp_path).groups == []

    def test_sorted_by_wasted_bytes(self, detector, tmp_path):
        # 3 × 1000 wastes 2000; 2 × 1500 wastes 1500; 2 × 500 wastes 500
        for i in range(3):
            write_file(tmp_path / f"small{i}", content=pattern(1000))
        for i in range(2):
            write_file(tmp_path / f"mid{i}", content=pattern(1500, seed=1))
            write_file(tmp_path / f"tiny{i}", content=pattern(500, seed=2))

        result = detector.find(tmp_path)

        assert [g.wasted_bytes for g in result.groups] == [2000, 1500, 500]
        assert result.total_wasted_bytes == 4000
        for group in result.groups:
            assert len(group.files) >= 2
            assert len({p.stat().st_size for p in group.files}) == 1

    def test_wasted_ties_broken_by_size(self, detector, tmp_path):
        # 3 × 1000 and 2 × 2000 both waste 2000
        for i in range(3):
            write_file(tmp_path / f"a{i}", content=pattern(1000))
        for i in range(2):
            write_file(tmp_path / f"b{i}", content=pattern(2000, seed=5))
        result = detector.find(tmp_path)
        assert [g.size_bytes for g in result.groups] == [2000, 1000]

    def test_truncated_to_fifty_groups(self, tmp_path):
        for n in range(60):
            for copy in range(2):
                write_file(tmp_path / f"g{n}" / f"c{copy}", content=pattern(100 + n, seed=n))

        result = DuplicateDetector(PathClassifier()).find(tmp_path)

        assert len(result.groups) == 50
        assert result.total_groups == 60
        wasted = [g.wasted_bytes for g in result.groups]
        assert wasted == sorted(wasted, reverse=True)
        assert result.total_wasted_bytes == sum(wasted)
        assert result.groups[-1].size_bytes == 110

    def test_min_size(self, detector, tmp_path):
        for i in range(2):
            write_file(tmp_path / f"small{i}", content=pattern(100))
            write_file(tmp_path / f"big{i}", content=pattern(5000))
        result = detector.find(tmp_path, min_size=1000)
        assert [g.size_bytes for g in result.groups] == [5000]

    def test_empty_files_ignored(self, detector, tmp_path):
        write_file(tmp_path / "e1", size=0)
        write_file(tmp_path / "e2", size=0)
        assert detector.find(tmp_path).groups == []

    def test_skips_excluded_and_hidden_directories(self, detector, tmp_path):
        data = pattern(3000)
        write_file(tmp_path / "keep.bin", content=data)
        write_file(tmp_path / "node_modules" / "keep.bin", content=data)
        write_file(tmp_path / ".cache" / "keep.bin", content=data)
        assert detector.find(tmp_path).groups == []

    def test_missing_root(self, detector, tmp_path):
        with pytest.raises(ScanError):
            detector.find(tmp_path / "missing")

    @pytest.mark.skipif(os.geteuid() == 0, reason="root can read anything")
    def test_unreadable_root(self, detector, tmp_path):
        root = tmp_path / "locked"
        write_file(root / "a", content=b"q" * 50)
        root.chmod(0)
        try:
            with pytest.raises(ScanError, match="Cannot read directory"):
                detector.find(root)
        finally:
            root.chmod(0o755)

    def test_unreadable_file_dropped_from_bucket(self, detector, tmp_path, monkeypatch):
        data = pattern(3000)
        for name in ("a", "b", "c"):
            write_file(tmp_path / name, content=data)
        real_fingerprint = duplicates_module.fingerprint_file

        def fingerprint(path, size):
            if path.name == "b":
                raise PermissionError(13, "Permission denied", str(path))
            return real_fingerprint(path, size)

        monkeypatch.setattr(duplicates_module, "fingerprint_file", fingerprint)
        result = detector.find(tmp_path)

        assert [sorted(p.name for p in g.files) for g in result.groups] == [["a", "c"]]
        assert result.total_wasted_bytes == 3000

    def test_cancel(self, tmp_path):
        write_file(tmp_path / "a", content=b"q" * 50)
        token = CancelToken()
        token.cancel()
        with pytest.raises(ScanCancelled):
            DuplicateDetector(PathClassifier(), cancel=token).find(tmp_path)
