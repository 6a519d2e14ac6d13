"""Tests for path classification and directory walking."""

from __future__ import annotations

import os

import pytest

from diskscope.core.cancel import CancelToken
from diskscope.core.classifier import Decision, PathClassifier
from diskscope.core.walker import DirectoryWalker, file_extension
from diskscope.exceptions import ScanCancelled

from conftest import write_file


class TestPathClassifier:
    def test_regular_entries(self):
        classifier = PathClassifier()
        assert classifier.classify("src", is_dir=True) is Decision.DESCEND
        assert classifier.classify("main.py", is_dir=False) is Decision.RECORD

    def test_symlinks_never_followed(self):
        classifier = PathClassifier(skip_hidden=False)
        assert classifier.classify("src", is_dir=True, is_symlink=True) is Decision.SKIP
        assert classifier.classify("a.txt", is_dir=False, is_symlink=True) is Decision.SKIP

    def test_hidden_entries(self):
        assert PathClassifier().classify(".config", is_dir=True) is Decision.SKIP
        assert PathClassifier().classify(".bashrc", is_dir=False) is Decision.SKIP
        assert PathClassifier(skip_hidden=False).classify(".config", is_dir=True) is Decision.DESCEND

    def test_excluded_directories(self):
        classifier = PathClassifier()
        for name in ("node_modules", ".git", "__pycache__", "target"):
            assert classifier.classify(name, is_dir=True) is Decision.SKIP

    def test_excluded_names_only_apply_to_directories(self):
        assert PathClassifier().classify("build", is_dir=False) is Decision.RECORD

    def test_custom_exclusions(self):
        classifier = PathClassifier(excluded_dir_names={"cache"}, skip_hidden=False)
        assert classifier.classify("cache", is_dir=True) is Decision.SKIP
        assert classifier.classify("node_modules", is_dir=True) is Decision.DESCEND


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("photo.JPG", "jpg"),
        ("archive.tar.gz", "gz"),
        ("Makefile", None),
        (".bashrc", None),
    ],
)
def test_file_extension(name, expected):
    assert file_extension(name) == expected


@pytest.fixture
def tree(tmp_path):
    root = tmp_path / "root"
    write_file(root / "top.txt", content=b"t" * 10)
    write_file(root / "a" / "one.bin", content=b"1" * 20)
    write_file(root / "a" / "b" / "two.BIN", content=b"2" * 30)
    write_file(root / "node_modules" / "dep.js", content=b"d" * 1000)
    write_file(root / ".hidden" / "secret", content=b"s" * 1000)
    write_file(root / ".dotfile", content=b"." * 1000)
    return root


class TestDirectoryWalker:
    def test_yields_every_reachable_file(self, tree):
        walker = DirectoryWalker(PathClassifier())
        records = {r.path.relative_to(tree).as_posix(): r for r in walker.walk(tree)}

        assert set(records) == {"top.txt", "a/one.bin", "a/b/two.BIN"}
        assert records["a/b/two.BIN"].size_bytes == 30
        assert records["a/b/two.BIN"].extension == "bin"
        assert walker.dirs_visited == 3  # root, a, a/b

    def test_hidden_included_when_allowed(self, tree):
        walker = DirectoryWalker(PathClassifier(skip_hidden=False))
        names = {r.path.name for r in walker.walk(tree)}
        assert {"secret", ".dotfile"} <= names
        assert "dep.js" not in names

    def test_depth_first(self, tmp_path):
        write_file(tmp_path / "x" / "deep" / "f1", size=1)
        write_file(tmp_path / "y" / "f2", size=1)
        order = [r.path.name for r in DirectoryWalker(PathClassifier()).walk(tmp_path)]
        # Whichever sibling comes first, its subtree is finished before the other starts
        assert order in (["f1", "f2"], ["f2", "f1"])

    def test_symlinked_directory_not_followed(self, tmp_path):
        outside = tmp_path / "outside"
        write_file(outside / "big.bin", size=5000)
        root = tmp_path / "root"
        write_file(root / "small.bin", size=5)
        (root / "loop").symlink_to(root)
        (root / "elsewhere").symlink_to(outside)
        (root / "file_link").symlink_to(outside / "big.bin")

        records = list(DirectoryWalker(PathClassifier()).walk(root))

        assert [r.path.name for r in records] == ["small.bin"]

    def test_records_modification_time(self, tmp_path):
        write_file(tmp_path / "old.log", size=3, mtime=1_000_000)
        (record,) = DirectoryWalker(PathClassifier()).walk(tmp_path)
        assert record.modified_at == 1_000_000

    @pytest.mark.skipif(os.geteuid() == 0, reason="root ignores directory permissions")
    def test_unreadable_directory_is_skipped(self, tmp_path):
        write_file(tmp_path / "ok" / "fine.txt", size=7)
        locked = tmp_path / "locked"
        write_file(locked / "hidden.txt", size=7)
        locked.chmod(0)
        try:
            walker = DirectoryWalker(PathClassifier())
            names = [r.path.name for r in walker.walk(tmp_path)]
        finally:
            locked.chmod(0o755)

        assert names == ["fine.txt"]
        assert walker.dirs_visited == 2

    def test_missing_root_yields_nothing(self, tmp_path):
        walker = DirectoryWalker(PathClassifier())
        assert list(walker.walk(tmp_path / "gone")) == []
        assert walker.dirs_visited == 0

    def test_cancel_stops_walk(self, tree):
        token = CancelToken()
        walker = DirectoryWalker(PathClassifier(), cancel=token)
        records = walker.walk(tree)
        next(records)
        token.cancel()
        with pytest.raises(ScanCancelled):
            list(records)
