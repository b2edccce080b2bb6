"""Tests for the local directory scanner."""

import os
from pathlib import Path

import pytest

from gdrivesync.sync.scanner import DirectoryScanner, LocalFile


@pytest.fixture
def tree(tmp_path):
    """Create a small directory tree."""
    (tmp_path / "a.txt").write_text("a")
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "b.txt").write_text("bb")
    (tmp_path / "sub" / "deeper").mkdir()
    (tmp_path / "sub" / "deeper" / "c.log").write_text("ccc")
    (tmp_path / "empty").mkdir()
    (tmp_path / ".hidden").write_text("h")
    return tmp_path


class TestLocalFile:
    def test_from_path(self, tmp_path):
        path = tmp_path / "dir" / "file.txt"
        path.parent.mkdir()
        path.write_text("hello")

        local_file = LocalFile.from_path(path, tmp_path)

        assert local_file.relative_path == "dir/file.txt"
        assert local_file.name == "file.txt"
        assert local_file.size == 5
        assert local_file.mtime == path.stat().st_mtime


class TestDirectoryScanner:
    """Tests for DirectoryScanner.scan_local."""

    def test_visits_every_file_once(self, tree):
        files = DirectoryScanner().scan_local(tree)

        paths = [f.relative_path for f in files]
        assert sorted(paths) == [
            ".hidden",
            "a.txt",
            "sub/b.txt",
            "sub/deeper/c.log",
        ]
        assert len(paths) == len(set(paths))

    def test_results_are_sorted(self, tree):
        paths = [f.relative_path for f in DirectoryScanner().scan_local(tree)]
        assert paths == [".hidden", "a.txt", "sub/b.txt", "sub/deeper/c.log"]

    def test_sizes(self, tree):
        files = {f.relative_path: f for f in DirectoryScanner().scan_local(tree)}
        assert files["sub/deeper/c.log"].size == 3
        assert files["sub/deeper/c.log"].path == tree / "sub" / "deeper" / "c.log"

    def test_exclude_dot_files(self, tree):
        (tree / ".git").mkdir()
        (tree / ".git" / "config").write_text("x")

        files = DirectoryScanner(exclude_dot_files=True).scan_local(tree)

        paths = {f.relative_path for f in files}
        assert ".hidden" not in paths
        assert ".git/config" not in paths
        assert "a.txt" in paths

    def test_ignore_patterns(self, tree):
        scanner = DirectoryScanner(ignore_patterns=["*.log", "sub/b.*"])
        paths = {f.relative_path for f in scanner.scan_local(tree)}
        assert paths == {".hidden", "a.txt"}

    def test_ignore_directory_pattern(self, tree):
        scanner = DirectoryScanner(ignore_patterns=["sub"])
        paths = {f.relative_path for f in scanner.scan_local(tree)}
        assert paths == {".hidden", "a.txt"}

    def test_empty_directory(self, tmp_path):
        assert DirectoryScanner().scan_local(tmp_path) == []

    def test_missing_root_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            DirectoryScanner().scan_local(tmp_path / "missing")

    def test_file_root_raises(self, tmp_path):
        path = tmp_path / "file.txt"
        path.write_text("x")
        with pytest.raises(NotADirectoryError):
            DirectoryScanner().scan_local(path)

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
    def test_symlinked_directory_not_followed(self, tree):
        try:
            (tree / "loop").symlink_to(tree, target_is_directory=True)
        except OSError:
            pytest.skip("cannot create symlinks")

        paths = [f.relative_path for f in DirectoryScanner().scan_local(tree)]
        assert not any(p.startswith("loop/") for p in paths)
        assert len(paths) == 4

    @pytest.mark.skipif(
        os.name != "posix" or os.geteuid() == 0, reason="needs POSIX non-root"
    )
    def test_unreadable_subdirectory_is_skipped(self, tree):
        locked = tree / "locked"
        locked.mkdir()
        (locked / "secret.txt").write_text("s")
        locked.chmod(0)
        try:
            paths = {f.relative_path for f in DirectoryScanner().scan_local(tree)}
        finally:
            locked.chmod(0o755)
        assert "a.txt" in paths
        assert "locked/secret.txt" not in paths

    def test_should_ignore_uses_relative_path(self):
        scanner = DirectoryScanner(ignore_patterns=["docs/*.md"])
        base = Path("/base")
        assert scanner.should_ignore(Path("/base/docs/readme.md"), base)
        assert not scanner.should_ignore(Path("/base/readme.md"), base)
