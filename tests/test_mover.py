"""
Tests for the directory mover — copy, size tolerance, per-file checks.
"""

import os
import shutil
from pathlib import Path

import pytest

from cache_relocator.core.services.mover import (
    DirectoryMover,
    MoveOutcome,
    tree_size,
    within_tolerance,
)

_PRIVILEGED = os.name == "nt" or os.geteuid() == 0


class TestTreeSize:
    def test_sums_files(self, tmp_path: Path, make_tree):
        make_tree(tmp_path / "t", {"a": b"x" * 10, "sub/b": b"y" * 5})
        assert tree_size(tmp_path / "t") == 15

    def test_missing_is_zero(self, tmp_path: Path):
        assert tree_size(tmp_path / "missing") == 0


class TestTolerance:
    def test_exact(self):
        assert within_tolerance(1000, 1000, 0.01)

    def test_one_percent_boundary(self):
        assert within_tolerance(1000, 990, 0.01)
        assert within_tolerance(1000, 1010, 0.01)
        assert not within_tolerance(1000, 989, 0.01)

    def test_empty_source(self):
        assert within_tolerance(0, 0, 0.01)
        assert not within_tolerance(0, 1, 0.01)


class TestDirectoryMover:
    def test_copies_tree(self, tmp_path: Path, make_tree):
        src = make_tree(tmp_path / "src", {"a.tgz": b"a" * 100, "deep/b/c.json": b"{}"})
        dst = tmp_path / "dst"

        outcome = DirectoryMover().move(src, dst)

        assert outcome.success
        assert outcome.bytes_copied == 102
        assert (dst / "a.tgz").read_bytes() == b"a" * 100
        assert (dst / "deep" / "b" / "c.json").exists()

    def test_source_kept(self, tmp_path: Path, make_tree):
        src = make_tree(tmp_path / "src", {"a": b"1"})
        DirectoryMover().move(src, tmp_path / "dst")
        assert (src / "a").exists()

    def test_missing_source(self, tmp_path: Path):
        outcome = DirectoryMover().move(tmp_path / "nope", tmp_path / "dst")
        assert not outcome.success
        assert outcome.error_kind == "not_found"
        assert not (tmp_path / "dst").exists()

    def test_empty_source(self, tmp_path: Path):
        src = tmp_path / "src"
        src.mkdir()
        outcome = DirectoryMover().move(src, tmp_path / "dst")
        assert outcome.success
        assert outcome.bytes_copied == 0

    def test_existing_destination_merged(self, tmp_path: Path, make_tree):
        src = make_tree(tmp_path / "src", {"a": b"x" * 1000})
        dst = make_tree(tmp_path / "dst", {"a": b"old"})
        outcome = DirectoryMover().move(src, dst)
        assert outcome.success
        assert (dst / "a").read_bytes() == b"x" * 1000

    def test_extra_destination_content_is_mismatch(self, tmp_path: Path, make_tree):
        src = make_tree(tmp_path / "src", {"a": b"x" * 1000})
        dst = make_tree(tmp_path / "dst", {"stale": b"y" * 500})

        outcome = DirectoryMover().move(src, dst)

        assert not outcome.success
        assert outcome.error_kind == "size_mismatch"
        assert outcome.source_size == 1000
        assert outcome.destination_size == 1500
        # destination left intact for inspection
        assert (dst / "stale").exists()
        assert (dst / "a").exists()

    def test_small_difference_within_tolerance(self, tmp_path: Path, make_tree):
        src = make_tree(tmp_path / "src", {"a": b"x" * 1000})
        dst = make_tree(tmp_path / "dst", {"note": b"y" * 5})
        outcome = DirectoryMover(tolerance=0.01).move(src, dst)
        assert outcome.success

    def test_failed_file_fails_move_with_verify_files(self, tmp_path: Path, make_tree, monkeypatch):
        src = make_tree(tmp_path / "src", {"big": b"x" * 10_000, "tiny": b"t"})
        real_copy2 = shutil.copy2

        def flaky_copy2(s, d, *args, **kwargs):
            if os.path.basename(s) == "tiny":
                raise PermissionError("locked")
            return real_copy2(s, d, *args, **kwargs)

        monkeypatch.setattr("cache_relocator.core.services.mover.shutil.copy2", flaky_copy2)

        outcome = DirectoryMover(verify_files=True).move(src, tmp_path / "dst")
        assert not outcome.success
        assert outcome.error_kind == "size_mismatch"
        assert outcome.failed_files == ["tiny"]
        assert "tiny" in outcome.mismatched_files

    def test_failed_file_tolerated_without_verify_files(self, tmp_path: Path, make_tree, monkeypatch):
        src = make_tree(tmp_path / "src", {"big": b"x" * 10_000, "tiny": b"t"})
        real_copy2 = shutil.copy2

        def flaky_copy2(s, d, *args, **kwargs):
            if os.path.basename(s) == "tiny":
                raise PermissionError("locked")
            return real_copy2(s, d, *args, **kwargs)

        monkeypatch.setattr("cache_relocator.core.services.mover.shutil.copy2", flaky_copy2)

        outcome = DirectoryMover(verify_files=False).move(src, tmp_path / "dst")
        assert outcome.success
        assert outcome.failed_files == ["tiny"]
        assert outcome.bytes_copied == 10_000

    @pytest.mark.skipif(os.name == "nt", reason="symlinks need privileges on Windows")
    def test_directory_symlink_copied_as_link(self, tmp_path: Path, make_tree):
        outside = make_tree(tmp_path / "outside", {"huge": b"z" * 5000})
        src = make_tree(tmp_path / "src", {"a": b"1"})
        os.symlink(outside, src / "link", target_is_directory=True)

        outcome = DirectoryMover().move(src, tmp_path / "dst")

        assert outcome.success
        assert os.path.islink(tmp_path / "dst" / "link")

    def test_destination_blocked_midway_is_copy_failed(self, tmp_path: Path, make_tree):
        src = make_tree(tmp_path / "src", {"top.tgz": b"t" * 100, "sub/inner": b"i"})
        dst = make_tree(tmp_path / "dst", {"sub": b"a file where a directory belongs"})

        outcome = DirectoryMover().move(src, dst)

        assert not outcome.success
        assert outcome.error_kind == "copy_failed"
        # partial copy left in place
        assert (dst / "top.tgz").read_bytes() == b"t" * 100
        assert (src / "sub" / "inner").exists()

    @pytest.mark.skipif(_PRIVILEGED, reason="permission bits do not apply")
    def test_read_only_destination_parent_is_copy_failed(self, tmp_path: Path, make_tree):
        src = make_tree(tmp_path / "src", {"a": b"1"})
        parent = tmp_path / "locked"
        parent.mkdir()
        parent.chmod(0o555)
        try:
            outcome = DirectoryMover().move(src, parent / "dst")
        finally:
            parent.chmod(0o755)

        assert not outcome.success
        assert outcome.error_kind == "copy_failed"
        assert (src / "a").exists()

    @pytest.mark.skipif(_PRIVILEGED, reason="permission bits do not apply")
    def test_unreadable_source_is_copy_failed(self, tmp_path: Path, make_tree):
        src = make_tree(tmp_path / "src", {"a": b"1"})
        dst = tmp_path / "dst"
        src.chmod(0)
        try:
            outcome = DirectoryMover().move(src, dst)
        finally:
            src.chmod(0o755)

        assert not outcome.success
        assert outcome.error_kind == "copy_failed"
        assert dst.is_dir()

    def test_outcome_to_dict_caps_lists(self):
        outcome = MoveOutcome(success=False, failed_files=[str(i) for i in range(80)])
        assert len(outcome.to_dict()["failed_files"]) == 50
