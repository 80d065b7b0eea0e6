"""
Directory mover — copy a cache tree and prove the copy is complete.

The mover only copies.  It never deletes the source (cleanup is a
separate, confirmed step) and never deletes the destination on
failure, so a half-finished copy stays on disk for inspection.

Integrity check, in order:
    1. Aggregate size: ``|dest - src| / src <= tolerance`` (1% default).
    2. Per-file (``verify_files=True``, default): every source file
       exists in the destination with the same size.  Individual
       copy errors fail the move even when the totals happen to match.
"""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from cache_relocator.core.errors import CopyFailed, SizeMismatch, SourceNotFound

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 0.01

# Reported file lists are capped at this length
_MAX_LISTED_FILES = 50


@dataclass
class MoveOutcome:
    """Result of one ``DirectoryMover.move`` call. Never raised, always returned."""

    success: bool
    bytes_copied: int = 0
    reason: str | None = None
    error_kind: str | None = None
    source_size: int = 0
    destination_size: int = 0
    failed_files: list[str] = field(default_factory=list)      # copy errors
    mismatched_files: list[str] = field(default_factory=list)  # missing or wrong size

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "bytes_copied": self.bytes_copied,
            "reason": self.reason,
            "error_kind": self.error_kind,
            "source_size": self.source_size,
            "destination_size": self.destination_size,
            "failed_files": self.failed_files[:_MAX_LISTED_FILES],
            "mismatched_files": self.mismatched_files[:_MAX_LISTED_FILES],
        }


def tree_size(path: str | Path) -> int:
    """Total byte size of all regular files under *path*.

    Unreadable entries are skipped; directory symlinks are not followed.
    A missing path has size 0.
    """
    total = 0
    for root, _dirs, files in os.walk(path):
        for name in files:
            try:
                total += os.lstat(os.path.join(root, name)).st_size
            except OSError:
                continue
    return total


def _file_sizes(root: Path) -> dict[str, int]:
    sizes: dict[str, int] = {}
    for current, _dirs, files in os.walk(root):
        for name in files:
            full = os.path.join(current, name)
            try:
                sizes[os.path.relpath(full, root)] = os.lstat(full).st_size
            except OSError:
                continue
    return sizes


def within_tolerance(source_size: int, destination_size: int, tolerance: float) -> bool:
    if source_size == 0:
        return destination_size == 0
    return abs(destination_size - source_size) / source_size <= tolerance


class DirectoryMover:
    """Copy a directory tree and validate the result.

    Args:
        tolerance: Allowed relative size difference (0.01 = 1%).
        verify_files: Also require a per-file size match.
    """

    def __init__(self, tolerance: float = DEFAULT_TOLERANCE, verify_files: bool = True):
        self.tolerance = tolerance
        self.verify_files = verify_files

    def move(self, source: str | Path, destination: str | Path) -> MoveOutcome:
        src = Path(source)
        dst = Path(destination)

        try:
            if not src.is_dir():
                raise SourceNotFound(f"source not found: {src}")
            failed = self._copy_tree(src, dst)
            return self._check(src, dst, failed)
        except SourceNotFound as e:
            logger.warning("%s", e)
            return MoveOutcome(success=False, reason=str(e), error_kind=e.kind)
        except CopyFailed as e:
            logger.error("Copy %s → %s failed: %s", src, dst, e)
            return MoveOutcome(success=False, reason=str(e), error_kind=e.kind)
        except SizeMismatch as e:
            # the partial destination stays in place
            logger.error("Copy %s → %s rejected: %s", src, dst, e)
            return MoveOutcome(
                success=False,
                reason=str(e),
                error_kind=e.kind,
                source_size=e.source_size,
                destination_size=e.destination_size,
                failed_files=e.failed_files,
                mismatched_files=e.mismatched_files,
            )

    def _copy_tree(self, src: Path, dst: Path) -> list[str]:
        """Copy *src* into *dst*; return relative paths of files that failed.

        Raises:
            CopyFailed: When the walk itself cannot proceed.
        """
        try:
            dst.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CopyFailed(f"copy failed: cannot create {dst}: {e}") from e

        walk_errors: list[OSError] = []
        failed: list[str] = []

        logger.info("Copying %s → %s", src, dst)
        for current, dirs, files in os.walk(src, onerror=walk_errors.append):
            rel_dir = os.path.relpath(current, src)
            target_dir = dst if rel_dir == "." else dst / rel_dir
            try:
                target_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise CopyFailed(f"copy failed: cannot create {target_dir}: {e}") from e

            for name in files:
                rel = name if rel_dir == "." else os.path.join(rel_dir, name)
                try:
                    shutil.copy2(os.path.join(current, name), target_dir / name, follow_symlinks=False)
                except OSError as e:
                    logger.warning("Failed to copy %s: %s", rel, e)
                    failed.append(rel)

            # Directory symlinks are copied as links, not descended into
            for name in list(dirs):
                full = os.path.join(current, name)
                if os.path.islink(full):
                    dirs.remove(name)
                    rel = name if rel_dir == "." else os.path.join(rel_dir, name)
                    try:
                        link_target = target_dir / name
                        if not os.path.lexists(link_target):
                            os.symlink(os.readlink(full), link_target, target_is_directory=True)
                    except OSError as e:
                        logger.warning("Failed to copy link %s: %s", rel, e)
                        failed.append(rel)

        # An unreadable root means nothing was copied at all
        if walk_errors and any(Path(getattr(e, "filename", "") or "") == src for e in walk_errors):
            raise CopyFailed(f"copy failed: cannot read {src}: {walk_errors[0]}")
        for e in walk_errors:
            logger.warning("Skipped unreadable directory: %s", e)
            failed.append(os.path.relpath(getattr(e, "filename", "") or str(e), src))

        return failed

    def _check(self, src: Path, dst: Path, failed: list[str]) -> MoveOutcome:
        source_size = tree_size(src)
        destination_size = tree_size(dst)

        if not within_tolerance(source_size, destination_size, self.tolerance):
            raise SizeMismatch(
                f"size mismatch: source {source_size} bytes, destination {destination_size} bytes",
                source_size=source_size,
                destination_size=destination_size,
                failed_files=failed,
            )

        mismatched: list[str] = []
        if self.verify_files:
            dest_sizes = _file_sizes(dst)
            for rel, size in _file_sizes(src).items():
                if dest_sizes.get(rel) != size:
                    mismatched.append(rel)
            if failed or mismatched:
                raise SizeMismatch(
                    f"size mismatch: {len(failed)} file(s) failed to copy, "
                    f"{len(mismatched)} file(s) missing or different",
                    source_size=source_size,
                    destination_size=destination_size,
                    failed_files=failed,
                    mismatched_files=mismatched,
                )
        elif failed:
            logger.warning(
                "%d file(s) failed to copy but totals are within tolerance", len(failed),
            )

        copied = source_size
        if failed:
            src_sizes = _file_sizes(src)
            copied -= sum(src_sizes.get(rel, 0) for rel in failed)

        logger.info("Copied %d bytes to %s", copied, dst)
        return MoveOutcome(
            success=True,
            bytes_copied=copied,
            source_size=source_size,
            destination_size=destination_size,
            failed_files=failed,
        )
