"""
Migration orchestrator — detect, configure, move, clean up.

For each descriptor, in catalog order, the stages run strictly in
sequence::

    detect → ensure_target → set_env → locate_source → move → cleanup

Every stage leaves one receipt on the descriptor's MigrationRecord.
A failure stops that descriptor only; the run continues with the
next one, so partial success across the catalog is normal and
visible in the records.

Dry run performs the read-only stages (detect, locate_source) for
real and replaces every mutating stage with a ``[dry-run]`` skip
receipt describing what would happen.
"""

from __future__ import annotations

import logging
import os
import shutil
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from cache_relocator.core.errors import (
    CleanupFailed,
    CopyFailed,
    EnvWriteFailed,
    TargetDirFailed,
)
from cache_relocator.core.models.descriptor import Catalog, PackageManagerDescriptor
from cache_relocator.core.models.migration import MigrationRecord
from cache_relocator.core.models.receipt import StageReceipt
from cache_relocator.core.services.detection import DetectionReport, Detector
from cache_relocator.core.services.env_config import EnvConfigurator
from cache_relocator.core.services.mover import DirectoryMover, tree_size
from cache_relocator.core.services.paths import expand_path, same_path

logger = logging.getLogger(__name__)

ConfirmCleanup = Callable[[MigrationRecord], bool]

DRY_RUN_PREFIX = "[dry-run]"


@dataclass
class MigrationRun:
    """Everything one migration run produced, for the presentation layer."""

    detections: list[tuple[PackageManagerDescriptor, DetectionReport]] = field(default_factory=list)
    records: list[MigrationRecord] = field(default_factory=list)
    dry_run: bool = False

    @property
    def processed(self) -> list[MigrationRecord]:
        return [r for r in self.records if r.processed]

    @property
    def failed(self) -> list[MigrationRecord]:
        return [r for r in self.records if r.status == "failed"]

    @property
    def migrated(self) -> list[MigrationRecord]:
        return [r for r in self.records if r.migrated]

    @property
    def bytes_copied(self) -> int:
        return sum(r.bytes_copied for r in self.records)

    def to_dict(self) -> dict:
        return {
            "dry_run": self.dry_run,
            "detections": [report.to_dict() for _, report in self.detections],
            "records": [r.to_dict() for r in self.records],
            "processed": len(self.processed),
            "migrated": len(self.migrated),
            "failed": len(self.failed),
            "bytes_copied": self.bytes_copied,
        }


def _is_inside(path: str, parent: str) -> bool:
    try:
        return Path(os.path.abspath(path)).is_relative_to(os.path.abspath(parent))
    except ValueError:
        return False


class MigrationOrchestrator:
    """Drive the per-descriptor migration pipeline.

    Args:
        detector: Read-only package-manager detection.
        env: System-scope env configurator.
        mover: Directory copy + integrity check.
        dry_run: Suppress every mutating step.
        confirm_cleanup: Called after a successful move; returning True
            deletes the migrated source. None means never clean up.
        environ: Variables used to expand source paths.
    """

    def __init__(
        self,
        detector: Detector,
        env: EnvConfigurator,
        mover: DirectoryMover,
        dry_run: bool = False,
        confirm_cleanup: ConfirmCleanup | None = None,
        environ: Mapping[str, str] | None = None,
    ):
        self._detector = detector
        self._env = env
        self._mover = mover
        self._dry_run = dry_run
        self._confirm_cleanup = confirm_cleanup
        self._environ = environ

    def run(self, catalog: Catalog) -> MigrationRun:
        """Process every descriptor in *catalog*."""
        run = MigrationRun(dry_run=self._dry_run)
        for descriptor in catalog:
            detection = self._detector.detect(descriptor)
            run.detections.append((descriptor, detection))
            run.records.append(self.process(descriptor, detection))

        logger.info(
            "Migration %s: %d processed, %d migrated, %d failed",
            "planned" if self._dry_run else "finished",
            len(run.processed),
            len(run.migrated),
            len(run.failed),
        )
        return run

    def process(
        self,
        descriptor: PackageManagerDescriptor,
        detection: DetectionReport | None = None,
    ) -> MigrationRecord:
        """Run all stages for one descriptor and return its record."""
        if detection is None:
            detection = self._detector.detect(descriptor)

        record = MigrationRecord(
            name=descriptor.name,
            env_var=descriptor.env_var,
            target_path=descriptor.target_path,
            detected=detection.installed,
            dry_run=self._dry_run,
        )

        if not detection.installed:
            record.add(StageReceipt.skip("detect", "not installed"))
            logger.debug("%s: not installed, skipping", descriptor.name)
            return record

        record.processed = True
        record.add(StageReceipt.success("detect", detection.evidence))

        if self._ensure_target(descriptor, record).failed:
            return record

        if self._set_env(descriptor, record).failed:
            return record

        source = self._locate_source(descriptor, record)
        if source is None:
            return record

        if self._move(descriptor, source, record).failed:
            return record

        self._cleanup(descriptor, record)
        return record

    # ── Stages ──────────────────────────────────────────────────

    def _ensure_target(self, descriptor: PackageManagerDescriptor, record: MigrationRecord) -> StageReceipt:
        target = Path(descriptor.target_path)
        if target.is_dir():
            return record.add(StageReceipt.success("ensure_target", f"exists: {target}"))

        if self._dry_run:
            return record.add(StageReceipt.skip("ensure_target", f"{DRY_RUN_PREFIX} would create {target}"))

        start = time.monotonic()
        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            err = TargetDirFailed(f"cannot create {target}: {e}")
            logger.error("%s: %s", descriptor.name, err)
            return record.add(StageReceipt.failure("ensure_target", str(err), err.kind))

        return record.add(StageReceipt.success(
            "ensure_target", f"created {target}", duration_ms=_elapsed_ms(start),
        ))

    def _set_env(self, descriptor: PackageManagerDescriptor, record: MigrationRecord) -> StageReceipt:
        name = descriptor.env_var
        current_raw = self._env.get(name)
        value = self._env.render_value(descriptor, descriptor.target_path)

        if current_raw == value:
            return record.add(StageReceipt.success("set_env", f"{name} already set", metadata={"value": value}))

        if self._dry_run:
            return record.add(StageReceipt.skip(
                "set_env",
                f"{DRY_RUN_PREFIX} would set {name}={value}",
                metadata={"value": value, "previous": current_raw},
            ))

        start = time.monotonic()
        try:
            self._env.set(name, value)
        except EnvWriteFailed as e:
            logger.error("%s: cannot set %s: %s", descriptor.name, name, e)
            return record.add(StageReceipt.failure("set_env", str(e), e.kind))

        return record.add(StageReceipt.success(
            "set_env",
            f"{name}={value}",
            duration_ms=_elapsed_ms(start),
            metadata={"value": value, "previous": current_raw},
        ))

    def _locate_source(self, descriptor: PackageManagerDescriptor, record: MigrationRecord) -> str | None:
        """First existing source directory, or None (with a skip receipt)."""
        checked: list[str] = []
        for raw in descriptor.source_paths:
            candidate = expand_path(raw, self._environ)
            checked.append(candidate)
            if not os.path.isdir(candidate):
                continue

            if same_path(candidate, descriptor.target_path):
                record.add(StageReceipt.skip(
                    "locate_source", f"already at target: {candidate}", metadata={"checked": checked},
                ))
                return None

            record.source_path = candidate
            record.add(StageReceipt.success("locate_source", candidate, metadata={"checked": checked}))
            return candidate

        record.add(StageReceipt.skip(
            "locate_source", "no existing source (fresh install)", metadata={"checked": checked},
        ))
        return None

    def _move(self, descriptor: PackageManagerDescriptor, source: str, record: MigrationRecord) -> StageReceipt:
        target = descriptor.target_path

        if _is_inside(target, source):
            err = CopyFailed(f"target {target} is inside source {source}")
            logger.error("%s: %s", descriptor.name, err)
            return record.add(StageReceipt.failure("move", str(err), err.kind))

        if self._dry_run:
            planned = tree_size(source)
            return record.add(StageReceipt.skip(
                "move",
                f"{DRY_RUN_PREFIX} would copy {source} → {target} ({planned} bytes)",
                metadata={"planned_bytes": planned},
            ))

        start = time.monotonic()
        outcome = self._mover.move(source, target)
        if not outcome.success:
            return record.add(StageReceipt.failure(
                "move",
                outcome.reason or "move failed",
                outcome.error_kind,
                duration_ms=_elapsed_ms(start),
                metadata=outcome.to_dict(),
            ))

        record.bytes_copied = outcome.bytes_copied
        return record.add(StageReceipt.success(
            "move",
            f"copied {outcome.bytes_copied} bytes",
            duration_ms=_elapsed_ms(start),
            metadata=outcome.to_dict(),
        ))

    def _cleanup(self, descriptor: PackageManagerDescriptor, record: MigrationRecord) -> StageReceipt:
        source = record.source_path
        if self._confirm_cleanup is None or source is None:
            return record.add(StageReceipt.skip("cleanup", "cleanup not requested"))
        if self._dry_run:
            return record.add(StageReceipt.skip("cleanup", f"{DRY_RUN_PREFIX} would offer to delete {source}"))

        if not self._confirm_cleanup(record):
            return record.add(StageReceipt.skip("cleanup", f"kept {source}"))

        record.cleanup_requested = True
        start = time.monotonic()
        try:
            shutil.rmtree(source)
        except OSError as e:
            # copy already verified
            err = CleanupFailed(f"cannot fully delete {source}: {e}")
            logger.warning("%s: %s", descriptor.name, err)
            return record.add(StageReceipt.failure("cleanup", str(err), err.kind))

        record.cleanup_performed = True
        logger.info("%s: deleted %s", descriptor.name, source)
        return record.add(StageReceipt.success(
            "cleanup", f"deleted {source}", duration_ms=_elapsed_ms(start),
        ))


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)
