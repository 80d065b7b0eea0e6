"""
Migrate use case — detect, migrate, then verify from scratch.

Verification always re-reads the machine instead of trusting the
migration records, so the report reflects what every new process
will actually see.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from cache_relocator.adapters.base import CommandRunner, EnvStore
from cache_relocator.core.context import build_context
from cache_relocator.core.errors import ConfigInvalid
from cache_relocator.core.models.verification import VerificationResult
from cache_relocator.core.services.detection import Detector
from cache_relocator.core.services.mover import DirectoryMover
from cache_relocator.core.services.orchestrator import (
    ConfirmCleanup,
    MigrationOrchestrator,
    MigrationRun,
)
from cache_relocator.core.services.verification import VerificationEngine

logger = logging.getLogger(__name__)


@dataclass
class MigrateResult:
    """Result of the migrate use case."""

    run: MigrationRun | None = None
    verification: VerificationResult | None = None
    target_root: str = ""
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.run is not None and not self.run.failed

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        assert self.run is not None
        data = {"target_root": self.target_root, "migration": self.run.to_dict()}
        if self.verification is not None:
            data["verification"] = self.verification.to_dict()
        return data


def run_migrate(
    config_path: Path | None = None,
    only: Iterable[str] | None = None,
    dry_run: bool = False,
    confirm_cleanup: ConfirmCleanup | None = None,
    env_store: EnvStore | None = None,
    runner: CommandRunner | None = None,
) -> MigrateResult:
    """Run the full pipeline.

    Args:
        config_path: Optional explicit path to relocator.yml.
        only: Restrict to these package-manager names.
        dry_run: Plan only; no directory, env or file changes.
        confirm_cleanup: Asked once per successfully migrated source.
        env_store: System-scope env store override (tests).
        runner: Command runner override (tests).
    """
    result = MigrateResult()
    try:
        ctx = build_context(config_path, only=only, env_store=env_store, runner=runner)
    except ConfigInvalid as e:
        result.error = str(e)
        return result

    settings = ctx.settings
    result.target_root = settings.target_root
    logger.info(
        "%s %d package managers → %s",
        "Planning" if dry_run else "Migrating",
        len(ctx.catalog),
        settings.target_root,
    )

    orchestrator = MigrationOrchestrator(
        detector=Detector(which=ctx.runner.which),
        env=ctx.env,
        mover=DirectoryMover(
            tolerance=settings.size_tolerance,
            verify_files=settings.verify_files,
        ),
        dry_run=dry_run,
        confirm_cleanup=confirm_cleanup,
    )
    result.run = orchestrator.run(ctx.catalog)

    engine = VerificationEngine(ctx.env, ctx.runner, probe_timeout=settings.probe_timeout)
    result.verification = engine.verify(ctx.catalog)
    return result
