"""
Verify use case — classify the machine's current cache configuration.

Read-only; safe to run at any time and any number of times.
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
from cache_relocator.core.services.verification import VerificationEngine

logger = logging.getLogger(__name__)


@dataclass
class VerifyResult:
    """Result of the verify use case."""

    verification: VerificationResult | None = None
    target_root: str = ""
    error: str | None = None

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        assert self.verification is not None
        return {
            "target_root": self.target_root,
            "verification": self.verification.to_dict(),
        }


def run_verify(
    config_path: Path | None = None,
    only: Iterable[str] | None = None,
    env_store: EnvStore | None = None,
    runner: CommandRunner | None = None,
) -> VerifyResult:
    """Verify every cataloged package manager against live state."""
    result = VerifyResult()
    try:
        ctx = build_context(config_path, only=only, env_store=env_store, runner=runner)
    except ConfigInvalid as e:
        result.error = str(e)
        return result

    engine = VerificationEngine(ctx.env, ctx.runner, probe_timeout=ctx.settings.probe_timeout)
    result.verification = engine.verify(ctx.catalog)
    result.target_root = ctx.settings.target_root
    return result
