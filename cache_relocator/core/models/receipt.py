"""
Stage receipts — the outcome of one step for one package manager.

Every stage the orchestrator visits (detect, ensure_target, set_env,
locate_source, move, cleanup) leaves exactly one receipt.  Stages
never raise past the orchestrator; failures are captured here with
an ``error_kind`` from the error taxonomy so a report can always say
*which* package manager failed at *which* stage.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

Stage = Literal["detect", "ensure_target", "set_env", "locate_source", "move", "cleanup"]

STAGES: tuple[str, ...] = (
    "detect",
    "ensure_target",
    "set_env",
    "locate_source",
    "move",
    "cleanup",
)


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class StageReceipt(BaseModel):
    """Result of running one stage for one descriptor."""

    stage: Stage
    status: Literal["ok", "skipped", "failed"] = "ok"

    started_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0

    output: str = ""
    error: str | None = None
    error_kind: str | None = None    # taxonomy kind, see core.errors

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @property
    def skipped(self) -> bool:
        return self.status == "skipped"

    @classmethod
    def success(cls, stage: Stage, output: str = "", **kwargs: Any) -> StageReceipt:
        """Create a success receipt."""
        return cls(stage=stage, status="ok", output=output, **kwargs)

    @classmethod
    def failure(
        cls,
        stage: Stage,
        error: str,
        error_kind: str | None = None,
        **kwargs: Any,
    ) -> StageReceipt:
        """Create a failure receipt."""
        return cls(stage=stage, status="failed", error=error, error_kind=error_kind, **kwargs)

    @classmethod
    def skip(cls, stage: Stage, reason: str = "", **kwargs: Any) -> StageReceipt:
        """Create a skip receipt."""
        return cls(stage=stage, status="skipped", output=reason, **kwargs)
