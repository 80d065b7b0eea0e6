"""
MigrationRecord — what happened to one package manager in one run.

Records live only for the duration of a run and are handed to the
presentation layer.  The durable truth is the environment variable
and the target directory; verification never reads these records.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from cache_relocator.core.models.receipt import StageReceipt

# Stages whose failure means the descriptor was not migrated
_CRITICAL_STAGES = {"ensure_target", "set_env", "move"}


class MigrationRecord(BaseModel):
    """Per-descriptor migration record."""

    name: str
    env_var: str = ""
    target_path: str = ""

    detected: bool = False
    processed: bool = False
    dry_run: bool = False

    source_path: str | None = None      # migrated (or planned) source
    bytes_copied: int = 0

    cleanup_requested: bool = False
    cleanup_performed: bool = False

    receipts: list[StageReceipt] = Field(default_factory=list)

    def add(self, receipt: StageReceipt) -> StageReceipt:
        self.receipts.append(receipt)
        return receipt

    def receipt_for(self, stage: str) -> StageReceipt | None:
        for r in self.receipts:
            if r.stage == stage:
                return r
        return None

    @property
    def migrated(self) -> bool:
        """Whether a source tree was moved successfully in this run."""
        move = self.receipt_for("move")
        return move is not None and move.ok

    @property
    def failures(self) -> list[StageReceipt]:
        return [r for r in self.receipts if r.failed]

    @property
    def status(self) -> str:
        """not_detected | failed | partial | planned | ok"""
        if not self.detected:
            return "not_detected"
        failed_stages = {r.stage for r in self.failures}
        if failed_stages & _CRITICAL_STAGES:
            return "failed"
        if failed_stages:
            return "partial"
        if self.dry_run:
            return "planned"
        return "ok"

    def to_dict(self) -> dict[str, Any]:
        data = self.model_dump(mode="json")
        data["status"] = self.status
        data["migrated"] = self.migrated
        return data
