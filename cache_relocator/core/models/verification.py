"""
Verification result — classification of live system state.

Each cataloged descriptor lands in exactly one env bucket
(passed / failed / not_set) and exactly one dir bucket
(exist / missing).  The result is a pure function of environment
and filesystem state, so two results taken without mutation in
between compare equal.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum


class ProbeStatus(str, Enum):
    """Outcome of an external-tool status query."""

    OK = "ok"
    PENDING_RESTART = "pending_restart"   # env is right, tool still reports old path
    ERROR = "error"
    UNKNOWN = "unknown"                   # tool not present


@dataclass(frozen=True)
class ProbeReport:
    status: ProbeStatus
    path: str | None = None
    detail: str = ""

    def to_dict(self) -> dict:
        return {"status": self.status.value, "path": self.path, "detail": self.detail}


@dataclass
class VerificationResult:
    """Aggregated classification across all descriptors."""

    env_vars_passed: list[str] = field(default_factory=list)
    env_vars_failed: list[str] = field(default_factory=list)
    env_vars_not_set: list[str] = field(default_factory=list)

    dirs_exist: list[str] = field(default_factory=list)
    dirs_missing: list[str] = field(default_factory=list)

    total_cache_size_bytes: int = 0
    dir_sizes: dict[str, int] = field(default_factory=dict)

    # Parsed path currently configured per descriptor (None = not set)
    env_values: dict[str, str | None] = field(default_factory=dict)

    probes: dict[str, ProbeReport] = field(default_factory=dict)

    @property
    def total_checked(self) -> int:
        return len(self.env_vars_passed) + len(self.env_vars_failed) + len(self.env_vars_not_set)

    @property
    def healthy(self) -> bool:
        """No env var points off the destination volume and no probe errored."""
        if self.env_vars_failed:
            return False
        return all(p.status != ProbeStatus.ERROR for p in self.probes.values())

    def env_status(self, name: str) -> str | None:
        """passed | failed | not_set for one descriptor, None if not checked."""
        if name in self.env_vars_passed:
            return "passed"
        if name in self.env_vars_failed:
            return "failed"
        if name in self.env_vars_not_set:
            return "not_set"
        return None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["probes"] = {name: p.to_dict() for name, p in self.probes.items()}
        data["healthy"] = self.healthy
        return data
