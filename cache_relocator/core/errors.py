"""
Error taxonomy — every failure the engine can attribute to a stage.

Per-descriptor errors are caught at the orchestrator / verification
boundary and turned into failed receipts.  Only ``ConfigInvalid``
escapes to the caller, because it means the catalog or settings
are broken and no descriptor can be trusted.
"""

from __future__ import annotations


class RelocatorError(Exception):
    """Base class for all engine errors."""

    kind: str = "error"


class SourceNotFound(RelocatorError):
    """The source cache directory does not exist."""

    kind = "not_found"


class SizeMismatch(RelocatorError):
    """Copied tree does not match the source within tolerance."""

    kind = "size_mismatch"

    def __init__(
        self,
        message: str,
        source_size: int = 0,
        destination_size: int = 0,
        failed_files: list[str] | None = None,
        mismatched_files: list[str] | None = None,
    ):
        super().__init__(message)
        self.source_size = source_size
        self.destination_size = destination_size
        self.failed_files = failed_files or []
        self.mismatched_files = mismatched_files or []


class CopyFailed(RelocatorError):
    """An I/O fault stopped the copy before it could be checked."""

    kind = "copy_failed"


class TargetDirFailed(RelocatorError):
    """The destination directory could not be created."""

    kind = "target_dir_failed"


class EnvWriteFailed(RelocatorError):
    """A system-scope environment variable could not be written."""

    kind = "env_write_failed"


class ProbeFailed(RelocatorError):
    """An external status query returned an error or garbage."""

    kind = "probe_failed"


class CleanupFailed(RelocatorError):
    """The migrated source could not be fully deleted."""

    kind = "cleanup_failed"


class ConfigInvalid(RelocatorError):
    """Catalog or settings are malformed. Fatal at startup."""

    kind = "config_invalid"
