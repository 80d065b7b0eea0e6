"""
Settings model — operator configuration from relocator.yml.

Every field has a default, so a missing config file is valid.
"""

from __future__ import annotations

import os
from typing import Any, Literal

from pydantic import BaseModel, Field


def _default_target_root() -> str:
    """Destination volume root: env override, else a platform default."""
    override = os.environ.get("CACHE_RELOCATOR_TARGET_ROOT")
    if override:
        return override
    return "D:\\cache" if os.name == "nt" else "/mnt/cache"


class Settings(BaseModel):
    """Operator settings.

    ``extra_managers`` entries use the same schema as the built-in
    catalog file and are validated when the catalog is built.
    """

    target_root: str = Field(default_factory=_default_target_root)

    # Copy integrity
    size_tolerance: float = Field(default=0.01, ge=0.0, lt=1.0)
    verify_files: bool = True

    # Where system-scope env vars live
    env_store: Literal["auto", "registry", "file"] = "auto"
    env_file: str = "/etc/environment"

    # External probes
    probe_timeout: int = Field(default=30, gt=0)

    # Catalog shaping
    managers: list[str] = Field(default_factory=list)          # empty = all
    extra_managers: list[dict[str, Any]] = Field(default_factory=list)
