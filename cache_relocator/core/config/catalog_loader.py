"""
Catalog loader — turns raw catalog entries into a validated Catalog.

Entries come from the built-in ``package_managers.json`` plus any
``extra_managers`` in the settings.  Relative ``target_path`` values
are joined onto ``target_root``; the path flavour follows the root,
so a ``D:\\cache`` root yields backslash-separated targets.
"""

from __future__ import annotations

import logging
import ntpath
import os
from typing import Any

from pydantic import ValidationError

from cache_relocator.core.data import get_registry
from cache_relocator.core.errors import ConfigInvalid
from cache_relocator.core.models.descriptor import Catalog, PackageManagerDescriptor
from cache_relocator.core.models.settings import Settings
from cache_relocator.core.services.paths import is_windows_path

logger = logging.getLogger(__name__)


def resolve_target(target_root: str, target_path: str) -> str:
    """Join a catalog target onto the destination root."""
    if is_windows_path(target_path) or os.path.isabs(target_path):
        return target_path
    parts = [p for p in target_path.replace("\\", "/").split("/") if p]
    if is_windows_path(target_root):
        return ntpath.normpath(ntpath.join(target_root, *parts))
    return os.path.normpath(os.path.join(target_root, *parts))


def build_descriptor(entry: dict[str, Any], target_root: str) -> PackageManagerDescriptor:
    """Validate one raw catalog entry.

    Raises:
        ConfigInvalid: If the entry is malformed.
    """
    if not isinstance(entry, dict):
        raise ConfigInvalid(f"Catalog entry must be a mapping, got {type(entry).__name__}")

    data = dict(entry)
    if isinstance(data.get("target_path"), str):
        data["target_path"] = resolve_target(target_root, data["target_path"])

    try:
        return PackageManagerDescriptor.model_validate(data)
    except ValidationError as e:
        label = entry.get("name", "<unnamed>")
        raise ConfigInvalid(f"Invalid catalog entry '{label}': {e}") from e


def build_catalog(
    entries: list[dict[str, Any]],
    target_root: str,
) -> Catalog:
    """Build a Catalog from raw entries, checking uniqueness."""
    return Catalog(build_descriptor(e, target_root) for e in entries)


def load_catalog(settings: Settings | None = None) -> Catalog:
    """Load the built-in catalog, extended and filtered by settings.

    Raises:
        ConfigInvalid: On any malformed entry, duplicate, or unknown
            name in ``settings.managers``.
    """
    settings = settings or Settings()
    entries = list(get_registry().package_managers) + list(settings.extra_managers)
    catalog = build_catalog(entries, settings.target_root)

    if settings.managers:
        catalog = catalog.select(settings.managers)

    logger.info("Catalog ready: %d package managers → %s", len(catalog), settings.target_root)
    return catalog
