"""
Central data registry for static catalogs.

Loads base catalogs from ``cache_relocator/core/data/catalogs/`` once
at first access and caches them for the process lifetime.

Usage::

    from cache_relocator.core.data import get_registry

    entries = get_registry().package_managers   # list[dict]
"""

from __future__ import annotations

import json
import logging
from functools import cached_property
from pathlib import Path

from cache_relocator.core.errors import ConfigInvalid

logger = logging.getLogger(__name__)

_DATA_DIR = Path(__file__).parent


def _load_json(relative_path: str) -> list | dict:
    """Load a JSON file relative to the data directory."""
    path = _DATA_DIR / relative_path
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError as e:
        raise ConfigInvalid(f"Data file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ConfigInvalid(f"Invalid JSON in {path}: {e}") from e


class DataRegistry:
    """Central registry for static data catalogs.

    Each property lazily loads its JSON file on first access and caches
    the result for the lifetime of the instance.
    """

    @cached_property
    def package_managers(self) -> list[dict]:
        """Raw package-manager catalog entries (validated by the catalog loader)."""
        data = _load_json("catalogs/package_managers.json")
        if not isinstance(data, list):
            raise ConfigInvalid("package_managers.json must contain a JSON list")
        logger.debug("Loaded %d package manager definitions", len(data))
        return data


_registry: DataRegistry | None = None


def get_registry() -> DataRegistry:
    """Process-wide registry singleton."""
    global _registry
    if _registry is None:
        _registry = DataRegistry()
    return _registry
