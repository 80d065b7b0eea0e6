"""
Engine context — settings, catalog and adapters for one invocation.

Built once per command by the use cases.  Tests pass their own
``env_store`` / ``runner`` doubles; real runs get the adapters the
registry picks for this machine.

No module-level state: every run gets a fresh context.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from cache_relocator.adapters.base import CommandRunner, EnvStore
from cache_relocator.adapters.registry import create_env_store, create_runner
from cache_relocator.core.config.catalog_loader import load_catalog
from cache_relocator.core.config.loader import load_settings
from cache_relocator.core.models.descriptor import Catalog
from cache_relocator.core.models.settings import Settings
from cache_relocator.core.services.env_config import EnvConfigurator

logger = logging.getLogger(__name__)


@dataclass
class EngineContext:
    settings: Settings
    catalog: Catalog
    env: EnvConfigurator
    runner: CommandRunner


def build_context(
    config_path: Path | None = None,
    only: Iterable[str] | None = None,
    env_store: EnvStore | None = None,
    runner: CommandRunner | None = None,
) -> EngineContext:
    """Load settings and catalog, and wire adapters.

    Raises:
        ConfigInvalid: If settings or the catalog are malformed, or
            *only* names an unknown package manager.
    """
    settings = load_settings(config_path)
    catalog = load_catalog(settings)

    only = list(only or [])
    if only:
        catalog = catalog.select(only)

    store = env_store or create_env_store(settings)
    logger.debug("Context: %d package managers, env store %r", len(catalog), store)
    return EngineContext(
        settings=settings,
        catalog=catalog,
        env=EnvConfigurator(store),
        runner=runner or create_runner(),
    )
