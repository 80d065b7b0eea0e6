"""
Adapter registry — pick the right adapters for this machine.

The engine receives adapters by injection; this module is the one
place that decides which concrete classes back a real run.
"""

from __future__ import annotations

import logging
import os

from cache_relocator.adapters.base import CommandRunner, EnvStore
from cache_relocator.adapters.env.file_store import FileEnvStore
from cache_relocator.adapters.env.registry_store import RegistryEnvStore
from cache_relocator.adapters.shell.command import SubprocessRunner
from cache_relocator.core.errors import ConfigInvalid
from cache_relocator.core.models.settings import Settings

logger = logging.getLogger(__name__)


def create_env_store(settings: Settings) -> EnvStore:
    """Build the system-scope env store selected by ``settings.env_store``.

    ``auto`` means the registry on Windows and the env file elsewhere.

    Raises:
        ConfigInvalid: If the registry store is requested off Windows.
    """
    kind = settings.env_store
    if kind == "auto":
        kind = "registry" if os.name == "nt" else "file"

    if kind == "registry":
        if os.name != "nt":
            raise ConfigInvalid("env_store 'registry' is only available on Windows")
        store: EnvStore = RegistryEnvStore()
    else:
        store = FileEnvStore(settings.env_file)

    logger.debug("Using env store: %r", store)
    return store


def create_runner() -> CommandRunner:
    return SubprocessRunner()
