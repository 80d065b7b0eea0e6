"""Adapters — bindings to the machine (processes, environment storage).

Public re-exports for convenient access.
"""

from cache_relocator.adapters.base import CommandResult, CommandRunner, EnvStore
from cache_relocator.adapters.mock import FakeCommandRunner, MemoryEnvStore
from cache_relocator.adapters.registry import create_env_store, create_runner

__all__ = [
    "CommandResult",
    "CommandRunner",
    "EnvStore",
    "FakeCommandRunner",
    "MemoryEnvStore",
    "create_env_store",
    "create_runner",
]
