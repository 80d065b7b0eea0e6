"""System-scope environment variable stores."""

from cache_relocator.adapters.env.file_store import FileEnvStore
from cache_relocator.adapters.env.registry_store import RegistryEnvStore

__all__ = ["FileEnvStore", "RegistryEnvStore"]
