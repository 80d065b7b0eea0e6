"""
Package-manager descriptors and the catalog that holds them.

A descriptor is pure data: how to detect a package manager, which
environment variable it reads for its cache location, where that
cache should live and where it might live today.  Behavior that
differs per package manager (templated env values, external probes)
is keyed off the descriptor fields or its name — never subclassing.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator

from pydantic import BaseModel, ConfigDict, field_validator

from cache_relocator.core.errors import ConfigInvalid

PATH_PLACEHOLDER = "{path}"

_ENV_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class PackageManagerDescriptor(BaseModel):
    """Static detection and migration parameters for one package manager."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""

    # How to detect it
    detection_commands: tuple[str, ...] = ()
    detection_paths: tuple[str, ...] = ()   # may contain wildcards / %VAR%

    # How it is configured
    env_var: str
    env_value_template: str | None = None   # e.g. "-Dmaven.repo.local={path}"

    # Where the cache goes, and where it may be now (first existing wins)
    target_path: str
    source_paths: tuple[str, ...] = ()

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be empty")
        return value

    @field_validator("env_var")
    @classmethod
    def _env_var_is_identifier(cls, value: str) -> str:
        if not _ENV_NAME_RE.match(value):
            raise ValueError(f"not a valid environment variable name: {value!r}")
        return value

    @field_validator("env_value_template")
    @classmethod
    def _template_has_one_placeholder(cls, value: str | None) -> str | None:
        if value is None:
            return None
        if value.count(PATH_PLACEHOLDER) != 1:
            raise ValueError(
                f"template must contain exactly one {PATH_PLACEHOLDER}: {value!r}"
            )
        return value

    @field_validator("target_path")
    @classmethod
    def _target_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("target_path must not be empty")
        return value

    @property
    def is_templated(self) -> bool:
        return self.env_value_template is not None


class Catalog:
    """Ordered, validated collection of descriptors.

    Names and env vars are unique; a violation raises ``ConfigInvalid``
    because it can only come from a broken catalog file.
    """

    def __init__(self, descriptors: Iterable[PackageManagerDescriptor]):
        self._descriptors: list[PackageManagerDescriptor] = list(descriptors)
        self._check_unique()

    def _check_unique(self) -> None:
        names: set[str] = set()
        env_vars: set[str] = set()
        for d in self._descriptors:
            key = d.name.lower()
            if key in names:
                raise ConfigInvalid(f"Duplicate package manager name: {d.name}")
            names.add(key)

            env_key = d.env_var.upper()
            if env_key in env_vars:
                raise ConfigInvalid(f"Duplicate environment variable: {d.env_var} ({d.name})")
            env_vars.add(env_key)

    def __iter__(self) -> Iterator[PackageManagerDescriptor]:
        return iter(self._descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get(name) is not None

    def get(self, name: str) -> PackageManagerDescriptor | None:
        """Look up a descriptor by name (case-insensitive)."""
        wanted = name.lower()
        for d in self._descriptors:
            if d.name.lower() == wanted:
                return d
        return None

    @property
    def names(self) -> list[str]:
        return [d.name for d in self._descriptors]

    def select(self, names: Iterable[str]) -> Catalog:
        """Return a sub-catalog, preserving catalog order.

        Raises:
            ConfigInvalid: if a requested name is not in the catalog.
        """
        wanted = {n.lower() for n in names}
        unknown = wanted - {n.lower() for n in self.names}
        if unknown:
            raise ConfigInvalid(
                f"Unknown package manager(s): {', '.join(sorted(unknown))}. "
                f"Known: {', '.join(self.names)}"
            )
        return Catalog(d for d in self._descriptors if d.name.lower() in wanted)

    def __repr__(self) -> str:
        return f"<Catalog {self.names!r}>"
