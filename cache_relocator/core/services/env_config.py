"""
Env configurator — point a package manager at its new cache location.

Most package managers read a bare path from their variable
(``NPM_CONFIG_CACHE=D:\\cache\\npm``).  Some embed the path inside an
option string (``MAVEN_OPTS=-Xmx2g -Dmaven.repo.local=D:\\cache\\maven``);
for those the descriptor carries ``env_value_template`` and this
module renders the option on write and extracts the path on read,
leaving the rest of the option string alone.

Values go to system scope only, through an ``EnvStore``.  Already
running processes keep their old environment.
"""

from __future__ import annotations

import logging
import re

from cache_relocator.adapters.base import EnvStore
from cache_relocator.core.models.descriptor import PATH_PLACEHOLDER, PackageManagerDescriptor

logger = logging.getLogger(__name__)


def _quote(path: str) -> str:
    return f'"{path}"' if any(c.isspace() for c in path) else path


def render_template(template: str, path: str) -> str:
    """Embed *path* into an option template."""
    return template.replace(PATH_PLACEHOLDER, _quote(path))


def template_pattern(template: str) -> re.Pattern[str]:
    """Regex that finds a rendered template inside a larger value.

    The path group accepts a double-quoted string or a run of
    non-whitespace characters.
    """
    prefix, _, suffix = template.partition(PATH_PLACEHOLDER)
    return re.compile(
        re.escape(prefix) + r'(?P<path>"[^"]*"|\S+?)' + re.escape(suffix) + r"(?=\s|$)"
    )


def extract_path(template: str, value: str) -> str | None:
    """Pull the embedded path out of a templated value, or None."""
    match = template_pattern(template).search(value)
    if not match:
        return None
    path = match.group("path")
    if len(path) >= 2 and path[0] == path[-1] == '"':
        path = path[1:-1]
    return path


def merge_template(template: str, existing: str | None, path: str) -> str:
    """Replace the embedded option in *existing*, or append it."""
    rendered = render_template(template, path)
    if not existing or not existing.strip():
        return rendered
    pattern = template_pattern(template)
    if pattern.search(existing):
        return pattern.sub(lambda _m: rendered, existing, count=1)
    return f"{existing.rstrip()} {rendered}"


class EnvConfigurator:
    """Read and write package-manager variables at system scope."""

    def __init__(self, store: EnvStore):
        self._store = store

    # ── Raw access ──────────────────────────────────────────────

    def set(self, name: str, value: str) -> None:
        """Write *value* verbatim.

        Raises:
            EnvWriteFailed: On permission or system faults.
        """
        logger.debug("Setting %s via %s", name, self._store.name)
        self._store.set(name, value)

    def get(self, name: str) -> str | None:
        return self._store.get(name)

    # ── Descriptor-aware access ─────────────────────────────────

    def render_value(self, descriptor: PackageManagerDescriptor, path: str) -> str:
        """The full variable value that ``set_path`` would write."""
        if descriptor.env_value_template is None:
            return path
        existing = self._store.get(descriptor.env_var)
        return merge_template(descriptor.env_value_template, existing, path)

    def set_path(self, descriptor: PackageManagerDescriptor, path: str) -> str:
        """Point *descriptor*'s variable at *path*; return the written value.

        Raises:
            EnvWriteFailed: On permission or system faults.
        """
        value = self.render_value(descriptor, path)
        self.set(descriptor.env_var, value)
        logger.info("%s: %s=%s", descriptor.name, descriptor.env_var, value)
        return value

    def get_path(self, descriptor: PackageManagerDescriptor) -> str | None:
        """The cache path currently configured for *descriptor*, or None."""
        value = self._store.get(descriptor.env_var)
        if value is None or not value.strip():
            return None
        if descriptor.env_value_template is None:
            return value
        return extract_path(descriptor.env_value_template, value)
