"""
Detection service — is a package manager installed on this machine?

A descriptor is installed when ANY detection command resolves on the
search path OR ANY detection path pattern matches an existing entry.
Adding a command or pattern can only turn "not installed" into
"installed", never the reverse.

Pure read-only probes.  "Not found" is an expected outcome, so
resolution and globbing errors are swallowed.
"""

from __future__ import annotations

import glob
import logging
import shutil
from collections.abc import Callable, Mapping
from dataclasses import dataclass

from cache_relocator.core.models.descriptor import Catalog, PackageManagerDescriptor
from cache_relocator.core.services.paths import expand_path

logger = logging.getLogger(__name__)

Which = Callable[[str], str | None]


@dataclass(frozen=True)
class DetectionReport:
    """Result of detecting one package manager."""

    name: str
    installed: bool
    command: str | None = None        # first command that resolved
    command_path: str | None = None
    matched_path: str | None = None   # first filesystem match

    @property
    def evidence(self) -> str:
        if self.command:
            return f"command '{self.command}' → {self.command_path}"
        if self.matched_path:
            return f"path {self.matched_path}"
        return ""

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "installed": self.installed,
            "command": self.command,
            "command_path": self.command_path,
            "matched_path": self.matched_path,
        }


class Detector:
    """Read-only package-manager detection.

    Args:
        which: Executable resolver (defaults to ``shutil.which``).
        environ: Variables used to expand path patterns
            (defaults to the process environment).
    """

    def __init__(
        self,
        which: Which | None = None,
        environ: Mapping[str, str] | None = None,
    ):
        self._which = which or shutil.which
        self._environ = environ

    def _resolve_command(self, command: str) -> str | None:
        try:
            return self._which(command)
        except Exception as e:
            logger.debug("Resolving %s failed: %s", command, e)
            return None

    def _match_pattern(self, pattern: str) -> str | None:
        expanded = expand_path(pattern, self._environ)
        try:
            matches = sorted(glob.glob(expanded))
        except (OSError, ValueError) as e:
            logger.debug("Globbing %s failed: %s", expanded, e)
            return None
        return matches[0] if matches else None

    def detect(self, descriptor: PackageManagerDescriptor) -> DetectionReport:
        for command in descriptor.detection_commands:
            resolved = self._resolve_command(command)
            if resolved:
                logger.debug("%s detected via command %s", descriptor.name, command)
                return DetectionReport(
                    name=descriptor.name,
                    installed=True,
                    command=command,
                    command_path=resolved,
                )

        for pattern in descriptor.detection_paths:
            matched = self._match_pattern(pattern)
            if matched:
                logger.debug("%s detected via path %s", descriptor.name, matched)
                return DetectionReport(
                    name=descriptor.name,
                    installed=True,
                    matched_path=matched,
                )

        return DetectionReport(name=descriptor.name, installed=False)

    def is_installed(self, descriptor: PackageManagerDescriptor) -> bool:
        return self.detect(descriptor).installed

    def detect_all(
        self, catalog: Catalog,
    ) -> list[tuple[PackageManagerDescriptor, DetectionReport]]:
        """Detect every descriptor, in catalog order."""
        results = [(d, self.detect(d)) for d in catalog]
        found = sum(1 for _, r in results if r.installed)
        logger.info("Detected %d of %d package managers", found, len(results))
        return results
