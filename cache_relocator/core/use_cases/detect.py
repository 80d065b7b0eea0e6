"""
Detection use case — which cataloged package managers are installed?
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from cache_relocator.adapters.base import CommandRunner
from cache_relocator.core.config.catalog_loader import load_catalog
from cache_relocator.core.config.loader import load_settings
from cache_relocator.core.errors import ConfigInvalid
from cache_relocator.core.models.descriptor import PackageManagerDescriptor
from cache_relocator.core.services.detection import DetectionReport, Detector


@dataclass
class DetectResult:
    """Result of the detect use case."""

    detections: list[tuple[PackageManagerDescriptor, DetectionReport]] = field(default_factory=list)
    error: str | None = None

    @property
    def installed(self) -> list[str]:
        return [d.name for d, r in self.detections if r.installed]

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        return {
            "total": len(self.detections),
            "installed": self.installed,
            "detections": [r.to_dict() for _, r in self.detections],
        }


def run_detect(
    config_path: Path | None = None,
    only: Iterable[str] | None = None,
    runner: CommandRunner | None = None,
) -> DetectResult:
    """Detect every cataloged package manager.

    Args:
        config_path: Optional explicit path to relocator.yml.
        only: Restrict to these package-manager names.
        runner: Command resolver override (tests).
    """
    result = DetectResult()
    try:
        catalog = load_catalog(load_settings(config_path))
        if only:
            catalog = catalog.select(only)
    except ConfigInvalid as e:
        result.error = str(e)
        return result

    detector = Detector(which=runner.which if runner else None)
    result.detections = detector.detect_all(catalog)
    return result
