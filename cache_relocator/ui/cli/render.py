"""
Report rendering for the CLI.

The engine hands back plain result objects; a :class:`Renderer` turns
one :class:`RunReport` into terminal output.  Text output uses click
styling, JSON output is the reports' ``to_dict()`` forms.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

import click

from cache_relocator.core.models.descriptor import PackageManagerDescriptor
from cache_relocator.core.models.migration import MigrationRecord
from cache_relocator.core.models.verification import ProbeStatus, VerificationResult
from cache_relocator.core.services.detection import DetectionReport


@dataclass
class RunReport:
    """Everything a command wants shown."""

    target_root: str = ""
    detections: list[tuple[PackageManagerDescriptor, DetectionReport]] = field(default_factory=list)
    records: list[MigrationRecord] = field(default_factory=list)
    verification: VerificationResult | None = None
    dry_run: bool = False

    def to_dict(self) -> dict:
        data: dict = {"target_root": self.target_root, "dry_run": self.dry_run}
        if self.detections:
            data["detections"] = [r.to_dict() for _, r in self.detections]
            data["installed"] = [r.name for _, r in self.detections if r.installed]
        if self.records:
            data["records"] = [r.to_dict() for r in self.records]
            data["summary"] = {
                "processed": sum(1 for r in self.records if r.processed),
                "migrated": sum(1 for r in self.records if r.migrated),
                "failed": sum(1 for r in self.records if r.status == "failed"),
                "bytes_copied": sum(r.bytes_copied for r in self.records),
            }
        if self.verification is not None:
            data["verification"] = self.verification.to_dict()
        return data


class Renderer(ABC):
    @abstractmethod
    def render(self, report: RunReport) -> None:
        """Write *report* to stdout."""


class JsonRenderer(Renderer):
    def render(self, report: RunReport) -> None:
        click.echo(json.dumps(report.to_dict(), indent=2))


_STATUS_COLORS = {
    "ok": "green",
    "planned": "cyan",
    "partial": "yellow",
    "failed": "red",
    "not_detected": "white",
}

_PROBE_COLORS = {
    ProbeStatus.OK: "green",
    ProbeStatus.PENDING_RESTART: "yellow",
    ProbeStatus.ERROR: "red",
    ProbeStatus.UNKNOWN: "white",
}


def format_bytes(size: int) -> str:
    """Human-readable size, e.g. ``1.5 GiB``."""
    if size < 1024:
        return f"{size} B"
    value = size / 1024
    for unit in ("KiB", "MiB"):
        if value < 1024:
            return f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} GiB"


class TextRenderer(Renderer):
    """Colored, human-oriented output."""

    def __init__(self, quiet: bool = False):
        self._quiet = quiet

    def render(self, report: RunReport) -> None:
        if not self._quiet and report.target_root:
            click.secho(f"\n📦 Cache target: {report.target_root}", fg="cyan", bold=True)
            if report.dry_run:
                click.secho("   (dry run: nothing will be changed)", fg="cyan")
            click.echo()

        if report.detections and not report.records:
            self._detections(report.detections)
        if report.records:
            self._records(report.records)
        if report.verification is not None:
            self._verification(report.verification)

    # ── Sections ────────────────────────────────────────────────

    def _detections(self, detections: list[tuple[PackageManagerDescriptor, DetectionReport]]) -> None:
        installed = sum(1 for _, r in detections if r.installed)
        click.secho(f"   Detected: {installed}/{len(detections)}", fg="white", bold=True)
        for _, report in detections:
            if report.installed:
                click.secho(f"     ✓ {report.name:<10}", fg="green", nl=False)
                click.echo(f" {report.evidence}")
            elif not self._quiet:
                click.secho(f"     · {report.name:<10} not installed", dim=True)
        click.echo()

    def _records(self, records: list[MigrationRecord]) -> None:
        click.secho("   Migration:", fg="white", bold=True)
        for record in records:
            if not record.detected:
                if not self._quiet:
                    click.secho(f"     · {record.name:<10} not installed", dim=True)
                continue

            color = _STATUS_COLORS.get(record.status, "white")
            click.secho(f"     {record.name:<10} ", nl=False, bold=True)
            click.secho(record.status, fg=color)
            for receipt in record.receipts:
                if receipt.stage == "detect" and self._quiet:
                    continue
                if receipt.failed:
                    click.secho(f"       ✗ {receipt.stage}: {receipt.error}", fg="red")
                elif not self._quiet:
                    mark = "✓" if receipt.ok else "–"
                    click.echo(f"       {mark} {receipt.stage}: {receipt.output}")

        copied = sum(r.bytes_copied for r in records)
        if copied:
            click.echo(f"\n   Copied {format_bytes(copied)}")
        click.echo()

    def _verification(self, result: VerificationResult) -> None:
        click.secho("   Verification:", fg="white", bold=True)
        for name in result.env_vars_passed:
            click.secho(f"     ✓ {name:<10} {result.env_values.get(name)}", fg="green")
        for name in result.env_vars_failed:
            click.secho(f"     ✗ {name:<10} {result.env_values.get(name)} (off target volume)", fg="red")
        if not self._quiet:
            for name in result.env_vars_not_set:
                click.secho(f"     · {name:<10} not set", dim=True)

        if result.dirs_missing and not self._quiet:
            click.secho(f"     Missing directories: {', '.join(result.dirs_missing)}", fg="yellow")

        for name, probe in result.probes.items():
            click.secho(f"     {name} probe: {probe.status.value}", fg=_PROBE_COLORS[probe.status], nl=False)
            click.echo(f" ({probe.path or probe.detail})" if (probe.path or probe.detail) else "")

        click.echo(
            f"\n   {len(result.env_vars_passed)}/{result.total_checked} configured, "
            f"{len(result.dirs_exist)} directories, "
            f"{format_bytes(result.total_cache_size_bytes)} on target"
        )
        if result.healthy:
            click.secho("   ✅ Healthy", fg="green", bold=True)
        else:
            click.secho("   ❌ Needs attention", fg="red", bold=True)
        click.echo()


def get_renderer(as_json: bool, quiet: bool = False) -> Renderer:
    return JsonRenderer() if as_json else TextRenderer(quiet=quiet)
