"""
Cache Relocator — CLI entrypoint.

Usage:
    cache-relocator --help
    cache-relocator migrate --dry-run
    cache-relocator migrate --only npm --yes
    cache-relocator verify --json
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from typing import NoReturn

import click

from cache_relocator import __version__
from cache_relocator.core.observability.logging_config import (
    LOG_FILE_ENV,
    LOG_FILE_LEVEL_ENV,
    resolve_level,
    setup_logging,
)

# Exit codes
EXIT_FAILED = 1
EXIT_NOT_ELEVATED = 2

_only_option = click.option(
    "--only",
    "only",
    multiple=True,
    metavar="NAME",
    help="Limit to this package manager (repeatable).",
)
_json_option = click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")


@click.group()
@click.version_option(version=__version__, prog_name="cache-relocator")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to relocator.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """Cache Relocator — move package-manager caches to a dedicated drive."""
    ctx.ensure_object(dict)
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    setup_logging(
        level=resolve_level(verbose=verbose, quiet=quiet, debug=debug),
        log_file=os.environ.get(LOG_FILE_ENV),
        log_file_level=os.environ.get(LOG_FILE_LEVEL_ENV),
        quiet_third_party=not debug,
    )


def _fail(message: str, as_json: bool, code: int = EXIT_FAILED) -> NoReturn:
    if as_json:
        click.echo(json.dumps({"error": message}, indent=2))
    else:
        click.secho(f"❌ {message}", fg="red", err=True)
    sys.exit(code)


# ── Catalog ─────────────────────────────────────────────────────

@cli.command()
@_json_option
@click.pass_context
def catalog(ctx: click.Context, as_json: bool) -> None:
    """List the package managers this tool knows about."""
    from cache_relocator.core.config.catalog_loader import load_catalog
    from cache_relocator.core.config.loader import load_settings
    from cache_relocator.core.errors import ConfigInvalid

    try:
        cat = load_catalog(load_settings(ctx.obj.get("config_path")))
    except ConfigInvalid as e:
        _fail(str(e), as_json)

    if as_json:
        click.echo(json.dumps([d.model_dump(mode="json") for d in cat], indent=2))
        return

    click.secho(f"\n📚 {len(cat)} package managers", fg="cyan", bold=True)
    for d in cat:
        click.secho(f"   {d.name:<10}", bold=True, nl=False)
        click.echo(f" {d.env_var:<28} → {d.target_path}")
        if d.is_templated and not ctx.obj.get("quiet"):
            click.secho(f"              value: {d.env_value_template}", dim=True)
    click.echo()


# ── Detect ──────────────────────────────────────────────────────

@cli.command()
@_only_option
@_json_option
@click.pass_context
def detect(ctx: click.Context, only: tuple[str, ...], as_json: bool) -> None:
    """Detect installed package managers (read-only)."""
    from cache_relocator.core.use_cases.detect import run_detect
    from cache_relocator.ui.cli.render import RunReport, get_renderer

    result = run_detect(config_path=ctx.obj.get("config_path"), only=only)
    if result.error:
        _fail(result.error, as_json)

    report = RunReport(detections=result.detections)
    get_renderer(as_json, quiet=ctx.obj.get("quiet", False)).render(report)


# ── Migrate ─────────────────────────────────────────────────────

@cli.command()
@click.option("--dry-run", is_flag=True, help="Show what would happen without changing anything.")
@_only_option
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Delete every migrated source without asking.")
@click.option("--no-cleanup", is_flag=True, help="Keep every migrated source.")
@_json_option
@click.pass_context
def migrate(
    ctx: click.Context,
    dry_run: bool,
    only: tuple[str, ...],
    assume_yes: bool,
    no_cleanup: bool,
    as_json: bool,
) -> None:
    """Detect, relocate caches, set env vars, then verify."""
    from cache_relocator.core.services import elevation
    from cache_relocator.core.use_cases.migrate import run_migrate
    from cache_relocator.ui.cli.render import RunReport, get_renderer

    if assume_yes and no_cleanup:
        raise click.UsageError("--yes and --no-cleanup are mutually exclusive")

    if not dry_run and not elevation.is_elevated():
        _fail(
            "Administrator/root rights are required to set system-wide variables (try --dry-run).",
            as_json,
            code=EXIT_NOT_ELEVATED,
        )

    if no_cleanup:
        confirm = None
    elif assume_yes:
        def confirm(record):
            return True
    elif as_json:
        # no prompts in JSON mode
        confirm = None
    else:
        def confirm(record):
            return click.confirm(
                f"   Delete old cache {record.source_path} for {record.name}?",
                default=False,
            )

    result = run_migrate(
        config_path=ctx.obj.get("config_path"),
        only=only,
        dry_run=dry_run,
        confirm_cleanup=confirm,
    )
    if result.error:
        _fail(result.error, as_json)

    assert result.run is not None
    report = RunReport(
        target_root=result.target_root,
        detections=result.run.detections,
        records=result.run.records,
        verification=result.verification,
        dry_run=dry_run,
    )
    get_renderer(as_json, quiet=ctx.obj.get("quiet", False)).render(report)

    if not result.ok:
        sys.exit(EXIT_FAILED)


# ── Verify ──────────────────────────────────────────────────────

@cli.command()
@_only_option
@_json_option
@click.pass_context
def verify(ctx: click.Context, only: tuple[str, ...], as_json: bool) -> None:
    """Check env vars, target directories and tool-reported paths."""
    from cache_relocator.core.use_cases.verify import run_verify
    from cache_relocator.ui.cli.render import RunReport, get_renderer

    result = run_verify(config_path=ctx.obj.get("config_path"), only=only)
    if result.error:
        _fail(result.error, as_json)

    assert result.verification is not None
    report = RunReport(target_root=result.target_root, verification=result.verification)
    get_renderer(as_json, quiet=ctx.obj.get("quiet", False)).render(report)

    if not result.verification.healthy:
        sys.exit(EXIT_FAILED)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
