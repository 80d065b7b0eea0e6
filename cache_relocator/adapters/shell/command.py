"""
Subprocess command runner — resolve and run external tools.

Used for read-only status queries (``dotnet nuget locals ...``).
All subprocess handling lives here so callers only ever see a
``CommandResult``.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import time

from cache_relocator.adapters.base import CommandResult, CommandRunner

logger = logging.getLogger(__name__)


class SubprocessRunner(CommandRunner):
    """Run commands with ``subprocess.run`` and capture output."""

    @property
    def name(self) -> str:
        return "subprocess"

    def which(self, command: str) -> str | None:
        try:
            return shutil.which(command)
        except OSError:
            return None

    def run(self, args: list[str], timeout: int = 30) -> CommandResult:
        logger.debug("Executing: %s", " ".join(args))
        start = time.monotonic()

        try:
            result = subprocess.run(
                args,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            return CommandResult(
                args=args,
                error=f"Command timed out after {timeout}s",
                duration_ms=int((time.monotonic() - start) * 1000),
            )
        except OSError as e:
            return CommandResult(
                args=args,
                error=f"Command execution error: {e}",
                duration_ms=int((time.monotonic() - start) * 1000),
            )

        elapsed_ms = int((time.monotonic() - start) * 1000)
        if result.returncode != 0:
            logger.debug("Command %s exited with %d", args[0], result.returncode)

        return CommandResult(
            args=args,
            return_code=result.returncode,
            stdout=result.stdout.strip(),
            stderr=result.stderr.strip(),
            duration_ms=elapsed_ms,
        )
