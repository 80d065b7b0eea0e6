"""
External probes — ask a package manager where it *actually* caches.

Some tools resolve their cache path through more than one layer
(config files, SDK defaults, per-tool overrides), so a correct env
var does not guarantee the tool honours it.  A probe runs the tool's
own read-only status query and compares the answer to the expected
destination.

Probes are looked up by descriptor name in ``PROBES``.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable

from cache_relocator.adapters.base import CommandRunner
from cache_relocator.core.errors import ProbeFailed
from cache_relocator.core.models.descriptor import PackageManagerDescriptor
from cache_relocator.core.models.verification import ProbeReport, ProbeStatus
from cache_relocator.core.services.paths import same_volume

logger = logging.getLogger(__name__)

NUGET_LOCALS_ARGS = ["dotnet", "nuget", "locals", "global-packages", "--list"]

_NUGET_LINE_RE = re.compile(r"global-packages:\s*(?P<path>.+?)\s*$", re.MULTILINE)

# (descriptor, env_passed, runner, timeout) -> report
Probe = Callable[[PackageManagerDescriptor, bool, CommandRunner, int], ProbeReport]


def parse_nuget_locals(output: str) -> str:
    """Extract the global-packages path from ``dotnet nuget locals`` output.

    Handles both ``global-packages: C:\\...`` and the older
    ``info : global-packages: C:\\...`` forms.

    Raises:
        ProbeFailed: If no path is present.
    """
    match = _NUGET_LINE_RE.search(output)
    if not match or not match.group("path"):
        raise ProbeFailed(f"unexpected output: {output.strip()[:200]!r}")
    return match.group("path")


def probe_nuget(
    descriptor: PackageManagerDescriptor,
    env_passed: bool,
    runner: CommandRunner,
    timeout: int = 30,
) -> ProbeReport:
    """Classify the NuGet global-packages folder reported by ``dotnet``."""
    if not runner.which("dotnet"):
        return ProbeReport(status=ProbeStatus.UNKNOWN, detail="dotnet not found")

    result = runner.run(NUGET_LOCALS_ARGS, timeout=timeout)
    try:
        if not result.ok:
            raise ProbeFailed(result.error or result.stderr or f"exit code {result.return_code}")
        reported = parse_nuget_locals(result.stdout)
    except ProbeFailed as e:
        logger.warning("%s probe failed: %s", descriptor.name, e)
        return ProbeReport(status=ProbeStatus.ERROR, detail=str(e))

    if same_volume(reported, descriptor.target_path):
        return ProbeReport(status=ProbeStatus.OK, path=reported)

    if env_passed:
        return ProbeReport(
            status=ProbeStatus.PENDING_RESTART,
            path=reported,
            detail=f"{descriptor.env_var} is set; restart shells to pick it up",
        )

    return ProbeReport(
        status=ProbeStatus.ERROR,
        path=reported,
        detail=f"reported path is off the destination volume and {descriptor.env_var} is not configured",
    )


PROBES: dict[str, Probe] = {
    "nuget": probe_nuget,
}
