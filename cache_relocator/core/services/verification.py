"""
Verification engine — classify the live configuration of every
cataloged package manager.

Stateless: every call re-reads the system-scope env store and the
filesystem.  It never looks at migration records and never mutates
anything, so running it twice in a row gives the same answer and
re-running the tool after a partial migration is always safe.

Per descriptor:
    env check   passed   — set, and on the destination volume
                failed   — set, pointing elsewhere
                not_set  — absent
    dir check   exist / missing (target_path), size summed when present
    probe       only for descriptors with an entry in ``PROBES``
"""

from __future__ import annotations

import logging
import os

from cache_relocator.adapters.base import CommandRunner
from cache_relocator.core.models.descriptor import Catalog
from cache_relocator.core.models.verification import VerificationResult
from cache_relocator.core.services.env_config import EnvConfigurator
from cache_relocator.core.services.mover import tree_size
from cache_relocator.core.services.paths import same_volume
from cache_relocator.core.services.probes import PROBES, Probe

logger = logging.getLogger(__name__)


class VerificationEngine:
    """Re-derive configuration state from the machine."""

    def __init__(
        self,
        env: EnvConfigurator,
        runner: CommandRunner,
        probes: dict[str, Probe] | None = None,
        probe_timeout: int = 30,
    ):
        self._env = env
        self._runner = runner
        self._probes = PROBES if probes is None else probes
        self._probe_timeout = probe_timeout

    def verify(self, catalog: Catalog) -> VerificationResult:
        result = VerificationResult()

        for descriptor in catalog:
            name = descriptor.name

            # ── Env check ──
            configured = self._env.get_path(descriptor)
            result.env_values[name] = configured
            if configured is None:
                result.env_vars_not_set.append(name)
                env_passed = False
            elif same_volume(configured, descriptor.target_path):
                result.env_vars_passed.append(name)
                env_passed = True
            else:
                result.env_vars_failed.append(name)
                env_passed = False
                logger.info("%s: %s points to %s", name, descriptor.env_var, configured)

            # ── Directory check (independent of the env check) ──
            if os.path.isdir(descriptor.target_path):
                size = tree_size(descriptor.target_path)
                result.dirs_exist.append(name)
                result.dir_sizes[name] = size
                result.total_cache_size_bytes += size
            else:
                result.dirs_missing.append(name)

            # ── Provider-specific probe ──
            probe = self._probes.get(name)
            if probe is not None:
                result.probes[name] = probe(
                    descriptor, env_passed, self._runner, self._probe_timeout,
                )

        logger.info(
            "Verified %d package managers: %d passed, %d failed, %d not set",
            result.total_checked,
            len(result.env_vars_passed),
            len(result.env_vars_failed),
            len(result.env_vars_not_set),
        )
        return result
