"""
Mock adapters — in-memory test doubles for the env store and runner.

Used by the test suite to exercise the engine without touching the
registry, ``/etc/environment`` or real executables.
"""

from __future__ import annotations

from cache_relocator.adapters.base import CommandResult, CommandRunner, EnvStore
from cache_relocator.core.errors import EnvWriteFailed


class MemoryEnvStore(EnvStore):
    """Dict-backed env store.

    Can be configured to fail writes for specific variable names.
    """

    def __init__(self, initial: dict[str, str] | None = None):
        self._values: dict[str, str] = dict(initial or {})
        self._fail_on: dict[str, str] = {}
        self._write_log: list[tuple[str, str]] = []

    @property
    def name(self) -> str:
        return "memory"

    @property
    def values(self) -> dict[str, str]:
        return dict(self._values)

    @property
    def write_log(self) -> list[tuple[str, str]]:
        """Every (name, value) written, in order."""
        return self._write_log

    def set_failure(self, name: str, error: str = "Mock write failure") -> None:
        """Configure writes to *name* to raise EnvWriteFailed."""
        self._fail_on[name] = error

    def get(self, name: str) -> str | None:
        return self._values.get(name)

    def set(self, name: str, value: str) -> None:
        if name in self._fail_on:
            raise EnvWriteFailed(self._fail_on[name])
        self._values[name] = value
        self._write_log.append((name, value))

    def delete(self, name: str) -> None:
        self._values.pop(name, None)


class FakeCommandRunner(CommandRunner):
    """Scripted command runner.

    ``available`` maps command names to resolved paths.  Responses are
    keyed by the full argument tuple; unscripted commands exit 1.
    """

    def __init__(self, available: dict[str, str] | None = None):
        self._available: dict[str, str] = dict(available or {})
        self._responses: dict[tuple[str, ...], CommandResult] = {}
        self._call_log: list[list[str]] = []

    @property
    def name(self) -> str:
        return "fake"

    @property
    def call_log(self) -> list[list[str]]:
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    def add_command(self, command: str, path: str | None = None) -> None:
        self._available[command] = path or f"/usr/bin/{command}"

    def set_output(self, args: list[str], stdout: str, return_code: int = 0, stderr: str = "") -> None:
        self._responses[tuple(args)] = CommandResult(
            args=list(args), return_code=return_code, stdout=stdout, stderr=stderr,
        )

    def set_error(self, args: list[str], error: str = "Mock launch failure") -> None:
        self._responses[tuple(args)] = CommandResult(args=list(args), error=error)

    def which(self, command: str) -> str | None:
        return self._available.get(command)

    def run(self, args: list[str], timeout: int = 30) -> CommandResult:
        self._call_log.append(list(args))
        scripted = self._responses.get(tuple(args))
        if scripted is not None:
            return scripted
        return CommandResult(args=list(args), return_code=1, stderr="[fake] no response scripted")

    def reset(self) -> None:
        self._call_log.clear()
        self._responses.clear()
