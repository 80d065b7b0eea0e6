"""
Adapter base — the contracts between the engine and the machine.

The engine never calls ``subprocess`` or touches the registry
directly.  It talks to two narrow adapters:

    - ``CommandRunner``: resolve executables and run read-only queries.
    - ``EnvStore``: read and write system-scope environment variables.

Each has a real implementation and an in-memory double
(``cache_relocator.adapters.mock``).
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel


class CommandResult(BaseModel):
    """Captured outcome of one external command.

    Runners NEVER raise for command failures; non-zero exits,
    timeouts and launch errors are all captured here.
    """

    args: list[str]
    return_code: int | None = None
    stdout: str = ""
    stderr: str = ""
    error: str | None = None         # launch failure / timeout
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None and self.return_code == 0


class CommandRunner(ABC):
    """Resolve and run external commands."""

    @property
    @abstractmethod
    def name(self) -> str:
        """The runner identifier (e.g., 'subprocess', 'fake')."""

    @abstractmethod
    def which(self, command: str) -> str | None:
        """Resolve a command on the executable search path.

        Must never raise; unresolvable commands return None.
        """

    @abstractmethod
    def run(self, args: list[str], timeout: int = 30) -> CommandResult:
        """Run a command and capture its output. Must never raise."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


class EnvStore(ABC):
    """System-scope (machine-wide) environment variable storage.

    Reads never fall back to process or user scope: verification must
    reflect the durable configuration every new process will see.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The store identifier (e.g., 'registry', 'file', 'memory')."""

    @abstractmethod
    def get(self, name: str) -> str | None:
        """Read a variable, or None when it is not set."""

    @abstractmethod
    def set(self, name: str, value: str) -> None:
        """Write a variable atomically.

        Raises:
            EnvWriteFailed: On permission or system faults.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
