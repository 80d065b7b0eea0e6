"""
File-backed env store — system-scope variables on POSIX.

Reads and writes a ``KEY=value`` file (``/etc/environment`` by
default), which PAM loads for every new login session.  Writes go
through a temporary file in the same directory followed by
``os.replace``, so readers see either the old file or the new one.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from cache_relocator.adapters.base import EnvStore
from cache_relocator.core.errors import EnvWriteFailed

logger = logging.getLogger(__name__)


def parse_env_line(line: str) -> tuple[str, str] | None:
    """Parse one ``KEY=value`` line.

    Handles:
    - KEY=value
    - KEY="value" / KEY='value'
    - export KEY=value
    - Comments (#) and empty lines (→ None)
    """
    line = line.strip()
    if not line or line.startswith("#"):
        return None

    if line.startswith("export "):
        line = line[7:].strip()

    if "=" not in line:
        return None

    key, _, value = line.partition("=")
    key = key.strip()
    value = value.strip()

    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        value = value[1:-1]

    return key, value


def format_env_line(name: str, value: str) -> str:
    """Render ``KEY=value``, quoting when needed.

    pam_env has no escape sequences, so the quote character is one the
    value does not contain.

    Raises:
        EnvWriteFailed: When the value holds both quote characters.
    """
    if '"' in value and "'" in value:
        raise EnvWriteFailed(f"Cannot write {name}: value contains both quote characters")
    if any(c.isspace() for c in value) or '"' in value or "'" in value:
        quote = "'" if '"' in value else '"'
        return f"{name}={quote}{value}{quote}"
    return f"{name}={value}"


class FileEnvStore(EnvStore):
    """Environment variables persisted in an ``/etc/environment``-style file."""

    def __init__(self, path: str | Path = "/etc/environment"):
        self._path = Path(path)

    @property
    def name(self) -> str:
        return "file"

    @property
    def path(self) -> Path:
        return self._path

    def _read_lines(self) -> list[str]:
        try:
            return self._path.read_text(encoding="utf-8").splitlines()
        except FileNotFoundError:
            return []

    def get(self, name: str) -> str | None:
        try:
            lines = self._read_lines()
        except OSError as e:
            logger.warning("Cannot read %s: %s", self._path, e)
            return None

        value: str | None = None
        for line in lines:
            parsed = parse_env_line(line)
            if parsed and parsed[0] == name:
                value = parsed[1]   # last assignment wins
        return value

    def set(self, name: str, value: str) -> None:
        try:
            lines = self._read_lines()
        except OSError as e:
            raise EnvWriteFailed(f"Cannot read {self._path}: {e}") from e

        new_line = format_env_line(name, value)
        out: list[str] = []
        replaced = False
        for line in lines:
            parsed = parse_env_line(line)
            if parsed and parsed[0] == name:
                if not replaced:
                    out.append(new_line)
                    replaced = True
                continue
            out.append(line)
        if not replaced:
            out.append(new_line)

        self._atomic_write("\n".join(out) + "\n")
        logger.info("Set %s in %s", name, self._path)

    def _atomic_write(self, content: str) -> None:
        directory = self._path.parent
        try:
            mode = self._path.stat().st_mode & 0o777
        except FileNotFoundError:
            mode = 0o644
        except OSError as e:
            raise EnvWriteFailed(f"Cannot stat {self._path}: {e}") from e

        tmp_name: str | None = None
        try:
            fd, tmp_name = tempfile.mkstemp(prefix=".environment.", dir=directory)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_name, mode)
            os.replace(tmp_name, self._path)
            tmp_name = None
        except OSError as e:
            raise EnvWriteFailed(f"Cannot write {self._path}: {e}") from e
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass
