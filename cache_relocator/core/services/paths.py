"""
Path helpers — variable expansion and volume identity.

Catalog paths are written once for every machine, so they carry
variable references (``%LOCALAPPDATA%``, ``$HOME``, ``~``) that are
expanded against the live environment.  Unknown variables are left
in place; the resulting path simply won't exist.

Volume identity decides whether a configured path lives on the
destination volume:

    - Windows drive (``D:``) or UNC share (``\\\\server\\share``):
      compared case-insensitively, so ``d:\\cache\\`` and ``D:\\Cache``
      are the same volume.
    - POSIX path: the mount point of the nearest existing ancestor.
"""

from __future__ import annotations

import ntpath
import os
import re
from collections.abc import Mapping
from pathlib import Path

_PERCENT_VAR = re.compile(r"%([A-Za-z_][A-Za-z0-9_()]*)%")
_DOLLAR_VAR = re.compile(r"\$(?:\{([A-Za-z_][A-Za-z0-9_]*)\}|([A-Za-z_][A-Za-z0-9_]*))")
_WINDOWS_DRIVE = re.compile(r"^[A-Za-z]:")


def expand_path(raw: str, environ: Mapping[str, str] | None = None) -> str:
    """Expand ``%VAR%``, ``$VAR``, ``${VAR}`` and a leading ``~``."""
    env = os.environ if environ is None else environ

    def _lookup(name: str, original: str) -> str:
        if name in env:
            return env[name]
        # Windows variable names are case-insensitive
        upper = name.upper()
        for key, value in env.items():
            if key.upper() == upper:
                return value
        return original

    text = _PERCENT_VAR.sub(lambda m: _lookup(m.group(1), m.group(0)), raw)
    text = _DOLLAR_VAR.sub(lambda m: _lookup(m.group(1) or m.group(2), m.group(0)), text)

    if text == "~" or text.startswith(("~/", "~\\")):
        home = env.get("HOME") or env.get("USERPROFILE") or os.path.expanduser("~")
        text = home + text[1:]
    return text


def is_windows_path(path: str) -> bool:
    return bool(_WINDOWS_DRIVE.match(path)) or path.startswith("\\\\")


def volume_of(path: str) -> str:
    """Return a comparable identity for the volume holding *path*."""
    if is_windows_path(path):
        drive, _ = ntpath.splitdrive(path)
        return drive.rstrip("\\/").upper()
    return _mount_point(Path(os.path.abspath(path)))


def _mount_point(path: Path) -> str:
    current = path
    while not current.exists() and current != current.parent:
        current = current.parent
    try:
        while not os.path.ismount(current) and current != current.parent:
            current = current.parent
    except OSError:
        pass
    return str(current)


def same_volume(path: str, other: str) -> bool:
    """Whether two paths resolve onto the same volume."""
    if not path or not other:
        return False
    if is_windows_path(path) != is_windows_path(other):
        return False
    return volume_of(path) == volume_of(other)


def same_path(path: str, other: str) -> bool:
    """Loose path equality: trailing separators and (on Windows) case ignored.

    Two existing paths that reach the same directory through a symlink
    or junction are also equal.
    """
    if os.path.exists(path) and os.path.exists(other) and os.path.samefile(path, other):
        return True
    if is_windows_path(path) or is_windows_path(other):
        return ntpath.normcase(ntpath.normpath(path)) == ntpath.normcase(ntpath.normpath(other))
    return os.path.normpath(os.path.abspath(path)) == os.path.normpath(os.path.abspath(other))
