"""
Registry-backed env store — machine-scope variables on Windows.

Machine variables live under::

    HKLM\\SYSTEM\\CurrentControlSet\\Control\\Session Manager\\Environment

A write is a single ``SetValueEx`` call, which the registry applies
atomically.  Afterwards a ``WM_SETTINGCHANGE`` broadcast tells
Explorer (and anything else listening) to reload the environment;
processes that are already running keep their old copy.

``REG_EXPAND_SZ`` values are read back expanded (``%DEVDRIVE%\\cache``
becomes ``D:\\cache``), the way new processes see them.
"""

from __future__ import annotations

import logging

from cache_relocator.adapters.base import EnvStore
from cache_relocator.core.errors import EnvWriteFailed

logger = logging.getLogger(__name__)

ENVIRONMENT_KEY = r"SYSTEM\CurrentControlSet\Control\Session Manager\Environment"

_HWND_BROADCAST = 0xFFFF
_WM_SETTINGCHANGE = 0x001A
_SMTO_ABORTIFHUNG = 0x0002


class RegistryEnvStore(EnvStore):
    """Machine-scope environment variables in the Windows registry."""

    @property
    def name(self) -> str:
        return "registry"

    def get(self, name: str) -> str | None:
        import winreg

        try:
            with winreg.OpenKey(winreg.HKEY_LOCAL_MACHINE, ENVIRONMENT_KEY) as key:
                value, kind = winreg.QueryValueEx(key, name)
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning("Cannot read machine variable %s: %s", name, e)
            return None
        if value is None:
            return None
        if kind == winreg.REG_EXPAND_SZ:
            return winreg.ExpandEnvironmentStrings(value)
        return str(value)

    def set(self, name: str, value: str) -> None:
        import winreg

        kind = winreg.REG_EXPAND_SZ if "%" in value else winreg.REG_SZ
        try:
            with winreg.OpenKey(
                winreg.HKEY_LOCAL_MACHINE, ENVIRONMENT_KEY, 0, winreg.KEY_SET_VALUE,
            ) as key:
                winreg.SetValueEx(key, name, 0, kind, value)
        except OSError as e:
            raise EnvWriteFailed(f"Cannot set machine variable {name}: {e}") from e

        logger.info("Set machine variable %s", name)
        self._broadcast_change()

    @staticmethod
    def _broadcast_change() -> None:
        """Notify top-level windows that the environment changed."""
        import ctypes
        from ctypes import wintypes

        result = wintypes.DWORD()
        try:
            ctypes.windll.user32.SendMessageTimeoutW(
                _HWND_BROADCAST,
                _WM_SETTINGCHANGE,
                0,
                "Environment",
                _SMTO_ABORTIFHUNG,
                5000,
                ctypes.byref(result),
            )
        except (AttributeError, OSError) as e:
            # value already written
            logger.debug("WM_SETTINGCHANGE broadcast failed: %s", e)
