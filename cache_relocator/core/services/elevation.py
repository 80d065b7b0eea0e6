"""
Elevation check — can this process write system-scope variables?

A pre-flight gate for the CLI: a real migration refuses to start
without administrator (Windows) or root (POSIX) rights.
"""

from __future__ import annotations

import logging
import os

logger = logging.getLogger(__name__)


def is_elevated() -> bool:
    """Whether the current process runs with administrative rights."""
    if os.name == "nt":
        try:
            import ctypes

            return bool(ctypes.windll.shell32.IsUserAnAdmin())
        except (AttributeError, OSError) as e:
            logger.debug("IsUserAnAdmin unavailable: %s", e)
            return False
    return os.geteuid() == 0
