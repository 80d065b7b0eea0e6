"""
Configuration loader — reads relocator.yml into Settings.

Lookup order:
    --config PATH  >  CACHE_RELOCATOR_CONFIG env var  >  ./relocator.yml

A missing file is not an error (all settings have defaults).
An explicit path that does not exist, unreadable YAML, or values
that fail validation raise ConfigInvalid.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from cache_relocator.core.errors import ConfigInvalid
from cache_relocator.core.models.settings import Settings

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "relocator.yml"
CONFIG_ENV_VAR = "CACHE_RELOCATOR_CONFIG"


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Locate the settings file, or None when running on defaults."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)

    current = (start_dir or Path.cwd()).resolve()
    for name in (CONFIG_FILE, "relocator.yaml"):
        candidate = current / name
        if candidate.is_file():
            return candidate
    return None


def load_settings(path: Path | None = None) -> Settings:
    """Load and validate settings.

    Args:
        path: Explicit path to relocator.yml. If None, searches
            the env var and the current directory.

    Raises:
        ConfigInvalid: If the file is unreadable or invalid.
    """
    if path is None:
        path = find_config_file()

    if path is None:
        logger.debug("No %s found, using default settings", CONFIG_FILE)
        return Settings()

    if not path.is_file():
        raise ConfigInvalid(f"Config file not found: {path}")

    logger.debug("Loading settings from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigInvalid(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigInvalid(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return Settings()
    if not isinstance(data, dict):
        raise ConfigInvalid(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        settings = Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigInvalid(f"Invalid settings in {path}: {e}") from e

    logger.info("Loaded settings from %s (target root %s)", path, settings.target_root)
    return settings
