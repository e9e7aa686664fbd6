"""
Configuration loader — reads floxref.yml into a Settings model.

Lookup order for the file:
    --config flag  >  FLOXREF_CONFIG env var  >  floxref.yml found walking up from cwd

A missing file is not an error: defaults apply.  FLOXREF_CATALOG
overrides the catalog path from the file.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from floxref.core.models.settings import Settings

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "floxref.yml"

ENV_CONFIG = "FLOXREF_CONFIG"
ENV_CATALOG = "FLOXREF_CATALOG"


class ConfigError(Exception):
    """Raised when configuration is invalid or unreadable."""


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for floxref.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to floxref.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def resolve_config_path(explicit: Path | None = None) -> Path | None:
    """Pick the config file: explicit path, then env var, then upward search."""
    if explicit is not None:
        return explicit
    env_path = os.environ.get(ENV_CONFIG)
    if env_path:
        return Path(env_path)
    return find_config_file()


def load_settings(path: Path | None = None) -> Settings:
    """Load and validate settings.

    Args:
        path: Config file to read. None means defaults (plus env overrides).

    Returns:
        Validated Settings model.

    Raises:
        ConfigError: If the file is unreadable or invalid.
    """
    data: dict = {}

    if path is not None:
        if not path.is_file():
            raise ConfigError(f"Config file not found: {path}")

        logger.debug("Loading settings from %s", path)

        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Cannot read {path}: {e}") from e

        try:
            loaded = yaml.safe_load(raw)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigError(f"Expected a YAML mapping in {path}, got {type(loaded).__name__}")
        data = loaded

    env_catalog = os.environ.get(ENV_CATALOG)
    if env_catalog:
        data = {**data, "catalog": env_catalog}

    try:
        settings = Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e

    logger.info("Loaded settings (system=%s, catalog=%s)", settings.system, settings.catalog)
    return settings


def config_dir(config_path: Path | None) -> Path:
    """Directory that relative paths in the config are resolved against."""
    return config_path.parent.resolve() if config_path else Path.cwd()
