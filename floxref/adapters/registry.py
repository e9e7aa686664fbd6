"""
Resolver registry — builds the resolver a CLI invocation talks to.

Commands never construct resolvers directly.  Tests swap the resolver
by placing one in the click context object under ``"resolver"``.
"""

from __future__ import annotations

import logging
from pathlib import Path

from floxref.adapters.base import MatchResolver
from floxref.adapters.catalog import CatalogResolver
from floxref.core.config.loader import ConfigError
from floxref.core.models.settings import Settings

logger = logging.getLogger(__name__)


def create_resolver(settings: Settings, base_dir: Path | None = None) -> MatchResolver:
    """Build the resolver described by ``settings``.

    Args:
        settings: Loaded settings.
        base_dir: Directory relative catalog paths are resolved against
            (the config file's directory; default: cwd).

    Raises:
        ConfigError: If no catalog is configured.
    """
    if not settings.catalog:
        raise ConfigError(
            "No resolver catalog configured. "
            "Set 'catalog' in floxref.yml or the FLOXREF_CATALOG environment variable."
        )

    path = Path(settings.catalog).expanduser()
    if not path.is_absolute():
        path = (base_dir or Path.cwd()) / path

    logger.debug("Using catalog resolver at %s (system=%s)", path, settings.system)
    return CatalogResolver(path=path, system=settings.system, channels=settings.channels)
