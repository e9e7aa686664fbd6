"""
Domain models — Pydantic types for installable resolution.

All models are re-exported here for convenient access:

    from floxref.core.models import RawReference, ResolvedMatch, Installable
"""

from floxref.core.models.installable import (
    CommandKind,
    DerivationKind,
    Installable,
    InstallableSpec,
    RawReference,
    ResolvedMatch,
)
from floxref.core.models.settings import DEFAULT_CHANNELS, Settings, host_system

__all__ = [
    # installable.py
    "CommandKind",
    "DerivationKind",
    "Installable",
    "InstallableSpec",
    "RawReference",
    "ResolvedMatch",
    # settings.py
    "DEFAULT_CHANNELS",
    "Settings",
    "host_system",
]
