"""Adapters — match resolver bindings.

Public re-exports for convenient access.
"""

from floxref.adapters.base import MatchResolver
from floxref.adapters.catalog import CatalogResolver
from floxref.adapters.mock import MockResolver
from floxref.adapters.registry import create_resolver

__all__ = [
    "CatalogResolver",
    "MatchResolver",
    "MockResolver",
    "create_resolver",
]
