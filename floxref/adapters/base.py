"""
Resolver base — the contract between installable resolution and the
component that evaluates references against flake sources.

Resolution and completion only ever talk to a ``MatchResolver``; they
never evaluate anything themselves.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from floxref.core.models.installable import RawReference, ResolvedMatch


class MatchResolver(ABC):
    """Abstract base class for match resolvers.

    Unlike the rest of the pipeline, resolvers are allowed to raise:
    any exception (typically ``ResolutionFailed``) passes through the
    caller unchanged.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The resolver identifier (e.g. 'catalog', 'mock')."""

    @abstractmethod
    async def resolve_matches(
        self,
        candidates: Sequence[RawReference],
        default_flakerefs: Sequence[str],
        default_prefixes: Sequence[tuple[str, bool]],
        for_completion: bool,
        processor: str | None = None,
    ) -> list[ResolvedMatch]:
        """Resolve all candidates in one call.

        Args:
            candidates: Parsed references, resolved together.
            default_flakerefs: Sources tried for candidates without one.
            default_prefixes: ``(prefix, applies_default_system)`` pairs tried
                for candidates whose path names no prefix.
            for_completion: Treat the key as a prefix of the wanted keys
                instead of an exact address.
            processor: The spec's evaluation expression, applied to every
                found item; items it maps to null are dropped.

        Returns:
            Matches in resolver order. Duplicates are allowed.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
