"""
Mock resolver — test double for the match resolver boundary.

Returns a fixed batch of matches for every call, or raises a configured
error.  Every call is recorded so tests can assert on what was asked.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Sequence

from floxref.adapters.base import MatchResolver
from floxref.core.models.installable import RawReference, ResolvedMatch


@dataclass(frozen=True)
class ResolveCall:
    """Arguments of one ``resolve_matches`` call."""

    candidates: tuple[RawReference, ...]
    default_flakerefs: tuple[str, ...]
    default_prefixes: tuple[tuple[str, bool], ...]
    for_completion: bool
    processor: str | None = None


class MockResolver(MatchResolver):
    """Canned-response resolver.

    By default returns no matches. Configure with ``set_matches`` or
    ``set_failure``; ``delay`` makes each call sleep first.
    """

    def __init__(
        self,
        matches: Sequence[ResolvedMatch] | None = None,
        resolver_name: str = "mock",
        delay: float = 0.0,
    ):
        self._name = resolver_name
        self._matches: list[ResolvedMatch] = list(matches or [])
        self._failure: Exception | None = None
        self._delay = delay
        self._call_log: list[ResolveCall] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[ResolveCall]:
        """All calls this mock has received."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    def set_matches(self, matches: Sequence[ResolvedMatch]) -> None:
        self._matches = list(matches)
        self._failure = None

    def set_failure(self, error: Exception) -> None:
        """Make every subsequent call raise ``error``."""
        self._failure = error

    async def resolve_matches(
        self,
        candidates: Sequence[RawReference],
        default_flakerefs: Sequence[str],
        default_prefixes: Sequence[tuple[str, bool]],
        for_completion: bool,
        processor: str | None = None,
    ) -> list[ResolvedMatch]:
        self._call_log.append(ResolveCall(
            candidates=tuple(candidates),
            default_flakerefs=tuple(default_flakerefs),
            default_prefixes=tuple(tuple(p) for p in default_prefixes),
            for_completion=for_completion,
            processor=processor,
        ))
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._failure is not None:
            raise self._failure
        return list(self._matches)

    def reset(self) -> None:
        """Clear call log, matches and failure."""
        self._call_log.clear()
        self._matches.clear()
        self._failure = None
