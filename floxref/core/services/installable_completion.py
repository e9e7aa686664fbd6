"""
Installable completion — shell completion strings from resolver matches.

For every match a handful of spellings are emitted, from fully
qualified (``flake#prefix.key``) down to the bare key.  Shorter forms
are only offered when they stay unambiguous across the whole batch: the
bare key needs a single flake and a single prefix, ``flake#key`` needs a
single prefix, ``prefix.key`` needs a single flake.
"""

from __future__ import annotations

import logging
from typing import Sequence

from floxref.adapters.base import MatchResolver
from floxref.core.attrpath import escape_identifier
from floxref.core.models.installable import InstallableSpec, ResolvedMatch
from floxref.core.models.settings import DEFAULT_COMPLETION_TIMEOUT
from floxref.core.reliability.sync_bridge import run_blocking
from floxref.core.services.reference_parser import parse

logger = logging.getLogger(__name__)


def distinct_counts(matches: Sequence[ResolvedMatch]) -> tuple[int, int]:
    """Number of distinct flake references and distinct prefixes in a batch."""
    flakerefs = {m.flakeref for m in matches}
    prefixes = {m.prefix for m in matches}
    return len(flakerefs), len(prefixes)


def _spellings(match: ResolvedMatch, single_flakeref: bool, single_prefix: bool) -> list[str]:
    key = match.escaped_key
    prefix = match.escaped_prefix

    out = [f"{match.flakeref}#{prefix}.{key}"]

    if match.explicit_system and match.system is not None:
        system = escape_identifier(match.system)
        out.append(f"{match.flakeref}#{prefix}.{system}.{key}")
        if single_flakeref:
            out.append(f"{prefix}.{system}.{key}")

    if single_flakeref and single_prefix:
        out.append(key)
    if single_prefix:
        out.append(f"{match.flakeref}#{key}")
    if single_flakeref:
        out.append(f"{prefix}.{key}")
    return out


def generate(matches: Sequence[ResolvedMatch], original_input: str) -> list[str]:
    """Render a match batch into sorted, deduplicated completions.

    Only strings starting with ``original_input`` are kept.  An empty
    list means "no completions" and is not an error.
    """
    flakeref_count, prefix_count = distinct_counts(matches)
    single_flakeref = flakeref_count == 1
    single_prefix = prefix_count == 1

    completions = {
        spelling
        for match in matches
        for spelling in _spellings(match, single_flakeref, single_prefix)
        if spelling.startswith(original_input)
    }
    return sorted(completions)


async def complete_installable(
    resolver: MatchResolver,
    raw: str,
    spec: InstallableSpec,
) -> list[str]:
    """Parse a partial installable, resolve it once, and render completions.

    Raises:
        InvalidReference: If no completion candidate parses.
        Exception: Resolver failures, unchanged.
    """
    candidates = parse(raw)
    matches = await resolver.resolve_matches(
        candidates,
        spec.default_flakerefs,
        spec.default_prefixes,
        True,
        processor=spec.processor,
    )
    return generate(matches, raw)


def complete_installable_sync(
    resolver: MatchResolver,
    raw: str,
    spec: InstallableSpec,
    timeout: float = DEFAULT_COMPLETION_TIMEOUT,
) -> list[str]:
    """Blocking completion for synchronous shell-completion hooks.

    Never raises: parse errors, resolver errors and timeouts all yield
    an empty list and a DEBUG log line.
    """
    try:
        return run_blocking(
            lambda: complete_installable(resolver, raw, spec),
            timeout=timeout,
            default=[],
        )
    except Exception as e:
        logger.debug("Failed to complete installable %r: %s", raw, e)
        return []
