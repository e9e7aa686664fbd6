"""
Reference parser — raw installable strings into candidate references.

Completion input is usually half-typed (``flox#packages.hel``), so
``parse`` returns a batch of candidates: the full string, plus a shorter
one covering "still typing the next segment".  The caller resolves the
whole batch in one resolver call.

Command execution uses ``parse_reference``, which takes the string as
written and yields exactly one reference.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from floxref.core.attrpath import AttrPathError, split_attr_path
from floxref.core.models.installable import RawReference
from floxref.core.services.installable_errors import InvalidReference

logger = logging.getLogger(__name__)

CURRENT_PROJECT = "."

_SEPARATORS = ".#"


def _parse_one(text: str) -> RawReference:
    """Parse ``source#attr.path`` (or a bare ``attr.path``) into a reference.

    Raises:
        AttrPathError: If the attribute path is malformed.
    """
    source: str | None
    if "#" in text:
        source, _, path = text.partition("#")
        source = source or None
    else:
        source, path = None, text
    try:
        return RawReference(source=source, attr_path=tuple(split_attr_path(path)))
    except ValidationError as e:
        raise AttrPathError(str(e)) from e


def parse_reference(raw: str) -> RawReference:
    """Parse one installable exactly as written.

    Raises:
        InvalidReference: If the string does not fit the grammar.
    """
    if raw == CURRENT_PROJECT:
        return RawReference(source=CURRENT_PROJECT)
    try:
        return _parse_one(raw)
    except AttrPathError as e:
        raise InvalidReference(raw, str(e)) from e


def parse(raw: str) -> list[RawReference]:
    """Parse a possibly partial installable into completion candidates.

    Returns:
        Candidates in order: the full trimmed string first, then the
        fallback (shorter prefix, or the empty reference when the input
        has no separator at all).

    Raises:
        InvalidReference: If no candidate parses.
    """
    if raw == CURRENT_PROJECT:
        return [RawReference(source=CURRENT_PROJECT)]

    trimmed = raw.rstrip(_SEPARATORS)
    attempts: list[str] = [trimmed]

    split_at = max(trimmed.rfind(sep) for sep in _SEPARATORS)
    if split_at == -1:
        attempts.append("")
    else:
        head = trimmed[:split_at]
        if head and head != trimmed:
            attempts.append(head)

    candidates: list[RawReference] = []
    errors: list[str] = []
    for text in attempts:
        try:
            candidates.append(_parse_one(text))
        except AttrPathError as e:
            logger.debug("Dropping completion candidate %r: %s", text, e)
            errors.append(str(e))

    if not candidates:
        raise InvalidReference(raw, "; ".join(errors))
    return candidates
