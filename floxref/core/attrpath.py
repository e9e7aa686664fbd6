"""
Attribute paths — identifier escaping and dotted-path tokenizing.

Installables address a target as ``source#seg.seg.seg``.  Segments made
only of ``[A-Za-z0-9_-]`` are written bare; anything else is written as
a double-quoted, backslash-escaped literal.  ``escape_identifier`` and
``split_attr_path`` are inverses of each other.

Control characters other than ``\\n``, ``\\r`` and ``\\t`` are written as
``\\u{hex}`` so a rendered path always stays on one printable line.
"""

from __future__ import annotations

import re

_IDENTIFIER_SAFE = re.compile(r"^[A-Za-z0-9_-]+$")

_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}

_UNESCAPES = {"n": "\n", "r": "\r", "t": "\t"}

_UNICODE_ESCAPE = re.compile(r"u\{([0-9a-fA-F]{1,6})\}")


class AttrPathError(ValueError):
    """Raised when a dotted attribute path cannot be tokenized."""


def escape_identifier(segment: str) -> str:
    """Render one attribute segment, quoting it unless it is identifier-safe."""
    if _IDENTIFIER_SAFE.match(segment):
        return segment
    return '"' + "".join(_escape_char(ch) for ch in segment) + '"'


def _escape_char(ch: str) -> str:
    if ch in _ESCAPES:
        return _ESCAPES[ch]
    if ch < " " or ch == "\x7f":
        return f"\\u{{{ord(ch):x}}}"
    return ch


def join_attr_path(segments: list[str] | tuple[str, ...]) -> str:
    """Join segments into a dotted path, escaping each one."""
    return ".".join(escape_identifier(s) for s in segments)


def split_attr_path(text: str) -> list[str]:
    """Split a dotted attribute path into its segments.

    An empty string is the empty path.  Quoted segments may contain dots
    and backslash escapes.

    Raises:
        AttrPathError: On empty segments, unterminated quotes, or text
            trailing a closing quote.
    """
    if text == "":
        return []

    segments: list[str] = []
    i = 0
    n = len(text)

    while True:
        if i < n and text[i] == '"':
            i += 1
            buf: list[str] = []
            while True:
                if i >= n:
                    raise AttrPathError(f"Unterminated quoted segment in {text!r}")
                ch = text[i]
                if ch == "\\":
                    if i + 1 >= n:
                        raise AttrPathError(f"Dangling escape in {text!r}")
                    nxt = text[i + 1]
                    unicode = _UNICODE_ESCAPE.match(text, i + 1) if nxt == "u" else None
                    if unicode:
                        try:
                            buf.append(chr(int(unicode.group(1), 16)))
                        except ValueError:
                            raise AttrPathError(f"Invalid escape in {text!r}") from None
                        i = unicode.end()
                        continue
                    buf.append(_UNESCAPES.get(nxt, nxt))
                    i += 2
                    continue
                if ch == '"':
                    i += 1
                    break
                buf.append(ch)
                i += 1
            segment = "".join(buf)
        else:
            end = text.find(".", i)
            if end == -1:
                end = n
            segment = text[i:end]
            if '"' in segment:
                raise AttrPathError(f"Stray quote in segment {segment!r}")
            i = end

        if segment == "":
            raise AttrPathError(f"Empty attribute segment in {text!r}")
        segments.append(segment)

        if i >= n:
            return segments
        if text[i] != ".":
            raise AttrPathError(f"Unexpected {text[i]!r} after quoted segment in {text!r}")
        i += 1
        if i >= n:
            raise AttrPathError(f"Empty attribute segment in {text!r}")
