"""
Installable resolution — pick exactly one installable from resolver matches.

A single match is returned as is.  Several matches are labelled at the
least verbose spelling that still tells them apart, then either offered
in a selection prompt or, without a terminal, listed in an error the
user can copy a precise invocation from.

Label form by ambiguity (labels keep resolver order, never sorted):

    many flakes | many prefixes | label
    ------------+---------------+----------------------
    no          | no            | key
    yes         | no            | flakeref#key
    no          | yes           | prefix.key
    yes         | yes           | flakeref#prefix.key
"""

from __future__ import annotations

import logging
import shlex
import sys
import textwrap
from typing import Callable, Sequence

import click

from floxref import PROG_NAME
from floxref.adapters.base import MatchResolver
from floxref.core.models.installable import Installable, InstallableSpec, ResolvedMatch
from floxref.core.services.installable_completion import distinct_counts
from floxref.core.services.installable_errors import (
    AmbiguousNonInteractive,
    NotFound,
    SelectionCancelled,
)
from floxref.core.services.reference_parser import parse_reference

logger = logging.getLogger(__name__)

# (message, labels) -> index of the chosen label
Prompt = Callable[[str, list[str]], int]

_NON_INTERACTIVE_MESSAGE = textwrap.dedent("""\
    You must address a specific {derivation_type}. For example with:

        $ {prog} {subcommand} {first_choice}

    The available choices are:
    {choices_list}""")


def is_interactive() -> bool:
    """Whether a user is at a terminal to answer a prompt."""
    try:
        return sys.stdin.isatty() and sys.stderr.isatty()
    except (AttributeError, ValueError):
        # Replaced or closed streams
        return False


def disambiguation_labels(matches: Sequence[ResolvedMatch]) -> list[str]:
    """One label per match, in match order."""
    flakeref_count, prefix_count = distinct_counts(matches)
    many_flakerefs = flakeref_count > 1
    many_prefixes = prefix_count > 1

    labels = []
    for m in matches:
        key = m.escaped_key
        if many_flakerefs and many_prefixes:
            labels.append(f"{m.flakeref}#{m.escaped_prefix}.{key}")
        elif many_flakerefs:
            labels.append(f"{m.flakeref}#{key}")
        elif many_prefixes:
            labels.append(f"{m.escaped_prefix}.{key}")
        else:
            labels.append(key)
    return labels


def prompt_selection(message: str, labels: list[str]) -> int:
    """Numbered single-choice prompt on stderr; returns the chosen index.

    Raises:
        click.Abort: If the user interrupts or closes stdin.
    """
    for number, label in enumerate(labels, start=1):
        click.echo(f"  {number}) {label}", err=True)
    choice = click.prompt(message, type=click.IntRange(1, len(labels)), err=True)
    return choice - 1


def resolve_from_matches(
    matches: Sequence[ResolvedMatch],
    subcommand: str,
    derivation_type: str,
    *,
    interactive: bool | None = None,
    prompt: Prompt | None = None,
) -> Installable:
    """Reduce a match batch to one installable.

    Args:
        matches: Resolver output, in resolver order.
        subcommand: Command name used in hints and errors.
        derivation_type: What is being selected ("package", "template", ...).
        interactive: Force prompting on or off (None = detect a terminal).
        prompt: Selection prompt (default: ``prompt_selection``).

    Raises:
        NotFound: No matches.
        AmbiguousNonInteractive: Several matches and nobody to ask.
        SelectionCancelled: The user aborted the prompt.
    """
    if not matches:
        raise NotFound()

    if len(matches) == 1:
        return matches[0].installable()

    labels = disambiguation_labels(matches)

    if interactive is None:
        interactive = is_interactive()

    if not interactive:
        message = _NON_INTERACTIVE_MESSAGE.format(
            derivation_type=derivation_type,
            prog=PROG_NAME,
            subcommand=subcommand,
            first_choice=labels[0],
            choices_list="\n".join(f"  - {label}" for label in labels),
        )
        logger.debug("No terminal to prompt for %s choice", derivation_type)
        raise AmbiguousNonInteractive(
            message,
            labels=labels,
            subcommand=subcommand,
            derivation_type=derivation_type,
        )

    ask = prompt or prompt_selection
    try:
        index = ask(f"Select a {derivation_type} for {PROG_NAME} {subcommand}", labels)
    except (click.Abort, KeyboardInterrupt, EOFError) as e:
        raise SelectionCancelled(f"Selection of a {derivation_type} was cancelled") from e

    logger.warning("HINT: avoid selecting a %s next time with:", derivation_type)
    logger.warning("$ %s %s %s", PROG_NAME, subcommand, shlex.quote(labels[index]))

    return matches[index].installable()


async def resolve_installable(
    resolver: MatchResolver,
    raw: str,
    spec: InstallableSpec,
    *,
    interactive: bool | None = None,
    prompt: Prompt | None = None,
) -> Installable:
    """Parse ``raw``, resolve it with the spec's defaults, and pick one match.

    Raises:
        InvalidReference: If ``raw`` does not parse.
        NotFound, AmbiguousNonInteractive, SelectionCancelled: See
            ``resolve_from_matches``.
        Exception: Resolver failures, unchanged.
    """
    reference = parse_reference(raw)
    matches = await resolver.resolve_matches(
        [reference],
        spec.default_flakerefs,
        spec.default_prefixes,
        False,
        processor=spec.processor,
    )
    logger.debug("%s: %r resolved to %d match(es)", spec.subcommand, raw, len(matches))
    return resolve_from_matches(
        matches,
        spec.subcommand,
        spec.derivation_type_label,
        interactive=interactive,
        prompt=prompt,
    )
