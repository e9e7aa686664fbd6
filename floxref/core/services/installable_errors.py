"""
Installable resolution errors.

Every failure is terminal for the current resolution attempt; nothing
here is retried.  The CLI turns any ``InstallableError`` into a red
message and exit code 1.
"""

from __future__ import annotations


class InstallableError(Exception):
    """Base class for all installable resolution failures."""


class InvalidReference(InstallableError):
    """No candidate of a raw reference could be parsed."""

    def __init__(self, raw: str, reason: str = ""):
        self.raw = raw
        self.reason = reason
        message = f"Invalid installable reference {raw!r}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class ResolutionFailed(InstallableError):
    """The match resolver could not evaluate the candidates."""


class NotFound(InstallableError):
    """The resolver returned no matches."""

    def __init__(self, message: str = "No matching installables found"):
        super().__init__(message)


class AmbiguousNonInteractive(InstallableError):
    """Several matches and no terminal to ask the user which one."""

    def __init__(self, message: str, *, labels: list[str], subcommand: str, derivation_type: str):
        self.labels = labels
        self.subcommand = subcommand
        self.derivation_type = derivation_type
        super().__init__(message)


class SelectionCancelled(InstallableError):
    """The user aborted the selection prompt."""


class UnknownCommandKind(InstallableError, KeyError):
    """No installable spec is registered under the requested name."""

    def __str__(self) -> str:
        return Exception.__str__(self)
