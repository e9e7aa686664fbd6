"""
Installable models — references, resolver matches, and per-command specs.

A user types a *raw reference* (``flox#packages.hello``), the resolver
turns candidate references into *matches*, and exactly one match is
turned into an *installable* that downstream execution consumes.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from floxref.core.attrpath import escape_identifier, join_attr_path


class DerivationKind(StrEnum):
    """What a resolved target represents."""

    PACKAGE = "package"
    SHELL = "shell"
    APP = "app"
    TEMPLATE = "template"
    BUNDLER = "bundler"


class CommandKind(StrEnum):
    """Closed set of commands that accept an installable argument."""

    BUILD = "build"
    DEVELOP = "develop"
    PUBLISH = "publish"
    RUN = "run"
    SHELL = "shell"
    BUNDLE = "bundle"
    BUNDLER = "bundler"
    TEMPLATE = "template"


class InstallableSpec(BaseModel):
    """Immutable per-command resolution settings.

    Attributes:
        flag:              CLI flag selecting this spec (e.g. ``--template``).
        derivation_types:  Kinds of target the command accepts.
        default_prefixes:  Ordered ``(prefix, applies_default_system)`` pairs
                           tried when the reference names no prefix.
        default_flakerefs: Ordered flake references tried when the reference
                           names no source.
        subcommand:        Name used in hints and error messages.
        processor:         Opaque evaluation expression passed to the resolver
                           with every query for this spec.
    """

    model_config = ConfigDict(frozen=True)

    flag: str | None = None
    derivation_types: tuple[DerivationKind, ...]
    default_prefixes: tuple[tuple[str, bool], ...]
    default_flakerefs: tuple[str, ...]
    subcommand: str
    processor: str | None = None

    @property
    def derivation_type_label(self) -> str:
        """Human label for the accepted kinds, e.g. ``package or app``."""
        return " or ".join(kind.value for kind in self.derivation_types)


class RawReference(BaseModel):
    """A parsed, not yet resolved, installable reference."""

    model_config = ConfigDict(frozen=True)

    source: str | None = None
    attr_path: tuple[str, ...] = ()

    @field_validator("attr_path")
    @classmethod
    def _no_empty_segments(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if any(segment == "" for segment in value):
            raise ValueError("attribute path segments must be non-empty")
        return value

    def __str__(self) -> str:
        path = join_attr_path(self.attr_path)
        if self.source is None:
            return path
        return f"{self.source}#{path}"


class Installable(BaseModel):
    """A fully qualified target: flake reference plus full attribute path."""

    model_config = ConfigDict(frozen=True)

    flakeref: str
    attr_path: tuple[str, ...] = ()

    def __str__(self) -> str:
        return f"{self.flakeref}#{join_attr_path(self.attr_path)}"


class ResolvedMatch(BaseModel):
    """One resolver result.

    ``key`` is the attribute path below ``prefix`` (and below ``system``
    for per-system prefixes).  ``explicit_system`` records whether the
    user spelled the system out rather than getting the host default.
    """

    model_config = ConfigDict(frozen=True)

    flakeref: str
    prefix: str
    key: tuple[str, ...] = Field(default_factory=tuple)
    explicit_system: bool = False
    system: str | None = None
    description: str | None = None

    @property
    def escaped_key(self) -> str:
        return join_attr_path(self.key)

    @property
    def escaped_prefix(self) -> str:
        return escape_identifier(self.prefix)

    def installable(self) -> Installable:
        """Build the fully qualified installable for this match."""
        attr_path = [self.prefix]
        if self.system is not None:
            attr_path.append(self.system)
        attr_path.extend(self.key)
        return Installable(flakeref=self.flakeref, attr_path=tuple(attr_path))
