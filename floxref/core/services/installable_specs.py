"""
Installable spec registry — one immutable spec per command kind.

Commands never carry resolution logic of their own; they look their
spec up here and hand it to the free functions in
``installable_resolution`` and ``installable_completion``.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from floxref.core.models.installable import CommandKind, DerivationKind, InstallableSpec
from floxref.core.services.installable_errors import UnknownCommandKind

# Hides `_init` helper entries from template listings.
TEMPLATE_PROCESSOR = (
    'if builtins.length key < 1 || builtins.elemAt key 0 != "_init" '
    "then { description = item.description; } else null"
)

_PACKAGES = ("packages", True)

INSTALLABLE_SPECS: Mapping[CommandKind, InstallableSpec] = MappingProxyType({
    CommandKind.BUILD: InstallableSpec(
        derivation_types=(DerivationKind.PACKAGE,),
        default_prefixes=(_PACKAGES,),
        default_flakerefs=(".",),
        subcommand="build",
    ),
    CommandKind.DEVELOP: InstallableSpec(
        derivation_types=(DerivationKind.PACKAGE, DerivationKind.SHELL),
        default_prefixes=(_PACKAGES, ("devShells", True)),
        default_flakerefs=(".",),
        subcommand="develop",
    ),
    CommandKind.PUBLISH: InstallableSpec(
        derivation_types=(DerivationKind.PACKAGE,),
        default_prefixes=(_PACKAGES,),
        default_flakerefs=(".",),
        subcommand="publish",
    ),
    CommandKind.RUN: InstallableSpec(
        derivation_types=(DerivationKind.PACKAGE, DerivationKind.APP),
        default_prefixes=(("apps", True), _PACKAGES),
        default_flakerefs=(".",),
        subcommand="run",
    ),
    CommandKind.SHELL: InstallableSpec(
        derivation_types=(DerivationKind.PACKAGE,),
        default_prefixes=(_PACKAGES,),
        default_flakerefs=(".",),
        subcommand="shell",
    ),
    CommandKind.BUNDLE: InstallableSpec(
        derivation_types=(DerivationKind.PACKAGE,),
        default_prefixes=(_PACKAGES,),
        default_flakerefs=(".",),
        subcommand="bundle",
    ),
    CommandKind.BUNDLER: InstallableSpec(
        flag="--bundler",
        derivation_types=(DerivationKind.BUNDLER,),
        default_prefixes=(("bundlers", True),),
        default_flakerefs=("github:flox/bundlers/master",),
        subcommand="bundle",
    ),
    CommandKind.TEMPLATE: InstallableSpec(
        flag="--template",
        derivation_types=(DerivationKind.TEMPLATE,),
        default_prefixes=(("templates", False),),
        default_flakerefs=("flake:flox", "."),
        subcommand="init",
        processor=TEMPLATE_PROCESSOR,
    ),
})


def get_spec(kind: CommandKind | str) -> InstallableSpec:
    """Look up the spec for a command kind (enum member or its value).

    Raises:
        UnknownCommandKind: If no spec is registered under that name.
    """
    try:
        return INSTALLABLE_SPECS[CommandKind(kind)]
    except ValueError:
        raise UnknownCommandKind(
            f"Unknown command kind {kind!r} "
            f"(expected one of: {', '.join(k.value for k in CommandKind)})"
        ) from None


def list_specs() -> list[dict]:
    """All specs as JSON-friendly dicts, in declaration order."""
    return [
        {"kind": kind.value, **spec.model_dump(mode="json")}
        for kind, spec in INSTALLABLE_SPECS.items()
    ]
