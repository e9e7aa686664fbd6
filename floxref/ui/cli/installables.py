"""
CLI commands that take an installable argument.

Thin wrappers over ``floxref.core.services.installable_resolution``:
each command looks up its spec, resolves the argument to exactly one
installable, and prints it.  Every INSTALLABLE argument gets shell
completion through ``installable_completion``.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import NoReturn

import click

from floxref.adapters.base import MatchResolver
from floxref.adapters.registry import create_resolver
from floxref.core.config.loader import ConfigError, config_dir, load_settings, resolve_config_path
from floxref.core.models.installable import CommandKind, Installable
from floxref.core.models.settings import Settings
from floxref.core.services.installable_completion import complete_installable_sync
from floxref.core.services.installable_errors import InstallableError
from floxref.core.services.installable_resolution import resolve_installable
from floxref.core.services.installable_specs import get_spec

logger = logging.getLogger(__name__)


# ── Context helpers ─────────────────────────────────────────────


def load_context(ctx: click.Context) -> tuple[Settings, MatchResolver]:
    """Settings and resolver for this invocation, cached on ``ctx.obj``.

    A resolver placed in ``ctx.obj["resolver"]`` beforehand is used as is.

    Raises:
        ConfigError: If settings are invalid or no resolver is configured.
    """
    obj = ctx.find_root().ensure_object(dict)

    if "settings" not in obj:
        config_path = resolve_config_path(obj.get("config_path"))
        obj["settings"] = load_settings(config_path)
        obj["config_dir"] = config_dir(config_path)

    if obj.get("resolver") is None:
        obj["resolver"] = create_resolver(obj["settings"], obj.get("config_dir"))

    return obj["settings"], obj["resolver"]


def fail(message: str) -> NoReturn:
    """Print an error in the house style and exit 1."""
    click.secho(f"❌ {message}", fg="red", err=True)
    sys.exit(1)


def installable_completer(kind: CommandKind):
    """Build a click ``shell_complete`` callback for one command kind."""
    spec = get_spec(kind)

    def _complete(ctx: click.Context, param: click.Parameter, incomplete: str) -> list[str]:
        root = ctx.find_root()
        if isinstance(root.obj, dict) and root.obj.get("resolver") is not None:
            settings = root.obj.get("settings") or Settings()
            resolver = root.obj["resolver"]
        else:
            # Group callbacks do not run during completion; load here.
            config_path = root.params.get("config_path")
            try:
                path = resolve_config_path(Path(config_path) if config_path else None)
                settings = load_settings(path)
                resolver = create_resolver(settings, config_dir(path))
            except ConfigError as e:
                logger.debug("Completion unavailable: %s", e)
                return []

        return complete_installable_sync(
            resolver, incomplete, spec, timeout=settings.completion_timeout,
        )

    return _complete


def _resolve(ctx: click.Context, kind: CommandKind, raw: str) -> Installable:
    spec = get_spec(kind)
    try:
        _, resolver = load_context(ctx)
        interactive = False if ctx.find_root().obj.get("no_prompt") else None
        return asyncio.run(resolve_installable(resolver, raw, spec, interactive=interactive))
    except (InstallableError, ConfigError) as e:
        fail(str(e))


def _emit(subcommand: str, resolved: dict[str, Installable], as_json: bool) -> None:
    if as_json:
        payload = {
            "subcommand": subcommand,
            **{
                role: {
                    "installable": str(inst),
                    "flakeref": inst.flakeref,
                    "attr_path": list(inst.attr_path),
                }
                for role, inst in resolved.items()
            },
        }
        click.echo(json.dumps(payload, indent=2))
        return

    for role, inst in resolved.items():
        if len(resolved) > 1:
            click.echo(f"{role}: {inst}")
        else:
            click.echo(str(inst))


def _json_option(fn):
    return click.option(
        "--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.",
    )(fn)


def _flag_option(kind: CommandKind, name: str, help_text: str):
    """An installable option named by the spec's own flag."""
    return click.option(
        get_spec(kind).flag,
        name,
        default="",
        help=help_text,
        shell_complete=installable_completer(kind),
    )


def _simple_command(kind: CommandKind, help_text: str) -> click.Command:
    """A command whose only input is one INSTALLABLE argument."""

    @click.command(name=get_spec(kind).subcommand, help=help_text)
    @click.argument(
        "installable",
        default=".",
        required=False,
        shell_complete=installable_completer(kind),
    )
    @_json_option
    @click.pass_context
    def command(ctx: click.Context, installable: str, as_json: bool) -> None:
        resolved = _resolve(ctx, kind, installable)
        _emit(get_spec(kind).subcommand, {"installable": resolved}, as_json)

    return command


build = _simple_command(CommandKind.BUILD, "Resolve a package to build.")
develop = _simple_command(CommandKind.DEVELOP, "Resolve a package or dev shell to develop.")
publish = _simple_command(CommandKind.PUBLISH, "Resolve a package to publish.")
run = _simple_command(CommandKind.RUN, "Resolve a package or app to run.")
shell = _simple_command(CommandKind.SHELL, "Resolve a package to open a shell with.")


@click.command()
@_flag_option(CommandKind.BUNDLER, "bundler", "Bundler installable (default: the default bundler).")
@click.argument(
    "installable",
    default=".",
    required=False,
    shell_complete=installable_completer(CommandKind.BUNDLE),
)
@_json_option
@click.pass_context
def bundle(ctx: click.Context, bundler: str, installable: str, as_json: bool) -> None:
    """Resolve a package to bundle and the bundler to use."""
    resolved = {
        "bundler": _resolve(ctx, CommandKind.BUNDLER, bundler),
        "installable": _resolve(ctx, CommandKind.BUNDLE, installable),
    }
    _emit("bundle", resolved, as_json)


@click.command()
@_flag_option(CommandKind.TEMPLATE, "template", "Template installable (default: the default template).")
@_json_option
@click.pass_context
def init(ctx: click.Context, template: str, as_json: bool) -> None:
    """Resolve a template to initialize a project from."""
    resolved = _resolve(ctx, CommandKind.TEMPLATE, template)
    _emit("init", {"template": resolved}, as_json)


INSTALLABLE_COMMANDS = (build, develop, publish, run, shell, bundle, init)
