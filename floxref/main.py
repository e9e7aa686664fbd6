"""
floxref — CLI entrypoint.

Usage:
    python -m floxref.main --help
    python -m floxref.main build hello
    python -m floxref.main complete run 'flox#pack'
    python -m floxref.main specs --json
"""

from __future__ import annotations

import json
from pathlib import Path

import click

from floxref import PROG_NAME, __version__
from floxref.core.config.loader import ConfigError
from floxref.core.models.installable import CommandKind
from floxref.core.observability.logging_config import level_from_flags, setup_logging_from_env


@click.group()
@click.version_option(version=__version__, prog_name=PROG_NAME)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--no-prompt",
    is_flag=True,
    help="Never prompt; fail with the list of choices when a reference is ambiguous.",
)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to floxref.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    no_prompt: bool,
    config_path: str | None,
) -> None:
    """floxref — resolve and complete flox installables."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["no_prompt"] = no_prompt
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    setup_logging_from_env(level_from_flags(debug=debug, verbose=verbose, quiet=quiet))


@cli.command()
@click.argument("kind", type=click.Choice([k.value for k in CommandKind]))
@click.argument("partial", default="")
@click.pass_context
def complete(ctx: click.Context, kind: str, partial: str) -> None:
    """Print completions for a partial installable, one per line."""
    from floxref.core.services.installable_completion import complete_installable_sync
    from floxref.core.services.installable_specs import get_spec
    from floxref.ui.cli.installables import fail, load_context

    try:
        settings, resolver = load_context(ctx)
    except ConfigError as e:
        fail(str(e))

    for completion in complete_installable_sync(
        resolver, partial, get_spec(kind), timeout=settings.completion_timeout,
    ):
        click.echo(completion)


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def specs(as_json: bool) -> None:
    """List the installable spec of every command kind."""
    from floxref.core.services.installable_specs import list_specs

    rows = list_specs()
    if as_json:
        click.echo(json.dumps(rows, indent=2))
        return

    for row in rows:
        flag = f" ({row['flag']})" if row["flag"] else ""
        click.secho(f"\n📦 {row['kind']}{flag}", fg="cyan", bold=True)
        click.echo(f"   Subcommand:  {row['subcommand']}")
        click.echo(f"   Kinds:       {', '.join(row['derivation_types'])}")
        prefixes = ", ".join(
            f"{name}{' [system]' if per_system else ''}"
            for name, per_system in row["default_prefixes"]
        )
        click.echo(f"   Prefixes:    {prefixes}")
        click.echo(f"   Flakerefs:   {', '.join(row['default_flakerefs'])}")
        if row["processor"]:
            click.echo("   Processor:   yes")
    click.echo()


# ── Register sub-command groups ──

from floxref.ui.cli.installables import INSTALLABLE_COMMANDS  # noqa: E402

for _command in INSTALLABLE_COMMANDS:
    cli.add_command(_command)


if __name__ == "__main__":
    cli()
