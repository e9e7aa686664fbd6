"""
Tests for CLI commands — installable commands, completion, specs, global options.
"""

import json
import logging
from pathlib import Path

import click
import pytest
from click.testing import CliRunner
from conftest import match

from floxref.adapters.mock import MockResolver
from floxref.core.models.installable import CommandKind
from floxref.core.services import installable_resolution
from floxref.core.services.installable_specs import get_spec
from floxref.main import cli
from floxref.ui.cli.installables import installable_completer


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """The group callback reconfigures logging on every invoke."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def _invoke(config_file: Path, *args: str, **kwargs):
    runner = CliRunner()
    return runner.invoke(cli, ["--config", str(config_file), *args], **kwargs)


class TestCLIGlobal:
    """Tests for global CLI behavior."""

    def test_help(self):
        result = CliRunner().invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "resolve and complete flox installables" in result.output
        for name in ("build", "develop", "publish", "run", "shell", "bundle", "init", "complete"):
            assert name in result.output

    def test_version(self):
        result = CliRunner().invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output


class TestSpecsCommand:
    def test_text(self):
        result = CliRunner().invoke(cli, ["specs"])
        assert result.exit_code == 0
        assert "template (--template)" in result.output
        assert "Subcommand:  init" in result.output

    def test_json(self):
        result = CliRunner().invoke(cli, ["specs", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        kinds = {row["kind"]: row for row in data}
        assert kinds["bundler"]["flag"] == "--bundler"
        assert kinds["run"]["default_prefixes"] == [["apps", True], ["packages", True]]


class TestRegistryFlags:
    def test_option_names_follow_specs(self):
        for command_name, kind in (("bundle", CommandKind.BUNDLER), ("init", CommandKind.TEMPLATE)):
            command = cli.commands[command_name]
            opts = [opt for param in command.params for opt in param.opts]
            assert get_spec(kind).flag in opts


class TestResolveCommands:
    def test_build_bare_key(self, config_file: Path):
        result = _invoke(config_file, "build", "hello")
        assert result.exit_code == 0, result.output
        assert result.output.strip() == ".#packages.x86_64-linux.hello"

    def test_build_default_target(self, config_file: Path):
        result = _invoke(config_file, "build")
        assert result.exit_code == 0, result.output
        assert result.output.strip() == ".#packages.x86_64-linux.default"

    def test_build_fully_qualified(self, config_file: Path):
        result = _invoke(config_file, "build", "flox#packages.hello")
        assert result.exit_code == 0, result.output
        assert result.output.strip() == "flox#packages.x86_64-linux.hello"

    def test_build_json(self, config_file: Path):
        result = _invoke(config_file, "build", "hello", "--json")
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["subcommand"] == "build"
        assert data["installable"]["flakeref"] == "."
        assert data["installable"]["attr_path"] == ["packages", "x86_64-linux", "hello"]

    def test_develop_default_shell(self, config_file: Path):
        result = _invoke(config_file, "develop")
        # packages.default and devShells.default both exist
        assert result.exit_code == 1
        assert "  - packages.default" in result.output
        assert "  - devShells.default" in result.output

    def test_run_ambiguous_without_terminal(self, config_file: Path):
        result = _invoke(config_file, "run", "hello")
        assert result.exit_code == 1
        assert "You must address a specific package or app" in result.output
        assert "$ floxref run apps.hello" in result.output
        assert result.output.index("  - apps.hello") < result.output.index("  - packages.hello")

    def test_run_interactive_selection(self, config_file: Path, monkeypatch):
        monkeypatch.setattr(installable_resolution, "is_interactive", lambda: True)
        result = _invoke(config_file, "run", "hello", input="2\n")
        assert result.exit_code == 0, result.output
        assert ".#packages.x86_64-linux.hello" in result.output
        assert "1) apps.hello" in result.output

    def test_run_interactive_cancelled(self, config_file: Path, monkeypatch):
        monkeypatch.setattr(installable_resolution, "is_interactive", lambda: True)
        result = _invoke(config_file, "run", "hello", input="")
        assert result.exit_code == 1
        assert "cancelled" in result.output

    def test_no_prompt_flag(self, config_file: Path, monkeypatch):
        monkeypatch.setattr(installable_resolution, "is_interactive", lambda: True)
        result = CliRunner().invoke(cli, ["--no-prompt", "--config", str(config_file), "run", "hello"])
        assert result.exit_code == 1
        assert "  - apps.hello" in result.output

    def test_not_found(self, config_file: Path):
        result = _invoke(config_file, "build", "does-not-exist")
        assert result.exit_code == 1
        assert "No matching installables found" in result.output

    def test_invalid_reference(self, config_file: Path):
        result = _invoke(config_file, "build", "a..b")
        assert result.exit_code == 1
        assert "Invalid installable reference" in result.output

    def test_init_template(self, config_file: Path):
        result = _invoke(config_file, "init", "--template", "python")
        assert result.exit_code == 0, result.output
        assert result.output.strip() == "flake:flox#templates.python"

    def test_bundle_with_bundler(self, config_file: Path):
        result = _invoke(config_file, "bundle", "--bundler", "toArx", "hello")
        assert result.exit_code == 0, result.output
        assert "bundler: github:flox/bundlers/master#bundlers.x86_64-linux.toArx" in result.output
        assert "installable: .#packages.x86_64-linux.hello" in result.output

    def test_bundle_default_bundler(self, config_file: Path):
        result = _invoke(config_file, "bundle", "hello", "--json")
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["bundler"]["attr_path"] == ["bundlers", "x86_64-linux", "default"]

    def test_missing_catalog(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = CliRunner().invoke(cli, ["build", "hello"])
        assert result.exit_code == 1
        assert "No resolver catalog configured" in result.output

    def test_injected_resolver(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        resolver = MockResolver([match(flakeref="a", key=("tool",))])
        result = CliRunner().invoke(cli, ["run", "a#tool"], obj={"resolver": resolver})
        assert result.exit_code == 0, result.output
        assert result.output.strip() == "a#packages.tool"


class TestCompleteCommand:
    def test_partial_key(self, config_file: Path):
        result = _invoke(config_file, "complete", "build", "flox#packages.he")
        assert result.exit_code == 0, result.output
        assert result.output.splitlines() == ["flox#packages.hello"]

    def test_template_helpers_hidden(self, config_file: Path):
        result = _invoke(config_file, "complete", "template", "")
        assert result.exit_code == 0, result.output
        lines = result.output.splitlines()
        assert "flake:flox#templates.python" in lines
        assert not [line for line in lines if "_init" in line]

    def test_flake_hash(self, config_file: Path):
        result = _invoke(config_file, "complete", "build", ".#")
        assert result.exit_code == 0, result.output
        lines = result.output.splitlines()
        assert lines == sorted(set(lines))
        assert ".#hello" in lines
        assert ".#packages.hello" in lines
        assert '.#python3Packages.requests' in lines

    def test_bare_prefix(self, config_file: Path):
        result = _invoke(config_file, "complete", "build", "hel")
        assert result.exit_code == 0, result.output
        assert result.output.splitlines() == ["hello"]

    def test_no_completions(self, config_file: Path):
        result = _invoke(config_file, "complete", "build", "zzz")
        assert result.exit_code == 0
        assert result.output == ""

    def test_unknown_kind(self, config_file: Path):
        result = _invoke(config_file, "complete", "nope", "x")
        assert result.exit_code != 0


class TestShellCompleteCallback:
    def test_uses_injected_resolver(self):
        complete = installable_completer(CommandKind.BUILD)
        ctx = click.Context(cli, obj={"resolver": MockResolver([match(key=("hello",))])})
        assert complete(ctx, None, "hel") == ["hello"]

    def test_loads_config_from_params(self, config_file: Path):
        complete = installable_completer(CommandKind.TEMPLATE)
        ctx = click.Context(cli)
        ctx.params = {"config_path": str(config_file)}
        assert complete(ctx, None, "py") == ["python"]

    def test_unconfigured_is_empty(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        complete = installable_completer(CommandKind.BUILD)
        assert complete(click.Context(cli), None, "hel") == []
