"""
Shared test fixtures and configuration.
"""

import textwrap
from pathlib import Path

import pytest

from floxref.adapters.mock import MockResolver
from floxref.core.models.installable import ResolvedMatch

CATALOG_YML = textwrap.dedent("""\
    flakes:
      ".":
        packages:
          x86_64-linux:
            - hello
            - default
            - key: python3Packages.requests
              description: HTTP for humans
          aarch64-darwin:
            - hello
        apps:
          x86_64-linux:
            - hello
            - cowsay
        devShells:
          x86_64-linux:
            - default
      flox:
        packages:
          x86_64-linux:
            - hello
            - flox
      "github:flox/bundlers/master":
        bundlers:
          x86_64-linux:
            - default
            - toArx
      "flake:flox":
        templates:
          - python
          - rust
          - _init
""")


def match(
    flakeref: str = "flox",
    prefix: str = "packages",
    key: tuple[str, ...] = ("hello",),
    explicit_system: bool = False,
    system: str | None = None,
) -> ResolvedMatch:
    """Shorthand ResolvedMatch builder."""
    return ResolvedMatch(
        flakeref=flakeref,
        prefix=prefix,
        key=key,
        explicit_system=explicit_system,
        system=system,
    )


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def mock_resolver() -> MockResolver:
    """A resolver with no matches configured."""
    return MockResolver()


@pytest.fixture
def catalog_file(tmp_path: Path) -> Path:
    """Write the sample catalog to a temp directory."""
    path = tmp_path / "catalog.yml"
    path.write_text(CATALOG_YML)
    return path


@pytest.fixture
def config_file(tmp_path: Path, catalog_file: Path) -> Path:
    """A floxref.yml pointing at the sample catalog."""
    path = tmp_path / "floxref.yml"
    path.write_text(textwrap.dedent("""\
        system: x86_64-linux
        catalog: catalog.yml
        completion_timeout: 5
    """))
    return path


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep the developer's environment out of config and logging tests."""
    for name in (
        "FLOXREF_CONFIG",
        "FLOXREF_CATALOG",
        "FLOXREF_LOG_LEVEL",
        "FLOXREF_LOG_FILE",
        "FLOXREF_LOG_FILE_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
