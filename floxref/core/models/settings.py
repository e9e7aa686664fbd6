"""
Settings model — user configuration loaded from floxref.yml.
"""

from __future__ import annotations

import platform

from pydantic import BaseModel, Field, field_validator

# Built-in channel registry. User entries extend or override these.
DEFAULT_CHANNELS: dict[str, str] = {
    "flox": "github:flox/floxpkgs",
    "nixpkgs": "github:flox/nixpkgs/stable",
    "nixpkgs-flox": "github:flox/nixpkgs-flox/master",
    "nixpkgs-stable": "github:flox/nixpkgs/stable",
    "nixpkgs-staging": "github:flox/nixpkgs/staging",
    "nixpkgs-unstable": "github:flox/nixpkgs/unstable",
}

# Seconds a shell completion may block on the resolver.
DEFAULT_COMPLETION_TIMEOUT = 2.0

_MACHINE_ALIASES = {"amd64": "x86_64", "arm64": "aarch64"}


def host_system() -> str:
    """Nix-style system double for the running host, e.g. ``x86_64-linux``."""
    machine = platform.machine().lower()
    machine = _MACHINE_ALIASES.get(machine, machine)
    return f"{machine}-{platform.system().lower()}"


class Settings(BaseModel):
    """Resolved runtime settings.

    Attributes:
        system:             Host system used when a reference names none.
        catalog:            Path to the resolver catalog (None = not configured).
        completion_timeout: Seconds a shell completion may block on the resolver.
        channels:           Channel name → flake URL.
    """

    system: str = Field(default_factory=host_system)
    catalog: str | None = None
    completion_timeout: float = DEFAULT_COMPLETION_TIMEOUT
    channels: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_CHANNELS))

    @field_validator("channels", mode="before")
    @classmethod
    def _merge_default_channels(cls, value: dict[str, str] | None) -> dict[str, str]:
        merged = dict(DEFAULT_CHANNELS)
        merged.update(value or {})
        return merged

    @field_validator("completion_timeout")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("completion_timeout must be positive")
        return value
