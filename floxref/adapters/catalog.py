"""
Catalog resolver — answers match queries from a static YAML catalog.

The catalog lists, per flake reference, the attribute keys available
under each prefix.  Per-system prefixes nest keys under a system name:

    flakes:
      ".":
        packages:
          x86_64-linux:
            - hello
            - key: python3Packages.requests
              description: HTTP for humans
        templates:
          - python

Keys are dotted attribute paths; quoted segments may contain dots.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Sequence

import yaml

from floxref.adapters.base import MatchResolver
from floxref.core.attrpath import AttrPathError, split_attr_path
from floxref.core.models.installable import RawReference, ResolvedMatch
from floxref.core.models.settings import DEFAULT_CHANNELS
from floxref.core.services.installable_errors import ResolutionFailed
from floxref.core.services.installable_specs import TEMPLATE_PROCESSOR

logger = logging.getLogger(__name__)

# Key addressed by a reference that names a prefix but no attribute.
DEFAULT_KEY = ("default",)


@dataclass
class CatalogEntry:
    key: tuple[str, ...]
    description: str | None = None


@dataclass
class CatalogPrefix:
    """Keys under one prefix. ``systems`` is keyed by None when system-less."""

    per_system: bool
    systems: dict[str | None, list[CatalogEntry]] = field(default_factory=dict)

    def lookup(
        self,
        system: str | None,
        key: tuple[str, ...],
        for_completion: bool,
    ) -> list[CatalogEntry]:
        entries = self.systems.get(system, [])
        if for_completion:
            return [e for e in entries if e.key[: len(key)] == key]
        wanted = key or DEFAULT_KEY
        return [e for e in entries if e.key == wanted]


Catalog = dict[str, dict[str, CatalogPrefix]]

# Catalog keys are not evaluated, so known processor expressions map to
# the entry filter they encode. Unknown expressions keep every entry.
_PROCESSOR_FILTERS: dict[str, Callable[[CatalogEntry], bool]] = {
    TEMPLATE_PROCESSOR: lambda entry: entry.key[0] != "_init",
}


def _parse_entries(raw: Any, where: str) -> list[CatalogEntry]:
    if not isinstance(raw, list):
        raise ResolutionFailed(f"Expected a list of keys at {where}, got {type(raw).__name__}")

    entries: list[CatalogEntry] = []
    for item in raw:
        if isinstance(item, dict):
            text, description = item.get("key"), item.get("description")
        else:
            text, description = item, None
        if not isinstance(text, str):
            raise ResolutionFailed(f"Invalid catalog key {text!r} at {where}")
        try:
            key = tuple(split_attr_path(text))
        except AttrPathError as e:
            raise ResolutionFailed(f"Invalid catalog key {text!r} at {where}: {e}") from e
        if not key:
            raise ResolutionFailed(f"Empty catalog key at {where}")
        entries.append(CatalogEntry(key=key, description=description))
    return entries


def parse_catalog(data: Any) -> Catalog:
    """Validate raw YAML data into a catalog.

    Raises:
        ResolutionFailed: If the structure is not a catalog.
    """
    if not isinstance(data, dict) or not isinstance(data.get("flakes"), dict):
        raise ResolutionFailed("Catalog must be a mapping with a 'flakes' mapping")

    catalog: Catalog = {}
    for flakeref, prefixes in data["flakes"].items():
        if not isinstance(prefixes, dict):
            raise ResolutionFailed(f"Expected a mapping of prefixes for flake {flakeref!r}")
        flake: dict[str, CatalogPrefix] = {}
        for prefix, body in prefixes.items():
            where = f"{flakeref}#{prefix}"
            if isinstance(body, dict):
                flake[prefix] = CatalogPrefix(
                    per_system=True,
                    systems={
                        str(system): _parse_entries(keys, f"{where}.{system}")
                        for system, keys in body.items()
                    },
                )
            else:
                flake[prefix] = CatalogPrefix(
                    per_system=False,
                    systems={None: _parse_entries(body, where)},
                )
        catalog[str(flakeref)] = flake
    return catalog


def load_catalog(path: Path) -> Catalog:
    """Read and validate a catalog file.

    Raises:
        ResolutionFailed: If the file is missing, unreadable, or invalid.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ResolutionFailed(f"Cannot read catalog {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ResolutionFailed(f"Invalid YAML in catalog {path}: {e}") from e

    catalog = parse_catalog(data)
    logger.debug("Loaded catalog %s with %d flakes", path, len(catalog))
    return catalog


def _keep_all(entry: CatalogEntry) -> bool:
    return True


class CatalogResolver(MatchResolver):
    """Resolve references against a catalog file (or an in-memory catalog).

    Args:
        path: Catalog YAML file, read lazily on the first call.
        system: Host system used when a reference names none.
        channels: Channel name → flake URL, for sources given by alias.
        catalog: Pre-parsed catalog; takes precedence over ``path``.
    """

    def __init__(
        self,
        path: Path | None = None,
        system: str = "x86_64-linux",
        channels: dict[str, str] | None = None,
        catalog: Catalog | None = None,
    ):
        self._path = path
        self._system = system
        self._channels = dict(DEFAULT_CHANNELS if channels is None else channels)
        self._catalog = catalog

    @property
    def name(self) -> str:
        return "catalog"

    @property
    def catalog(self) -> Catalog:
        if self._catalog is None:
            if self._path is None:
                raise ResolutionFailed("No catalog configured")
            self._catalog = load_catalog(self._path)
        return self._catalog

    def _flake(self, flakeref: str) -> dict[str, CatalogPrefix] | None:
        catalog = self.catalog
        if flakeref in catalog:
            return catalog[flakeref]
        url = self._channels.get(flakeref)
        if url is not None and url in catalog:
            return catalog[url]
        return None

    def _resolve_one(
        self,
        candidate: RawReference,
        default_flakerefs: Sequence[str],
        default_prefixes: Sequence[tuple[str, bool]],
        for_completion: bool,
        keep: Callable[[CatalogEntry], bool],
    ) -> list[ResolvedMatch]:
        flakerefs = [candidate.source] if candidate.source is not None else list(default_flakerefs)
        path = candidate.attr_path
        matches: list[ResolvedMatch] = []

        for flakeref in flakerefs:
            flake = self._flake(flakeref)
            if flake is None:
                logger.debug("Flake %r not in catalog", flakeref)
                continue

            if path and path[0] in flake:
                prefixes = [(path[0], True)]
                rest = path[1:]
            else:
                prefixes = [(p, applies) for p, applies in default_prefixes if p in flake]
                rest = path

            for prefix, applies_system in prefixes:
                entry = flake[prefix]
                system: str | None = None
                explicit = False
                key = rest
                if entry.per_system:
                    if rest and rest[0] in entry.systems:
                        system, explicit, key = rest[0], True, rest[1:]
                    elif applies_system:
                        system = self._system
                    else:
                        continue

                for found in entry.lookup(system, key, for_completion):
                    if not keep(found):
                        continue
                    matches.append(ResolvedMatch(
                        flakeref=flakeref,
                        prefix=prefix,
                        key=found.key,
                        explicit_system=explicit,
                        system=system,
                        description=found.description,
                    ))
        return matches

    async def resolve_matches(
        self,
        candidates: Sequence[RawReference],
        default_flakerefs: Sequence[str],
        default_prefixes: Sequence[tuple[str, bool]],
        for_completion: bool,
        processor: str | None = None,
    ) -> list[ResolvedMatch]:
        keep = _keep_all
        if processor is not None:
            if processor in _PROCESSOR_FILTERS:
                keep = _PROCESSOR_FILTERS[processor]
            else:
                logger.debug("Unknown processor expression, keeping all entries")

        matches: list[ResolvedMatch] = []
        for candidate in candidates:
            matches.extend(self._resolve_one(
                candidate, default_flakerefs, default_prefixes, for_completion, keep,
            ))
        logger.debug(
            "Resolved %d candidate(s) to %d match(es) (completion=%s)",
            len(candidates), len(matches), for_completion,
        )
        return matches
