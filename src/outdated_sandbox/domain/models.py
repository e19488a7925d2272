"""Immutable domain models describing a workspace, its dependency graph, and run options."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from types import MappingProxyType
from typing import Any, TypeAlias

from outdated_sandbox.constants import (
    COLOR_MODES,
    DEFAULT_CARGO_BIN,
    DEFAULT_TEMP_PREFIX,
)
from outdated_sandbox.domain.errors import GraphConsistencyError

TomlTable: TypeAlias = dict[str, Any]
DependencySpec: TypeAlias = str | dict[str, Any]
DependencyTable: TypeAlias = dict[str, Any]


class Policy(StrEnum):
    """Version policy applied during one mutate-and-resolve pass."""

    PRESERVE = "compat"
    LATEST = "latest"


@dataclass(frozen=True, slots=True, order=True)
class PackageId:
    """Hashable package identity: name, version, and source."""

    name: str
    version: str
    source: str = ""

    def __str__(self) -> str:
        if self.source:
            return f"{self.name} {self.version} ({self.source})"
        return f"{self.name} {self.version}"


@dataclass(frozen=True, slots=True)
class PackageRecord:
    """Metadata for one package in a resolved graph."""

    package_id: PackageId
    root: Path
    manifest_path: Path


@dataclass(frozen=True, slots=True)
class WorkspaceInfo:
    """Read-only workspace description: root directory and ordered members."""

    root: Path
    members: tuple[PackageId, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "root", Path(self.root))
        object.__setattr__(self, "members", tuple(self.members))


@dataclass(frozen=True, slots=True)
class DependencyGraph:
    """Resolved dependency graph keyed by :class:`PackageId`.

    ``edges`` maps every package to its direct dependencies, dev and build
    edges included. ``packages`` maps every identity to its metadata.
    """

    packages: Mapping[PackageId, PackageRecord]
    edges: Mapping[PackageId, tuple[PackageId, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "packages", MappingProxyType(dict(self.packages)))
        object.__setattr__(
            self,
            "edges",
            MappingProxyType({key: tuple(value) for key, value in self.edges.items()}),
        )

    def record(self, package_id: PackageId) -> PackageRecord:
        try:
            return self.packages[package_id]
        except KeyError:
            raise GraphConsistencyError(
                f"package {package_id} is referenced but missing from graph metadata"
            ) from None

    def dependencies_of(self, package_id: PackageId) -> tuple[PackageId, ...]:
        return self.edges.get(package_id, ())


@dataclass(frozen=True, slots=True)
class InspectionOptions:
    """Process-wide options forwarded to the resolver for one inspection run."""

    verbosity: int = 0
    color: str = "auto"
    frozen: bool = False
    locked: bool = False
    offline: bool = False
    cargo_bin: str = DEFAULT_CARGO_BIN
    temp_prefix: str = DEFAULT_TEMP_PREFIX
    keep_sandbox: bool = False

    def __post_init__(self) -> None:
        if self.verbosity < 0:
            raise ValueError("verbosity must be >= 0")
        if self.color not in COLOR_MODES:
            allowed = ", ".join(COLOR_MODES)
            raise ValueError(f"unsupported color mode {self.color!r}; expected one of: {allowed}")
        if not self.cargo_bin.strip():
            raise ValueError("cargo_bin must not be empty")

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> InspectionOptions:
        """Build options from an effective config mapping (see :mod:`outdated_sandbox.config`)."""

        resolver = config.get("resolver", {})
        sandbox = config.get("sandbox", {})
        return cls(
            verbosity=int(resolver.get("verbosity", 0)),
            color=str(resolver.get("color", "auto")),
            frozen=bool(resolver.get("frozen", False)),
            locked=bool(resolver.get("locked", False)),
            offline=bool(resolver.get("offline", False)),
            cargo_bin=str(resolver.get("cargo_bin", DEFAULT_CARGO_BIN)),
            temp_prefix=str(sandbox.get("temp_prefix", DEFAULT_TEMP_PREFIX)),
            keep_sandbox=bool(sandbox.get("keep", False)),
        )


__all__ = [
    "DependencyGraph",
    "DependencySpec",
    "DependencyTable",
    "InspectionOptions",
    "PackageId",
    "PackageRecord",
    "Policy",
    "TomlTable",
    "WorkspaceInfo",
]
