"""Manifest documents: parse from TOML, expose dependency sections, serialize back."""

from __future__ import annotations

import tomllib
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomli_w

from outdated_sandbox.constants import (
    BIN_TABLE_KEY,
    DEPENDENCY_TABLE_KEYS,
    LIB_TABLE_KEY,
    PACKAGE_TABLE_KEY,
    TARGET_TABLE_KEY,
)
from outdated_sandbox.domain.errors import ManifestFormatError, SandboxIOError
from outdated_sandbox.domain.models import DependencyTable, TomlTable
from outdated_sandbox.utils.fs import atomic_write


@dataclass(slots=True)
class ManifestDocument:
    """In-memory manifest: the parsed TOML table plus the path it came from.

    Unknown keys are preserved verbatim; only the dependency sections and the
    ``bin``/``lib`` targets are ever touched by the mutation passes.
    """

    data: TomlTable = field(default_factory=dict)
    path: Path | None = None

    @classmethod
    def from_text(cls, text: str, *, path: Path | None = None) -> ManifestDocument:
        try:
            parsed = tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            location = path if path is not None else "<memory>"
            raise ManifestFormatError(f"invalid TOML in {location}: {exc}") from exc
        return cls(data=parsed, path=path)

    @classmethod
    def load(cls, path: Path) -> ManifestDocument:
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise SandboxIOError(f"unable to read manifest ({exc.strerror})", path=path) from exc
        except UnicodeDecodeError as exc:
            raise ManifestFormatError(f"manifest {path} is not valid UTF-8: {exc.reason}") from exc
        return cls.from_text(text, path=path)

    def dumps(self) -> str:
        try:
            return tomli_w.dumps(self.data)
        except TypeError as exc:
            raise ManifestFormatError(f"manifest {self.path} cannot be serialized: {exc}") from exc

    def save(self, path: Path | None = None) -> Path:
        target = path if path is not None else self.path
        if target is None:
            raise ValueError("manifest has no path to save to")
        try:
            atomic_write(target, self.dumps())
        except OSError as exc:
            raise SandboxIOError(f"unable to write manifest ({exc.strerror})", path=target) from exc
        self.path = target
        return target

    @property
    def package(self) -> TomlTable | None:
        value = self.data.get(PACKAGE_TABLE_KEY)
        return value if isinstance(value, dict) else None

    @property
    def lib(self) -> TomlTable | None:
        value = self.data.get(LIB_TABLE_KEY)
        return value if isinstance(value, dict) else None

    @property
    def bins(self) -> list[TomlTable] | None:
        value = self.data.get(BIN_TABLE_KEY)
        return value if isinstance(value, list) else None

    def dependency_table(self, key: str) -> DependencyTable | None:
        if key not in DEPENDENCY_TABLE_KEYS:
            raise KeyError(f"unknown dependency table {key!r}")
        value = self.data.get(key)
        return value if isinstance(value, dict) else None

    def target_tables(self) -> dict[str, Any]:
        value = self.data.get(TARGET_TABLE_KEY)
        return value if isinstance(value, dict) else {}

    def iter_dependency_tables(self) -> Iterator[DependencyTable]:
        """Yield every dependency table: top-level kinds first, then per platform target."""

        for key in DEPENDENCY_TABLE_KEYS:
            table = self.dependency_table(key)
            if table is not None:
                yield table
        for target in self.target_tables().values():
            if not isinstance(target, dict):
                continue
            for key in DEPENDENCY_TABLE_KEYS:
                table = target.get(key)
                if isinstance(table, dict):
                    yield table


__all__ = ["ManifestDocument"]
