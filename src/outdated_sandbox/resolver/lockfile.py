"""Read-only view of a lock file written by the resolver."""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from outdated_sandbox.domain.errors import ManifestFormatError, SandboxIOError


@dataclass(frozen=True, slots=True, order=True)
class LockedPackage:
    name: str
    version: str
    source: str = ""


@dataclass(frozen=True, slots=True)
class LockState:
    """Pinned packages recorded in one lock file, sorted by name then version."""

    path: Path | None
    packages: tuple[LockedPackage, ...]

    @classmethod
    def from_text(cls, text: str, *, path: Path | None = None) -> LockState:
        try:
            payload = tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            raise ManifestFormatError(f"invalid lock file {path}: {exc}") from exc

        packages: list[LockedPackage] = []
        for entry in payload.get("package", ()):
            if not isinstance(entry, Mapping):
                raise ManifestFormatError(f"lock file {path} has a malformed [[package]] entry")
            name = entry.get("name")
            version = entry.get("version")
            if not isinstance(name, str) or not isinstance(version, str):
                raise ManifestFormatError(
                    f"lock file {path} has a [[package]] entry without name/version"
                )
            packages.append(LockedPackage(name, version, str(entry.get("source", ""))))
        return cls(path=path, packages=tuple(sorted(packages)))

    @classmethod
    def from_path(cls, path: Path) -> LockState:
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise SandboxIOError(f"unable to read lock file ({exc.strerror})", path=path) from exc
        except UnicodeDecodeError as exc:
            raise ManifestFormatError(f"lock file {path} is not valid UTF-8: {exc.reason}") from exc
        return cls.from_text(text, path=path)

    def versions(self) -> dict[str, tuple[str, ...]]:
        grouped: dict[str, list[str]] = {}
        for package in self.packages:
            grouped.setdefault(package.name, []).append(package.version)
        return {name: tuple(versions) for name, versions in grouped.items()}

    def to_dict(self) -> dict[str, object]:
        return {
            "path": None if self.path is None else str(self.path),
            "packages": [
                {"name": item.name, "version": item.version, "source": item.source}
                for item in self.packages
            ],
        }


__all__ = ["LockState", "LockedPackage"]
