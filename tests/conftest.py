"""
outdated-sandbox: shared test fixtures

File: tests/conftest.py

Purpose
- Build small on-disk Cargo workspaces with matching graph descriptions.
- Provide an in-process lock-file resolver so no test ever runs a real ``cargo``.
"""

from __future__ import annotations

import tempfile
import tomllib
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

import pytest
import tomli_w

from outdated_sandbox.constants import LOCK_FILE, MANIFEST_FILE, WILDCARD_REQUIREMENT
from outdated_sandbox.domain.errors import ResolverError
from outdated_sandbox.domain.models import (
    DependencyGraph,
    PackageId,
    PackageRecord,
    WorkspaceInfo,
)
from outdated_sandbox.resolver.context import ResolverEnvironment
from outdated_sandbox.resolver.invoker import OpenedWorkspace

if TYPE_CHECKING:
    from outdated_sandbox.resolver.context import ResolverContext
    from outdated_sandbox.resolver.invoker import UpdateOptions

LATEST_VERSION = "9.9.9"
COMPAT_VERSION = "1.0.0"


def write_manifest(directory: Path, payload: Mapping[str, Any]) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / MANIFEST_FILE
    path.write_text(tomli_w.dumps(dict(payload)), encoding="utf-8")
    return path


def read_manifest(path: Path) -> dict[str, Any]:
    with path.open("rb") as handle:
        return tomllib.load(handle)


def package_id(name: str, version: str = "0.1.0", source: str = "") -> PackageId:
    return PackageId(name=name, version=version, source=source)


def package_record(pkg: PackageId, manifest_path: Path) -> PackageRecord:
    return PackageRecord(package_id=pkg, root=manifest_path.parent, manifest_path=manifest_path)


@dataclass
class WorkspaceLayout:
    """An on-disk workspace plus the graph a metadata loader would report for it."""

    root: Path
    workspace: WorkspaceInfo
    graph: DependencyGraph
    manifests: dict[str, Path] = field(default_factory=dict)

    def manifest(self, name: str) -> Path:
        return self.manifests[name]


@pytest.fixture
def two_member_workspace(tmp_path: Path) -> WorkspaceLayout:
    """Virtual root ``ws`` with members ``a`` (path dep on ``../b``, ``serde = "1.0"``) and ``b``."""

    root = tmp_path / "ws"
    write_manifest(root, {"workspace": {"members": ["a", "b"]}})
    (root / LOCK_FILE).write_text('version = 3\n', encoding="utf-8")
    a_manifest = write_manifest(
        root / "a",
        {
            "package": {"name": "a", "version": "0.1.0"},
            "dependencies": {"serde": "1.0", "b": {"path": "../b", "version": "0.1"}},
            "bin": [{"name": "a", "path": "src/main.rs"}],
        },
    )
    b_manifest = write_manifest(
        root / "b",
        {"package": {"name": "b", "version": "0.1.0"}, "lib": {"name": "b"}},
    )

    a_id, b_id, serde_id = package_id("a"), package_id("b"), package_id(
        "serde", "1.0.200", "registry+https://github.com/rust-lang/crates.io-index"
    )
    registry_manifest = tmp_path / "registry" / "serde-1.0.200" / MANIFEST_FILE
    graph = DependencyGraph(
        packages={
            a_id: package_record(a_id, a_manifest),
            b_id: package_record(b_id, b_manifest),
            serde_id: package_record(serde_id, registry_manifest),
        },
        edges={a_id: (b_id, serde_id), b_id: (), serde_id: ()},
    )
    return WorkspaceLayout(
        root=root,
        workspace=WorkspaceInfo(root=root, members=(a_id, b_id)),
        graph=graph,
        manifests={"a": a_manifest, "b": b_manifest},
    )


@pytest.fixture
def outside_path_workspace(tmp_path: Path) -> WorkspaceLayout:
    """Single package ``a`` under ``ws`` with a path dependency on ``../../outside``."""

    root = tmp_path / "ws"
    write_manifest(tmp_path / "outside", {"package": {"name": "outside", "version": "0.2.0"}})
    a_manifest = write_manifest(
        root / "a",
        {
            "package": {"name": "a", "version": "0.1.0"},
            "dependencies": {"outside": {"path": "../../outside", "version": "0.2"}},
        },
    )
    write_manifest(root, {"workspace": {"members": ["a"]}})

    a_id = package_id("a")
    outside_id = package_id("outside", "0.2.0")
    graph = DependencyGraph(
        packages={
            a_id: package_record(a_id, a_manifest),
            outside_id: package_record(outside_id, tmp_path / "outside" / MANIFEST_FILE),
        },
        edges={a_id: (outside_id,), outside_id: ()},
    )
    return WorkspaceLayout(
        root=root,
        workspace=WorkspaceInfo(root=root, members=(a_id,)),
        graph=graph,
        manifests={"a": a_manifest},
    )


class FakeLockfileResolver:
    """Writes a lock file derived from the sandbox manifests currently on disk.

    Registry dependencies declared with the wildcard lock at ``LATEST_VERSION``;
    every other requirement locks at ``COMPAT_VERSION``. Each call records a
    snapshot of every sandbox manifest so tests can inspect pass ordering.
    """

    def __init__(self, *, fail_on_call: int | None = None) -> None:
        self.fail_on_call = fail_on_call
        self.opened: list[Path] = []
        self.snapshots: list[dict[str, dict[str, Any]]] = []
        self.sandbox_roots: list[Path] = []

    def open_workspace(self, manifest_path: Path, context: ResolverContext) -> OpenedWorkspace:
        self.opened.append(manifest_path)
        self.sandbox_roots.append(context.sandbox_root)
        return OpenedWorkspace(manifest_path=manifest_path, root=context.sandbox_root, context=context)

    def update_lockfile(self, workspace: OpenedWorkspace, options: UpdateOptions) -> None:
        assert options.aggressive is False
        assert options.to_update == ()
        sandbox_root = workspace.context.sandbox_root
        snapshot = {
            path.relative_to(sandbox_root).as_posix(): read_manifest(path)
            for path in sorted(sandbox_root.rglob(MANIFEST_FILE))
        }
        self.snapshots.append(snapshot)
        if self.fail_on_call is not None and len(self.snapshots) == self.fail_on_call:
            raise ResolverError("failed to select a version for the requirement `serde = \"*\"`")

        locked: dict[str, str] = {}
        for data in snapshot.values():
            package = data.get("package")
            if isinstance(package, dict):
                locked[package["name"]] = str(package.get("version", "0.0.0"))
            for name, spec in data.get("dependencies", {}).items():
                if isinstance(spec, dict) and "path" in spec:
                    continue
                requirement = spec if isinstance(spec, str) else spec.get("version")
                locked.setdefault(
                    name, LATEST_VERSION if requirement == WILDCARD_REQUIREMENT else COMPAT_VERSION
                )
        payload = {
            "version": 3,
            "package": [
                {"name": name, "version": version} for name, version in sorted(locked.items())
            ],
        }
        workspace.lock_path.write_text(tomli_w.dumps(payload), encoding="utf-8")


@pytest.fixture
def make_resolver() -> Callable[..., FakeLockfileResolver]:
    return FakeLockfileResolver


@pytest.fixture
def fake_environment(tmp_path: Path) -> ResolverEnvironment:
    home = tmp_path / "cargo-home"
    home.mkdir()
    return ResolverEnvironment(cwd=tmp_path, home=home, environ={"CARGO_HOME": str(home)})


@pytest.fixture
def isolated_tempdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Point :mod:`tempfile` at a private directory so sandbox cleanup can be asserted."""

    scratch = tmp_path / "scratch"
    scratch.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(scratch))
    yield scratch
