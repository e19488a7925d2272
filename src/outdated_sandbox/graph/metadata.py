"""Build workspace and dependency-graph descriptions from ``cargo metadata`` output."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog

from outdated_sandbox.domain.errors import GraphConsistencyError, ResolverError
from outdated_sandbox.domain.models import (
    DependencyGraph,
    PackageId,
    PackageRecord,
    WorkspaceInfo,
)
from outdated_sandbox.resolver.process import run_command

if TYPE_CHECKING:
    from outdated_sandbox.resolver.process import CommandRunner

_logger = structlog.get_logger(__name__)


def parse_cargo_metadata(payload: Mapping[str, Any]) -> tuple[WorkspaceInfo, DependencyGraph]:
    """Convert a ``cargo metadata --format-version 1`` document into domain models."""

    raw_packages = payload.get("packages")
    if not isinstance(raw_packages, Sequence):
        raise GraphConsistencyError("metadata is missing the 'packages' list")
    workspace_root_obj = payload.get("workspace_root")
    if not isinstance(workspace_root_obj, str) or not workspace_root_obj:
        raise GraphConsistencyError("metadata is missing 'workspace_root'")

    ids_by_key: dict[str, PackageId] = {}
    records: dict[PackageId, PackageRecord] = {}
    for raw in raw_packages:
        if not isinstance(raw, Mapping):
            raise GraphConsistencyError("metadata package entries must be objects")
        key = _require_str(raw, "id")
        package_id = PackageId(
            name=_require_str(raw, "name"),
            version=_require_str(raw, "version"),
            source=str(raw.get("source") or ""),
        )
        manifest_path = Path(_require_str(raw, "manifest_path"))
        ids_by_key[key] = package_id
        records[package_id] = PackageRecord(
            package_id=package_id,
            root=manifest_path.parent,
            manifest_path=manifest_path,
        )

    edges: dict[PackageId, tuple[PackageId, ...]] = {}
    resolve = payload.get("resolve")
    if isinstance(resolve, Mapping):
        for node in resolve.get("nodes") or ():
            node_id = _lookup(ids_by_key, _require_str(node, "id"))
            edges[node_id] = tuple(
                _lookup(ids_by_key, key) for key in _node_dependency_keys(node)
            )

    members = tuple(
        _lookup(ids_by_key, key) for key in payload.get("workspace_members") or ()
    )
    workspace = WorkspaceInfo(root=Path(workspace_root_obj), members=members)
    return workspace, DependencyGraph(packages=records, edges=edges)


def load_cargo_metadata(
    manifest_path: Path,
    *,
    cargo_bin: str = "cargo",
    env: Mapping[str, str] | None = None,
    runner: CommandRunner = run_command,
) -> tuple[WorkspaceInfo, DependencyGraph]:
    """Run ``cargo metadata`` for ``manifest_path`` and parse its output."""

    command = (
        cargo_bin,
        "metadata",
        "--format-version",
        "1",
        "--manifest-path",
        str(manifest_path),
    )
    try:
        result = runner(command, cwd=manifest_path.parent, env=dict(env or {}))
    except OSError as exc:
        raise ResolverError(f"unable to run {cargo_bin!r}: {exc}") from exc
    if not result.succeeded:
        raise ResolverError(
            f"cargo metadata failed for {manifest_path}: {result.failure_detail()}"
        )
    try:
        payload = json.loads(result.stdout)
    except ValueError as exc:
        raise GraphConsistencyError(f"cargo metadata emitted invalid JSON: {exc}") from exc
    if not isinstance(payload, Mapping):
        raise GraphConsistencyError("cargo metadata output must be a JSON object")

    workspace, graph = parse_cargo_metadata(payload)
    _logger.info(
        "workspace_metadata_loaded",
        workspace_root=str(workspace.root),
        members=len(workspace.members),
        packages=len(graph.packages),
    )
    return workspace, graph


def _node_dependency_keys(node: Mapping[str, Any]) -> list[str]:
    # "deps" carries dev/build edges too; older outputs only have "dependencies"
    deps = node.get("deps")
    if isinstance(deps, Sequence) and deps:
        keys: list[str] = []
        for dep in deps:
            if isinstance(dep, Mapping) and isinstance(dep.get("pkg"), str):
                if dep["pkg"] not in keys:
                    keys.append(dep["pkg"])
        return keys
    dependencies = node.get("dependencies")
    if isinstance(dependencies, Sequence):
        return [item for item in dependencies if isinstance(item, str)]
    return []


def _lookup(ids_by_key: Mapping[str, PackageId], key: str) -> PackageId:
    try:
        return ids_by_key[key]
    except KeyError:
        raise GraphConsistencyError(
            f"package {key!r} is referenced but missing from graph metadata"
        ) from None


def _require_str(raw: Mapping[str, Any], key: str) -> str:
    value = raw.get(key)
    if not isinstance(value, str) or not value:
        raise GraphConsistencyError(f"metadata entry is missing string field {key!r}")
    return value


__all__ = ["load_cargo_metadata", "parse_cargo_metadata"]
