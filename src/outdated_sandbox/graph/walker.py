"""Collect the manifest files of every workspace-local package reachable from the members."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from outdated_sandbox.domain.models import DependencyGraph, PackageId, WorkspaceInfo

_logger = structlog.get_logger(__name__)


class GraphWalker:
    """Depth-first walk over a resolved dependency graph.

    Packages outside the workspace root are still traversed, since their own
    dependencies may lead back into the workspace, but only manifests rooted
    under the workspace root are collected.
    """

    def __init__(self, workspace: WorkspaceInfo, graph: DependencyGraph) -> None:
        self._workspace = workspace
        self._graph = graph

    def manifest_paths(self) -> tuple[Path, ...]:
        visited: set[PackageId] = set()
        collected: list[Path] = []

        for member in self._workspace.members:
            self._walk_from(member, visited, collected)

        _logger.debug(
            "graph_walk_completed",
            workspace_root=str(self._workspace.root),
            visited_packages=len(visited),
            manifests=len(collected),
        )
        return tuple(collected)

    def _walk_from(
        self,
        start: PackageId,
        visited: set[PackageId],
        collected: list[Path],
    ) -> None:
        stack: list[PackageId] = [start]
        while stack:
            package_id = stack.pop()
            if package_id in visited:
                continue
            visited.add(package_id)

            record = self._graph.record(package_id)
            if _is_under(record.root, self._workspace.root):
                collected.append(record.manifest_path)
            else:
                _logger.debug("graph_walk_skipped_external", package=str(package_id))

            # reversed so the first declared dependency is visited first
            for dependency in reversed(self._graph.dependencies_of(package_id)):
                if dependency not in visited:
                    stack.append(dependency)


def collect_manifest_paths(workspace: WorkspaceInfo, graph: DependencyGraph) -> tuple[Path, ...]:
    """Return manifest paths of all workspace-local packages reachable from ``workspace``."""

    return GraphWalker(workspace, graph).manifest_paths()


def _is_under(path: Path, root: Path) -> bool:
    try:
        Path(path).relative_to(root)
    except ValueError:
        return False
    return True


__all__ = ["GraphWalker", "collect_manifest_paths"]
