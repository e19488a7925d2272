"""Sandboxed copy of a workspace with explicitly ordered manifest-rewrite stages."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from outdated_sandbox.domain.errors import PassOrderError
from outdated_sandbox.domain.models import Policy
from outdated_sandbox.graph.walker import collect_manifest_paths
from outdated_sandbox.manifest.document import ManifestDocument
from outdated_sandbox.manifest.mutations import (
    PathRewriter,
    apply_to_dependencies,
    inject_stub_targets,
    version_transform,
)
from outdated_sandbox.sandbox.builder import SandboxBuilder
from outdated_sandbox.utils.fs import relative_to_root

if TYPE_CHECKING:
    from outdated_sandbox.domain.models import DependencyGraph, WorkspaceInfo
    from outdated_sandbox.manifest.mutations import DependencyTransform

_logger = structlog.get_logger(__name__)


class SandboxStage(StrEnum):
    """How far the on-disk sandbox manifests have been rewritten."""

    COPIED = "copied"
    PRESERVE_WRITTEN = "preserve_written"
    LATEST_WRITTEN = "latest_written"


@dataclass(slots=True)
class SandboxProject:
    """A sandbox directory holding rewritten copies of the workspace manifests.

    ``manifest_paths`` lists the sandbox copies in discovery order. The stage
    only moves forward: the preserve rewrite (stub targets + absolute paths)
    must be on disk before the latest rewrite reads the files back and widens
    their requirements.
    """

    root: Path
    original_root: Path
    manifest_paths: tuple[Path, ...]
    relative_manifest: Path
    stage: SandboxStage = SandboxStage.COPIED

    @classmethod
    def from_workspace(
        cls,
        workspace: WorkspaceInfo,
        graph: DependencyGraph,
        orig_manifest: Path,
        sandbox_root: Path,
    ) -> SandboxProject:
        """Discover, copy, and mirror the workspace manifests into ``sandbox_root``."""

        relative_manifest = relative_to_root(orig_manifest, workspace.root)
        manifest_paths = collect_manifest_paths(workspace, graph)
        copies = SandboxBuilder(workspace.root, manifest_paths, sandbox_root).build()
        return cls(
            root=Path(sandbox_root),
            original_root=Path(workspace.root),
            manifest_paths=copies,
            relative_manifest=relative_manifest,
        )

    @property
    def root_manifest(self) -> Path:
        """Sandbox location of the manifest the inspection was started from."""

        return self.root / self.relative_manifest

    @property
    def working_directory(self) -> Path:
        return self.root_manifest.parent

    def prepare(self, policy: Policy) -> None:
        """Bring the on-disk manifests into the state required by ``policy``."""

        if policy is Policy.PRESERVE:
            self.write_preserve_manifests()
        else:
            self.write_latest_manifests()

    def write_preserve_manifests(self) -> None:
        """Inject stub targets and absolutize escaping path dependencies."""

        self._require_stage(SandboxStage.COPIED, Policy.PRESERVE)
        for manifest_path in self.manifest_paths:
            rewriter = PathRewriter(self.original_root, self.root, manifest_path)
            self._rewrite(manifest_path, rewriter, version_transform(Policy.PRESERVE))
        self.stage = SandboxStage.PRESERVE_WRITTEN
        _logger.info("sandbox_manifests_written", policy=Policy.PRESERVE.value)

    def write_latest_manifests(self) -> None:
        """Widen every requirement on top of the already path-rewritten manifests."""

        self._require_stage(SandboxStage.PRESERVE_WRITTEN, Policy.LATEST)
        for manifest_path in self.manifest_paths:
            self._rewrite(manifest_path, version_transform(Policy.LATEST))
        self.stage = SandboxStage.LATEST_WRITTEN
        _logger.info("sandbox_manifests_written", policy=Policy.LATEST.value)

    def _rewrite(self, manifest_path: Path, *transforms: DependencyTransform) -> None:
        manifest = ManifestDocument.load(manifest_path)
        inject_stub_targets(manifest)
        for transform in transforms:
            apply_to_dependencies(manifest, transform)
        manifest.save()

    def _require_stage(self, expected: SandboxStage, policy: Policy) -> None:
        if self.stage is not expected:
            raise PassOrderError(
                f"cannot prepare the {policy.value!r} pass: sandbox stage is "
                f"{self.stage.value!r}, expected {expected.value!r}"
            )


__all__ = ["SandboxProject", "SandboxStage"]
