"""Open the sandboxed workspace and run the external lock-file update against it."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

import structlog

from outdated_sandbox.constants import DEFAULT_CARGO_BIN, LOCK_FILE, MANIFEST_FILE
from outdated_sandbox.domain.errors import ManifestFormatError, ResolverError
from outdated_sandbox.manifest.document import ManifestDocument
from outdated_sandbox.resolver.lockfile import LockState
from outdated_sandbox.resolver.process import run_command
from outdated_sandbox.utils.fs import is_within

if TYPE_CHECKING:
    from outdated_sandbox.resolver.context import ResolverContext
    from outdated_sandbox.resolver.process import CommandRunner

_logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class UpdateOptions:
    """Lock-file update knobs; the sandbox always resolves everything non-aggressively."""

    aggressive: bool = False
    precise: str | None = None
    to_update: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class OpenedWorkspace:
    """A workspace loaded from a sandbox manifest, valid for a single policy pass."""

    manifest_path: Path
    root: Path
    context: ResolverContext

    @property
    def lock_path(self) -> Path:
        return self.root / LOCK_FILE


class LockfileResolver(Protocol):
    def open_workspace(self, manifest_path: Path, context: ResolverContext) -> OpenedWorkspace: ...

    def update_lockfile(self, workspace: OpenedWorkspace, options: UpdateOptions) -> None: ...


class CargoResolver:
    """:class:`LockfileResolver` backed by the ``cargo`` command-line tool."""

    def __init__(
        self,
        *,
        cargo_bin: str = DEFAULT_CARGO_BIN,
        runner: CommandRunner = run_command,
    ) -> None:
        self._cargo_bin = cargo_bin
        self._runner = runner

    def open_workspace(self, manifest_path: Path, context: ResolverContext) -> OpenedWorkspace:
        manifest = ManifestDocument.load(manifest_path)
        if manifest.package is None and not isinstance(manifest.data.get("workspace"), dict):
            raise ManifestFormatError(
                f"manifest {manifest_path} declares neither [package] nor [workspace]"
            )
        root = _find_workspace_root(manifest_path, context.sandbox_root)
        return OpenedWorkspace(manifest_path=manifest_path, root=root, context=context)

    def update_lockfile(self, workspace: OpenedWorkspace, options: UpdateOptions) -> None:
        context = workspace.context
        command: list[str] = [
            self._cargo_bin,
            "update",
            "--manifest-path",
            str(workspace.manifest_path),
            *context.command_flags(),
        ]
        if options.aggressive:
            command.append("--aggressive")
        if options.precise is not None:
            command.extend(("--precise", options.precise))
        for package in options.to_update:
            command.extend(("--package", package))

        try:
            result = self._runner(command, cwd=context.cwd, env=context.command_env())
        except OSError as exc:
            raise ResolverError(f"unable to run {self._cargo_bin!r}: {exc}") from exc
        if not result.succeeded:
            raise ResolverError(
                f"lock file update failed for {workspace.manifest_path}: {result.failure_detail()}"
            )


class ResolverInvoker:
    """Run one resolution against the sandbox and return the lock state it produced."""

    def __init__(self, resolver: LockfileResolver, context: ResolverContext) -> None:
        self._resolver = resolver
        self._context = context

    @property
    def context(self) -> ResolverContext:
        return self._context

    def resolve(self, manifest_path: Path | None = None) -> LockState:
        target = manifest_path if manifest_path is not None else self._context.manifest_path
        workspace = self._resolver.open_workspace(target, self._context)
        self._resolver.update_lockfile(workspace, UpdateOptions())

        lock_path = workspace.lock_path
        if not lock_path.is_file():
            raise ResolverError(f"resolver did not produce a lock file at {lock_path}")
        state = LockState.from_path(lock_path)
        _logger.info(
            "lockfile_updated",
            manifest=str(target),
            lock_path=str(lock_path),
            packages=len(state.packages),
        )
        return state


def _find_workspace_root(manifest_path: Path, sandbox_root: Path) -> Path:
    """Nearest ancestor inside the sandbox whose manifest declares ``[workspace]``."""

    start = manifest_path.parent
    for candidate in (start, *start.parents):
        if not is_within(candidate, sandbox_root):
            break
        candidate_manifest = candidate / MANIFEST_FILE
        if not candidate_manifest.is_file():
            continue
        document = ManifestDocument.load(candidate_manifest)
        if isinstance(document.data.get("workspace"), dict):
            return candidate
    return start


__all__ = [
    "CargoResolver",
    "LockfileResolver",
    "OpenedWorkspace",
    "ResolverInvoker",
    "UpdateOptions",
]
