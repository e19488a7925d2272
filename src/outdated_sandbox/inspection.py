"""
One inspection run: build the sandbox, resolve under both version policies, tear down.

The two policy passes share one on-disk sandbox and always run in the same
order. The preserve pass writes stub targets and absolute paths; the latest
pass reads those files back and widens every requirement. Each pass opens its
own workspace from the sandbox and returns the lock state it produced; no
workspace object is kept between passes.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from outdated_sandbox.constants import LOCK_FILE
from outdated_sandbox.domain.models import InspectionOptions, Policy
from outdated_sandbox.resolver.context import ResolverEnvironment, build_resolver_context
from outdated_sandbox.resolver.invoker import CargoResolver, ResolverInvoker
from outdated_sandbox.resolver.lockfile import LockState
from outdated_sandbox.sandbox.project import SandboxProject
from outdated_sandbox.utils.fs import temp_directory

if TYPE_CHECKING:
    from outdated_sandbox.domain.models import DependencyGraph, WorkspaceInfo
    from outdated_sandbox.resolver.invoker import LockfileResolver

_logger = structlog.get_logger(__name__)

POLICY_ORDER: tuple[Policy, ...] = (Policy.PRESERVE, Policy.LATEST)


@dataclass(frozen=True, slots=True)
class PolicyPassResult:
    policy: Policy
    lock_state: LockState

    def to_dict(self) -> dict[str, object]:
        return {"policy": self.policy.value, "lock": self.lock_state.to_dict()}


@dataclass(frozen=True, slots=True)
class InspectionResult:
    """Lock states for the original project and for each policy pass."""

    sandbox_root: Path
    original_lock: LockState | None
    passes: tuple[PolicyPassResult, ...]

    def for_policy(self, policy: Policy) -> PolicyPassResult:
        for result in self.passes:
            if result.policy is policy:
                return result
        raise KeyError(policy.value)

    def to_dict(self) -> dict[str, object]:
        return {
            "original_lock": None if self.original_lock is None else self.original_lock.to_dict(),
            "passes": [result.to_dict() for result in self.passes],
        }


def run_policy_pass(
    project: SandboxProject,
    policy: Policy,
    invoker: ResolverInvoker,
) -> PolicyPassResult:
    """Rewrite the sandbox manifests for ``policy`` and resolve them."""

    log = _logger.bind(policy=policy.value, sandbox_root=str(project.root))
    log.info("policy_pass_started")
    project.prepare(policy)
    lock_state = invoker.resolve(project.root_manifest)
    log.info("policy_pass_finished", packages=len(lock_state.packages))
    return PolicyPassResult(policy=policy, lock_state=lock_state)


def run_inspection(
    workspace: WorkspaceInfo,
    graph: DependencyGraph,
    orig_manifest: Path,
    *,
    options: InspectionOptions | None = None,
    resolver: LockfileResolver | None = None,
    environment: ResolverEnvironment | None = None,
) -> InspectionResult:
    """Resolve ``workspace`` inside a disposable sandbox under both version policies.

    The sandbox directory is removed on every exit path unless
    ``options.keep_sandbox`` is set.
    """

    effective_options = options if options is not None else InspectionOptions()
    effective_resolver = (
        resolver if resolver is not None else CargoResolver(cargo_bin=effective_options.cargo_bin)
    )
    effective_environment = (
        environment if environment is not None else ResolverEnvironment.from_process()
    )
    original_lock = _read_original_lock(Path(workspace.root))

    with temp_directory(
        effective_options.temp_prefix, keep=effective_options.keep_sandbox
    ) as sandbox_root:
        _logger.info(
            "inspection_started",
            workspace_root=str(workspace.root),
            sandbox_root=str(sandbox_root),
        )
        project = SandboxProject.from_workspace(workspace, graph, Path(orig_manifest), sandbox_root)
        context = build_resolver_context(
            sandbox_root,
            project.relative_manifest,
            effective_options,
            effective_environment,
        )
        invoker = ResolverInvoker(effective_resolver, context)
        passes = tuple(run_policy_pass(project, policy, invoker) for policy in POLICY_ORDER)

    _logger.info("inspection_finished", sandbox_root=str(sandbox_root))
    return InspectionResult(sandbox_root=sandbox_root, original_lock=original_lock, passes=passes)


def _read_original_lock(workspace_root: Path) -> LockState | None:
    lock_path = workspace_root / LOCK_FILE
    if not lock_path.is_file():
        return None
    return LockState.from_path(lock_path)


__all__ = [
    "POLICY_ORDER",
    "InspectionResult",
    "PolicyPassResult",
    "run_inspection",
    "run_policy_pass",
]
