"""Resolver integration: environment, external lock-file update, and resulting lock state."""

from outdated_sandbox.resolver.context import (
    ResolverContext,
    ResolverEnvironment,
    build_resolver_context,
)
from outdated_sandbox.resolver.invoker import (
    CargoResolver,
    LockfileResolver,
    OpenedWorkspace,
    ResolverInvoker,
    UpdateOptions,
)
from outdated_sandbox.resolver.lockfile import LockedPackage, LockState
from outdated_sandbox.resolver.process import CommandResult, CommandRunner, run_command

__all__ = [
    "CargoResolver",
    "CommandResult",
    "CommandRunner",
    "LockState",
    "LockedPackage",
    "LockfileResolver",
    "OpenedWorkspace",
    "ResolverContext",
    "ResolverEnvironment",
    "ResolverInvoker",
    "UpdateOptions",
    "build_resolver_context",
    "run_command",
]
