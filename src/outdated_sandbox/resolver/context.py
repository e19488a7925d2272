"""Resolution environment rooted at the sandbox, with forwarded process options."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from outdated_sandbox.constants import CARGO_HOME_ENV
from outdated_sandbox.domain.errors import ResolverEnvironmentError
from outdated_sandbox.domain.models import InspectionOptions


@dataclass(frozen=True, slots=True)
class ResolverEnvironment:
    """Process facts the resolver needs, captured explicitly instead of queried ad hoc."""

    cwd: Path | None
    home: Path | None
    environ: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_process(cls, environ: Mapping[str, str] | None = None) -> ResolverEnvironment:
        env_map = dict(os.environ if environ is None else environ)
        try:
            cwd: Path | None = Path.cwd()
        except OSError:
            cwd = None

        home: Path | None = None
        raw_home = env_map.get(CARGO_HOME_ENV, "").strip()
        if raw_home:
            candidate = Path(raw_home).expanduser()
            if not candidate.is_absolute() and cwd is not None:
                candidate = cwd / candidate
            home = candidate
        else:
            try:
                home = Path.home() / ".cargo"
            except RuntimeError:
                home = None
        return cls(cwd=cwd, home=home, environ=MappingProxyType(env_map))


@dataclass(frozen=True, slots=True)
class ResolverContext:
    """Everything needed to open the sandboxed workspace and resolve it."""

    sandbox_root: Path
    manifest_path: Path
    cwd: Path
    cargo_home: Path
    options: InspectionOptions

    def command_flags(self) -> tuple[str, ...]:
        """Forwarded color/frozen/locked/offline options as resolver arguments.

        The resolver always runs at its own default verbosity; a non-zero
        verbosity only lifts ``--quiet``.
        """

        flags: list[str] = []
        if self.options.verbosity == 0:
            flags.append("--quiet")
        flags.extend(("--color", self.options.color))
        if self.options.frozen:
            flags.append("--frozen")
        if self.options.locked:
            flags.append("--locked")
        if self.options.offline:
            flags.append("--offline")
        return tuple(flags)

    def command_env(self) -> dict[str, str]:
        return {CARGO_HOME_ENV: str(self.cargo_home)}


def build_resolver_context(
    sandbox_root: Path,
    relative_manifest: Path,
    options: InspectionOptions,
    environment: ResolverEnvironment,
) -> ResolverContext:
    """Root a resolution environment at the directory of the active sandbox manifest."""

    if environment.cwd is None:
        raise ResolverEnvironmentError("couldn't get the current directory of the process")
    if environment.home is None:
        raise ResolverEnvironmentError(
            "couldn't find your home directory. This probably means that $HOME was not set."
        )

    manifest_path = Path(sandbox_root) / relative_manifest
    return ResolverContext(
        sandbox_root=Path(sandbox_root),
        manifest_path=manifest_path,
        cwd=manifest_path.parent,
        cargo_home=environment.home,
        options=options,
    )


__all__ = ["ResolverContext", "ResolverEnvironment", "build_resolver_context"]
