"""Unit tests for the cargo-backed resolver and the per-pass invoker."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path

import pytest

from outdated_sandbox.domain.errors import ManifestFormatError, ResolverError
from outdated_sandbox.domain.models import InspectionOptions
from outdated_sandbox.resolver.context import (
    ResolverContext,
    ResolverEnvironment,
    build_resolver_context,
)
from outdated_sandbox.resolver.invoker import CargoResolver, ResolverInvoker, UpdateOptions
from outdated_sandbox.resolver.process import CommandResult

LOCK = 'version = 3\n\n[[package]]\nname = "app"\nversion = "0.1.0"\n'


class _FakeCargo:
    """Records invocations and writes ``LOCK`` next to the workspace manifest."""

    def __init__(self, *, returncode: int = 0, lock_dir: Path | None = None) -> None:
        self.returncode = returncode
        self.lock_dir = lock_dir
        self.calls: list[tuple[tuple[str, ...], Path, dict[str, str]]] = []

    def __call__(
        self, command: Sequence[str], *, cwd: Path, env: Mapping[str, str]
    ) -> CommandResult:
        self.calls.append((tuple(command), cwd, dict(env)))
        if self.returncode == 0 and self.lock_dir is not None:
            (self.lock_dir / "Cargo.lock").write_text(LOCK, encoding="utf-8")
        return CommandResult(
            command=tuple(command),
            cwd=cwd,
            returncode=self.returncode,
            stdout="",
            stderr="" if self.returncode == 0 else "error: failed to select a version",
            duration_ms=0.5,
        )


def _sandbox(tmp_path: Path) -> Path:
    sandbox = tmp_path / "sandbox"
    (sandbox / "app").mkdir(parents=True)
    (sandbox / "Cargo.toml").write_text('[workspace]\nmembers = ["app"]\n', encoding="utf-8")
    (sandbox / "app" / "Cargo.toml").write_text(
        '[package]\nname = "app"\nversion = "0.1.0"\n', encoding="utf-8"
    )
    return sandbox


def _context(
    sandbox: Path, relative: str, options: InspectionOptions | None = None
) -> ResolverContext:
    environment = ResolverEnvironment(cwd=sandbox, home=sandbox.parent / "home")
    return build_resolver_context(
        sandbox, Path(relative), options or InspectionOptions(), environment
    )


def test_update_runs_cargo_update_in_manifest_directory(tmp_path: Path) -> None:
    sandbox = _sandbox(tmp_path)
    cargo = _FakeCargo(lock_dir=sandbox)
    context = _context(sandbox, "app/Cargo.toml", InspectionOptions(verbosity=2, offline=True))
    resolver = CargoResolver(cargo_bin="cargo", runner=cargo)

    state = ResolverInvoker(resolver, context).resolve()

    command, cwd, env = cargo.calls[0]
    assert command == (
        "cargo",
        "update",
        "--manifest-path",
        str(sandbox / "app" / "Cargo.toml"),
        "--color",
        "auto",
        "--offline",
    )
    assert cwd == sandbox / "app"
    assert env == {"CARGO_HOME": str(tmp_path / "home")}
    assert state.path == sandbox / "Cargo.lock"
    assert state.versions() == {"app": ("0.1.0",)}


def test_open_workspace_finds_enclosing_virtual_root(tmp_path: Path) -> None:
    sandbox = _sandbox(tmp_path)
    context = _context(sandbox, "app/Cargo.toml")

    opened = CargoResolver(runner=_FakeCargo()).open_workspace(context.manifest_path, context)

    assert opened.root == sandbox
    assert opened.lock_path == sandbox / "Cargo.lock"


def test_open_workspace_rejects_manifest_without_package_or_workspace(tmp_path: Path) -> None:
    sandbox = _sandbox(tmp_path)
    (sandbox / "app" / "Cargo.toml").write_text('[dependencies]\nserde = "1"\n', encoding="utf-8")
    context = _context(sandbox, "app/Cargo.toml")

    with pytest.raises(ManifestFormatError, match="neither"):
        CargoResolver(runner=_FakeCargo()).open_workspace(context.manifest_path, context)


def test_resolver_failure_carries_cargo_output(tmp_path: Path) -> None:
    sandbox = _sandbox(tmp_path)
    context = _context(sandbox, "Cargo.toml")
    resolver = CargoResolver(runner=_FakeCargo(returncode=101))

    with pytest.raises(ResolverError, match="failed to select a version"):
        ResolverInvoker(resolver, context).resolve()


def test_missing_lock_after_update_is_a_resolver_error(tmp_path: Path) -> None:
    sandbox = _sandbox(tmp_path)
    context = _context(sandbox, "Cargo.toml")

    with pytest.raises(ResolverError, match="did not produce a lock file"):
        ResolverInvoker(CargoResolver(runner=_FakeCargo()), context).resolve()


def test_update_options_are_translated(tmp_path: Path) -> None:
    sandbox = _sandbox(tmp_path)
    cargo = _FakeCargo(lock_dir=sandbox)
    context = _context(sandbox, "Cargo.toml", InspectionOptions(verbosity=1))
    resolver = CargoResolver(runner=cargo)
    opened = resolver.open_workspace(context.manifest_path, context)

    resolver.update_lockfile(
        opened, UpdateOptions(aggressive=True, precise="1.0.1", to_update=("serde",))
    )

    assert cargo.calls[0][0][-5:] == ("--aggressive", "--precise", "1.0.1", "--package", "serde")
