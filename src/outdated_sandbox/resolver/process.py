"""Subprocess execution seam shared by the metadata loader and the resolver backend."""

from __future__ import annotations

import os
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

import structlog

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

_logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Normalized result of one external command."""

    command: tuple[str, ...]
    cwd: Path
    returncode: int
    stdout: str
    stderr: str
    duration_ms: float

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0

    def failure_detail(self) -> str:
        return self.stderr.strip() or self.stdout.strip() or f"exit code {self.returncode}"


class CommandRunner(Protocol):
    def __call__(
        self,
        command: Sequence[str],
        *,
        cwd: Path,
        env: Mapping[str, str],
    ) -> CommandResult: ...


def run_command(
    command: Sequence[str],
    *,
    cwd: Path,
    env: Mapping[str, str],
) -> CommandResult:
    """Run ``command`` to completion, inheriting the host environment plus ``env``."""

    parsed = tuple(item for item in command if item)
    if not parsed:
        raise ValueError("command must not be empty")

    merged_env = os.environ.copy()
    merged_env.update(env)
    started = time.perf_counter()
    completed = subprocess.run(
        list(parsed),
        cwd=cwd,
        env=merged_env,
        check=False,
        text=True,
        capture_output=True,
    )
    duration_ms = (time.perf_counter() - started) * 1000.0
    _logger.debug(
        "command_finished",
        command=list(parsed),
        cwd=str(cwd),
        returncode=completed.returncode,
        duration_ms=round(duration_ms, 3),
    )
    return CommandResult(
        command=parsed,
        cwd=Path(cwd),
        returncode=completed.returncode,
        stdout=completed.stdout,
        stderr=completed.stderr,
        duration_ms=duration_ms,
    )


__all__ = ["CommandResult", "CommandRunner", "run_command"]
