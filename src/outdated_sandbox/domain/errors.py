"""Error taxonomy shared by every layer of the sandbox pipeline."""

from __future__ import annotations

from pathlib import Path


class OutdatedSandboxError(RuntimeError):
    """Base error for sandbox construction and resolution failures."""


class PathEncodingError(OutdatedSandboxError):
    """Raised when a workspace or manifest path cannot be used as a portable path."""


class PathContainmentError(PathEncodingError):
    """Raised when a path that must lie under a root directory does not."""


class SandboxIOError(OutdatedSandboxError):
    """Raised when copying, reading, or writing a sandbox file fails."""

    def __init__(self, message: str, *, path: Path | str) -> None:
        super().__init__(f"{message}: {path}")
        self.path = Path(path)


class ManifestFormatError(OutdatedSandboxError):
    """Raised when a manifest does not have the expected document structure."""


class GraphConsistencyError(OutdatedSandboxError):
    """Raised when the dependency graph references an unknown package."""


class PassOrderError(OutdatedSandboxError):
    """Raised when policy passes are requested out of their fixed order."""


class ResolverError(OutdatedSandboxError):
    """Raised when the external resolver fails to update the lock file."""


class ResolverEnvironmentError(ResolverError):
    """Raised when the resolver environment cannot be derived from the process."""


__all__ = [
    "GraphConsistencyError",
    "ManifestFormatError",
    "OutdatedSandboxError",
    "PassOrderError",
    "PathContainmentError",
    "PathEncodingError",
    "ResolverEnvironmentError",
    "ResolverError",
    "SandboxIOError",
]
