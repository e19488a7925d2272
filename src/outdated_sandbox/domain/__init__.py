"""
outdated-sandbox: domain layer

File: src/outdated_sandbox/domain/__init__.py

Purpose
- Types shared across layers: package identities, graph and workspace descriptions,
  run options, and the error taxonomy.

Functional requirements
- Domain objects are immutable and free of IO side effects.
"""

from outdated_sandbox.domain.errors import (
    GraphConsistencyError,
    ManifestFormatError,
    OutdatedSandboxError,
    PassOrderError,
    PathContainmentError,
    PathEncodingError,
    ResolverEnvironmentError,
    ResolverError,
    SandboxIOError,
)
from outdated_sandbox.domain.models import (
    DependencyGraph,
    DependencySpec,
    DependencyTable,
    InspectionOptions,
    PackageId,
    PackageRecord,
    Policy,
    TomlTable,
    WorkspaceInfo,
)

__all__ = [
    "DependencyGraph",
    "DependencySpec",
    "DependencyTable",
    "GraphConsistencyError",
    "InspectionOptions",
    "ManifestFormatError",
    "OutdatedSandboxError",
    "PackageId",
    "PackageRecord",
    "PassOrderError",
    "PathContainmentError",
    "PathEncodingError",
    "Policy",
    "ResolverEnvironmentError",
    "ResolverError",
    "SandboxIOError",
    "TomlTable",
    "WorkspaceInfo",
]
