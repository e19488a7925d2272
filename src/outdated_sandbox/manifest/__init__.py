"""
outdated-sandbox: manifest layer

File: src/outdated_sandbox/manifest/__init__.py

Purpose
- Parse and serialize package manifests and apply the sandbox mutations to them.

Functional requirements
- Mutations cover every place a dependency table can appear.
- Fields other than dependency tables and targets are left untouched.
"""

from outdated_sandbox.manifest.document import ManifestDocument
from outdated_sandbox.manifest.mutations import (
    DependencyTransform,
    PathRewriter,
    apply_to_dependencies,
    inject_stub_targets,
    preserve_versions,
    version_transform,
    widen_versions,
)

__all__ = [
    "DependencyTransform",
    "ManifestDocument",
    "PathRewriter",
    "apply_to_dependencies",
    "inject_stub_targets",
    "preserve_versions",
    "version_transform",
    "widen_versions",
]
