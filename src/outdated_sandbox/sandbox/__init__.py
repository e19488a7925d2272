"""
outdated-sandbox: sandbox construction

File: src/outdated_sandbox/sandbox/__init__.py

Purpose
- Disposable, isolated copy of a workspace's manifests and lock files.

What should be included in this file
- SandboxBuilder and SandboxProject interfaces.

Functional requirements
- All writes are confined to the sandbox directory; the user's project is never mutated.
- Relative directory layout mirrors the original workspace root.
"""

from outdated_sandbox.sandbox.builder import SandboxBuilder
from outdated_sandbox.sandbox.project import SandboxProject, SandboxStage

__all__ = ["SandboxBuilder", "SandboxProject", "SandboxStage"]
