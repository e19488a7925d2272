"""
outdated-sandbox: package root

File: src/outdated_sandbox/__init__.py

Purpose
- Build a disposable copy of a Cargo workspace and resolve it under two version
  policies ("preserve declared requirements" and "widen to latest") without
  touching the real project.

Functional requirements
- Must not have side effects at import time (no config loading, no logging init).
"""

from outdated_sandbox.domain.errors import OutdatedSandboxError
from outdated_sandbox.domain.models import InspectionOptions, Policy
from outdated_sandbox.inspection import InspectionResult, PolicyPassResult, run_inspection

__version__ = "0.1.0"

__all__ = [
    "InspectionOptions",
    "InspectionResult",
    "OutdatedSandboxError",
    "Policy",
    "PolicyPassResult",
    "__version__",
    "run_inspection",
]
