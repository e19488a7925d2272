"""Utility exports for filesystem helpers."""

from outdated_sandbox.utils.fs import (
    atomic_write,
    is_within,
    portable_path_str,
    relative_to_root,
    temp_directory,
)

__all__ = [
    "atomic_write",
    "is_within",
    "portable_path_str",
    "relative_to_root",
    "temp_directory",
]
