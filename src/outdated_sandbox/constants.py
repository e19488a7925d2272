"""Stable constants shared across the sandbox, manifest, and resolver layers."""

from __future__ import annotations

from typing import Final

# Manifest and lock file names looked up next to every package root.
MANIFEST_FILE: Final[str] = "Cargo.toml"
LOCK_FILE: Final[str] = "Cargo.lock"

# Requirement written by the "widen to latest" policy.
WILDCARD_REQUIREMENT: Final[str] = "*"

# Synthetic targets injected so the resolver can load a package without its sources.
STUB_BIN_NAME: Final[str] = "test"
STUB_BIN_PATH: Final[str] = "test.rs"
STUB_LIB_PATH: Final[str] = "test_lib.rs"
STUB_BUILD_PATH: Final[str] = "test_build.rs"

# Dependency tables recognised at top level and inside each ``[target.<spec>]`` block.
DEPENDENCY_TABLE_KEYS: Final[tuple[str, ...]] = (
    "dependencies",
    "dev-dependencies",
    "build-dependencies",
)
TARGET_TABLE_KEY: Final[str] = "target"
BIN_TABLE_KEY: Final[str] = "bin"
LIB_TABLE_KEY: Final[str] = "lib"
PACKAGE_TABLE_KEY: Final[str] = "package"

DEFAULT_TEMP_PREFIX: Final[str] = "cargo-outdated"
DEFAULT_CARGO_BIN: Final[str] = "cargo"
CARGO_HOME_ENV: Final[str] = "CARGO_HOME"

COLOR_MODES: Final[tuple[str, ...]] = ("auto", "always", "never")

__all__ = [
    "BIN_TABLE_KEY",
    "CARGO_HOME_ENV",
    "COLOR_MODES",
    "DEFAULT_CARGO_BIN",
    "DEFAULT_TEMP_PREFIX",
    "DEPENDENCY_TABLE_KEYS",
    "LIB_TABLE_KEY",
    "LOCK_FILE",
    "MANIFEST_FILE",
    "PACKAGE_TABLE_KEY",
    "STUB_BIN_NAME",
    "STUB_BIN_PATH",
    "STUB_BUILD_PATH",
    "STUB_LIB_PATH",
    "TARGET_TABLE_KEY",
    "WILDCARD_REQUIREMENT",
]
