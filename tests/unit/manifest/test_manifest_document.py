"""Unit tests for manifest parsing, section access, and serialization."""

from __future__ import annotations

import tomllib
from pathlib import Path

import pytest

from outdated_sandbox.domain.errors import ManifestFormatError, SandboxIOError
from outdated_sandbox.manifest.document import ManifestDocument

MANIFEST = """
[package]
name = "app"
version = "0.1.0"

[dependencies]
serde = "1.0"

[dev-dependencies]
proptest = { version = "1.4" }

[target.'cfg(unix)'.dependencies]
libc = "0.2"

[target.'cfg(windows)'.build-dependencies]
winres = "0.1"

[lib]
name = "app"

[features]
default = ["std"]
"""


def test_iter_dependency_tables_covers_top_level_then_targets() -> None:
    document = ManifestDocument.from_text(MANIFEST)

    tables = list(document.iter_dependency_tables())

    assert [sorted(table) for table in tables] == [["serde"], ["proptest"], ["libc"], ["winres"]]


def test_section_accessors() -> None:
    document = ManifestDocument.from_text(MANIFEST)

    assert document.package == {"name": "app", "version": "0.1.0"}
    assert document.lib == {"name": "app"}
    assert document.bins is None
    assert document.dependency_table("build-dependencies") is None
    with pytest.raises(KeyError):
        document.dependency_table("features")


def test_invalid_toml_is_a_format_error() -> None:
    with pytest.raises(ManifestFormatError, match="invalid TOML"):
        ManifestDocument.from_text("[package\nname = 1", path=Path("Cargo.toml"))


def test_load_missing_file_reports_path(tmp_path: Path) -> None:
    missing = tmp_path / "nope" / "Cargo.toml"

    with pytest.raises(SandboxIOError) as excinfo:
        ManifestDocument.load(missing)

    assert excinfo.value.path == missing


def test_save_round_trips_unknown_keys(tmp_path: Path) -> None:
    path = tmp_path / "Cargo.toml"
    path.write_text(MANIFEST, encoding="utf-8")

    document = ManifestDocument.load(path)
    document.data["dependencies"]["serde"] = "*"
    document.save()

    reloaded = tomllib.loads(path.read_text(encoding="utf-8"))
    assert reloaded["dependencies"]["serde"] == "*"
    assert reloaded["features"] == {"default": ["std"]}
    assert reloaded["target"]["cfg(unix)"]["dependencies"] == {"libc": "0.2"}


def test_save_without_path_is_rejected() -> None:
    with pytest.raises(ValueError, match="no path"):
        ManifestDocument.from_text(MANIFEST).save()


def test_load_non_utf8_manifest_is_a_format_error(tmp_path: Path) -> None:
    path = tmp_path / "Cargo.toml"
    path.write_bytes(b'[package]\nname = "caf\xff"\n')

    with pytest.raises(ManifestFormatError, match="not valid UTF-8") as excinfo:
        ManifestDocument.load(path)

    assert str(path) in str(excinfo.value)
