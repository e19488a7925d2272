"""Unit tests for filesystem helpers."""

from __future__ import annotations

import shutil
import tempfile
from pathlib import Path

import pytest
from structlog.testing import capture_logs

from outdated_sandbox.domain.errors import PathContainmentError, PathEncodingError
from outdated_sandbox.utils.fs import (
    atomic_write,
    is_within,
    portable_path_str,
    relative_to_root,
    temp_directory,
)


def test_temp_directory_is_removed_after_an_exception(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(tempfile, "tempdir", str(tmp_path))

    with pytest.raises(RuntimeError, match="boom"), temp_directory("scratch") as root:
        (root / "nested").mkdir()
        (root / "nested" / "Cargo.toml").write_text("[package]\n", encoding="utf-8")
        raise RuntimeError("boom")

    assert root.name.startswith("scratch.")
    assert not root.exists()


def test_failed_teardown_does_not_mask_the_body_error(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(tempfile, "tempdir", str(tmp_path))

    def _refuse(path: object, *args: object, **kwargs: object) -> None:
        raise PermissionError(13, "Permission denied", str(path))

    monkeypatch.setattr(shutil, "rmtree", _refuse)

    with capture_logs() as logs:
        with pytest.raises(RuntimeError, match="resolution failed"), temp_directory() as root:
            raise RuntimeError("resolution failed")

    assert [entry["event"] for entry in logs] == ["temp_directory_cleanup_failed"]
    assert logs[0]["path"] == str(root)
    assert "Permission denied" in logs[0]["error"]


def test_teardown_failure_after_a_clean_exit_propagates(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(tempfile, "tempdir", str(tmp_path))
    def _busy(*_args: object, **_kwargs: object) -> None:
        raise OSError("busy")

    monkeypatch.setattr(shutil, "rmtree", _busy)

    with pytest.raises(OSError, match="busy"), temp_directory():
        pass


def test_temp_directory_can_be_kept(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(tempfile, "tempdir", str(tmp_path))

    with temp_directory(keep=True) as root:
        pass

    assert root.is_dir()
    assert root.name.startswith("cargo-outdated.")


def test_is_within_follows_dot_dot_segments(tmp_path: Path) -> None:
    (tmp_path / "root" / "a").mkdir(parents=True)
    (tmp_path / "root" / "b").mkdir()
    (tmp_path / "outside").mkdir()

    assert is_within(tmp_path / "root" / "a" / ".." / "b", tmp_path / "root")
    assert not is_within(tmp_path / "root" / "a" / ".." / ".." / "outside", tmp_path / "root")
    assert not is_within(tmp_path / "root" / "missing", tmp_path / "root")


def test_relative_to_root_rejects_foreign_paths(tmp_path: Path) -> None:
    assert relative_to_root(tmp_path / "ws" / "a" / "Cargo.toml", tmp_path / "ws") == Path(
        "a/Cargo.toml"
    )
    with pytest.raises(PathContainmentError, match="not located under"):
        relative_to_root(tmp_path / "Cargo.toml", tmp_path / "ws")


def test_portable_path_str_rejects_lone_surrogates() -> None:
    assert portable_path_str(Path("/ws/crates/app")) == "/ws/crates/app"
    with pytest.raises(PathEncodingError, match="Invalid character found in path /ws/�"):
        portable_path_str("/ws/\udcff")


def test_atomic_write_replaces_content(tmp_path: Path) -> None:
    target = tmp_path / "Cargo.toml"
    target.write_text("old", encoding="utf-8")

    atomic_write(target, "new")

    assert target.read_text(encoding="utf-8") == "new"
    assert sorted(path.name for path in tmp_path.iterdir()) == ["Cargo.toml"]
