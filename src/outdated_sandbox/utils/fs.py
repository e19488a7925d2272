"""
outdated-sandbox: filesystem utilities

File: src/outdated_sandbox/utils/fs.py

Purpose
- Provide minimal filesystem helpers for atomic writes, containment checks,
  portable path strings, and scoped temporary directories.

Functional requirements
- Atomic writes use temp files in the destination directory and replace in a single step.
- Temporary directories are removed on every exit path unless explicitly kept.
"""

from __future__ import annotations

import contextlib
import os
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from outdated_sandbox.domain.errors import PathContainmentError, PathEncodingError

if TYPE_CHECKING:
    from collections.abc import Iterator

PathLike = str | os.PathLike[str]

_logger = structlog.get_logger(__name__)

__all__ = [
    "atomic_write",
    "is_within",
    "portable_path_str",
    "relative_to_root",
    "temp_directory",
]


def atomic_write(path: PathLike, data: bytes | str, *, encoding: str = "utf-8") -> None:
    """
    Atomically write ``data`` to ``path``.

    The write strategy is:
    1. create temp file in the same directory,
    2. write + flush + fsync file data,
    3. replace target via ``os.replace``.
    """

    target = Path(path)
    target_parent = target.parent.resolve(strict=True)
    if not target_parent.is_dir():
        raise NotADirectoryError(f"{target_parent!s} is not a directory")

    fd, temp_name = tempfile.mkstemp(
        prefix=f".{target.name}.",
        suffix=".tmp",
        dir=str(target_parent),
    )
    temp_path = Path(temp_name)

    try:
        if isinstance(data, bytes):
            with os.fdopen(fd, "wb") as file_handle:
                file_handle.write(data)
                file_handle.flush()
                os.fsync(file_handle.fileno())
        else:
            with os.fdopen(fd, "w", encoding=encoding) as file_handle:
                file_handle.write(data)
                file_handle.flush()
                os.fsync(file_handle.fileno())

        os.replace(temp_path, target)
    except Exception:
        with contextlib.suppress(OSError):
            temp_path.unlink(missing_ok=True)
        raise


def is_within(child: PathLike, parent: PathLike) -> bool:
    """Return ``True`` if resolved ``child`` exists and is within resolved ``parent``."""

    try:
        resolved_parent = Path(parent).resolve(strict=True)
    except FileNotFoundError:
        return False
    if not resolved_parent.is_dir():
        return False

    try:
        resolved_child = Path(child).resolve(strict=True)
    except (FileNotFoundError, NotADirectoryError):
        return False

    return _is_relative_to(resolved_child, resolved_parent)


def portable_path_str(path: PathLike) -> str:
    """Return ``path`` as text, rejecting paths that are not valid UTF-8."""

    text = os.fspath(path)
    try:
        text.encode("utf-8")
    except UnicodeEncodeError as exc:
        lossy = text.encode("utf-8", errors="surrogateescape").decode("utf-8", errors="replace")
        raise PathEncodingError(f"Invalid character found in path {lossy}") from exc
    return text


def relative_to_root(path: PathLike, root: PathLike) -> Path:
    """Express ``path`` relative to ``root`` after checking both are portable."""

    portable_path_str(root)
    portable_path_str(path)
    try:
        return Path(path).relative_to(Path(root))
    except ValueError:
        raise PathContainmentError(f"path {path} is not located under {root}") from None


@contextmanager
def temp_directory(prefix: str = "cargo-outdated", *, keep: bool = False) -> Iterator[Path]:
    """Yield a fresh temporary directory and remove it on exit unless ``keep`` is set.

    If the body raises, a failed removal is logged and the body's error propagates.
    """

    root = Path(tempfile.mkdtemp(prefix=f"{prefix}."))
    try:
        yield root
    except BaseException:
        if not keep:
            try:
                shutil.rmtree(root)
            except OSError as cleanup_exc:
                _logger.warning(
                    "temp_directory_cleanup_failed", path=str(root), error=str(cleanup_exc)
                )
        raise
    if not keep:
        shutil.rmtree(root)


def _is_relative_to(child: Path, parent: Path) -> bool:
    try:
        child.relative_to(parent)
    except ValueError:
        return False
    return True
