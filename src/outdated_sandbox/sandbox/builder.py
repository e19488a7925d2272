"""Copy workspace manifests and lock files into a mirrored sandbox tree."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from outdated_sandbox.constants import LOCK_FILE, MANIFEST_FILE
from outdated_sandbox.domain.errors import SandboxIOError
from outdated_sandbox.utils.fs import portable_path_str, relative_to_root

if TYPE_CHECKING:
    from collections.abc import Sequence

_logger = structlog.get_logger(__name__)


class SandboxBuilder:
    """Mirror manifests from ``workspace_root`` under ``sandbox_root``.

    Each manifest keeps its directory relative to the workspace root, so
    relative path dependencies between workspace packages stay valid.
    """

    def __init__(
        self,
        workspace_root: Path,
        manifest_paths: Sequence[Path],
        sandbox_root: Path,
    ) -> None:
        portable_path_str(workspace_root)
        self._workspace_root = Path(workspace_root)
        self._manifest_paths = tuple(Path(path) for path in manifest_paths)
        self._sandbox_root = Path(sandbox_root)

    @property
    def sandbox_root(self) -> Path:
        return self._sandbox_root

    def build(self) -> tuple[Path, ...]:
        """Copy every manifest (and sibling lock file); return the sandbox copies in order."""

        copies: list[Path] = []
        for source in self._manifest_paths:
            relative_dir = relative_to_root(source.parent, self._workspace_root)
            dest_dir = self._sandbox_root / relative_dir
            try:
                dest_dir.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise SandboxIOError(
                    f"unable to create sandbox directory ({exc.strerror})", path=dest_dir
                ) from exc

            dest = dest_dir / MANIFEST_FILE
            _copy_file(source, dest)
            _copy_if_file(source.parent / LOCK_FILE, dest_dir / LOCK_FILE)
            copies.append(dest)
            _logger.debug(
                "sandbox_manifest_copied",
                source=str(source),
                destination=str(dest),
            )

        self._copy_virtual_root()
        _logger.info(
            "sandbox_built",
            sandbox_root=str(self._sandbox_root),
            manifests=len(copies),
        )
        return tuple(copies)

    def _copy_virtual_root(self) -> None:
        virtual_root = self._workspace_root / MANIFEST_FILE
        if virtual_root in self._manifest_paths or not virtual_root.is_file():
            return
        _copy_file(virtual_root, self._sandbox_root / MANIFEST_FILE)
        _copy_if_file(self._workspace_root / LOCK_FILE, self._sandbox_root / LOCK_FILE)
        _logger.debug("sandbox_virtual_root_copied", source=str(virtual_root))


def _copy_file(source: Path, dest: Path) -> None:
    try:
        shutil.copyfile(source, dest)
    except OSError as exc:
        raise SandboxIOError(f"unable to copy into sandbox ({exc.strerror})", path=source) from exc


def _copy_if_file(source: Path, dest: Path) -> None:
    if source.is_file():
        _copy_file(source, dest)


__all__ = ["SandboxBuilder"]
