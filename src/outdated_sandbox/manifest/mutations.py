"""
Manifest mutations applied inside the sandbox.

Every per-table mutation is a callable over one dependency table and is applied
through :func:`apply_to_dependencies`, which covers the normal, dev, and build
tables at top level and under every ``[target.<spec>]`` block.

- :class:`PathRewriter` absolutizes relative ``path`` dependencies that no longer
  resolve to a manifest inside the sandbox.
- :func:`preserve_versions` / :func:`widen_versions` implement the two version
  policies.
- :func:`inject_stub_targets` replaces the ``bin``/``lib`` targets with synthetic
  ones so the package loads without its real sources.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from outdated_sandbox.constants import (
    BIN_TABLE_KEY,
    MANIFEST_FILE,
    STUB_BIN_NAME,
    STUB_BIN_PATH,
    STUB_BUILD_PATH,
    STUB_LIB_PATH,
    WILDCARD_REQUIREMENT,
)
from outdated_sandbox.domain.errors import ManifestFormatError, SandboxIOError
from outdated_sandbox.domain.models import DependencyTable, Policy
from outdated_sandbox.utils.fs import is_within, relative_to_root

if TYPE_CHECKING:
    from outdated_sandbox.manifest.document import ManifestDocument

DependencyTransform = Callable[[DependencyTable], None]

_logger = structlog.get_logger(__name__)


def apply_to_dependencies(manifest: ManifestDocument, transform: DependencyTransform) -> None:
    """Apply ``transform`` to every dependency table declared in ``manifest``."""

    for table in manifest.iter_dependency_tables():
        transform(table)


def inject_stub_targets(manifest: ManifestDocument) -> None:
    """Overwrite binary targets with one stub and point any library target at a stub file.

    ``package.default-run`` is pointed at the stub binary, and a package that
    ``links`` a native library without naming its build script gets a stub
    ``build`` path, since the auto-detected ``build.rs`` is not mirrored.
    The stub source files are not created here.
    """

    manifest.data[BIN_TABLE_KEY] = [{"name": STUB_BIN_NAME, "path": STUB_BIN_PATH}]
    lib = manifest.lib
    if lib is not None:
        lib["path"] = STUB_LIB_PATH
    package = manifest.package
    if package is None:
        return
    if "default-run" in package:
        package["default-run"] = STUB_BIN_NAME
    if "links" in package and package.get("build", True) is True:
        package["build"] = STUB_BUILD_PATH


class PathRewriter:
    """Absolutize ``path`` dependencies that escape the sandbox after relocation.

    ``sandbox_manifest`` is the sandbox copy being rewritten. A relative path is
    joined with that copy's directory; if no manifest exists there inside the
    sandbox, the same relative path is resolved against ``original_root`` and
    canonicalized.
    """

    def __init__(self, original_root: Path, sandbox_root: Path, sandbox_manifest: Path) -> None:
        self._original_root = Path(original_root)
        self._sandbox_root = Path(sandbox_root)
        self._manifest_dir = relative_to_root(sandbox_manifest, sandbox_root).parent
        self._sandbox_manifest = Path(sandbox_manifest)

    def __call__(self, dependencies: DependencyTable) -> None:
        for name, spec in list(dependencies.items()):
            if not isinstance(spec, dict):
                continue
            raw_path = spec.get("path")
            if not isinstance(raw_path, str):
                continue
            declared = Path(raw_path)
            if declared.is_absolute():
                continue

            relative = self._manifest_dir / declared
            if is_within(self._sandbox_root / relative / MANIFEST_FILE, self._sandbox_root):
                continue

            original = self._original_root / relative
            try:
                absolute = original.resolve(strict=True)
            except OSError as exc:
                raise SandboxIOError(
                    f"path dependency {name!r} of {self._sandbox_manifest} does not exist",
                    path=original,
                ) from exc

            replaced = dict(spec)
            replaced["path"] = str(absolute)
            dependencies[name] = replaced
            _logger.debug(
                "path_dependency_absolutized",
                dependency=name,
                manifest=str(self._sandbox_manifest),
                path=str(absolute),
            )


def preserve_versions(dependencies: DependencyTable) -> None:
    """Keep declared requirements as they are."""


def widen_versions(dependencies: DependencyTable) -> None:
    """Replace every version requirement with the wildcard.

    Bare version strings are replaced whole; tables only have their ``version``
    key replaced, so ``path`` and any other keys survive.
    """

    for name, spec in list(dependencies.items()):
        if isinstance(spec, str):
            dependencies[name] = WILDCARD_REQUIREMENT
        elif isinstance(spec, dict):
            if "version" in spec:
                replaced = dict(spec)
                replaced["version"] = WILDCARD_REQUIREMENT
                dependencies[name] = replaced
        else:
            raise ManifestFormatError(
                f"dependency spec for {name!r} is neither a string nor a table"
            )


def version_transform(policy: Policy) -> DependencyTransform:
    if policy is Policy.LATEST:
        return widen_versions
    return preserve_versions


__all__ = [
    "DependencyTransform",
    "PathRewriter",
    "apply_to_dependencies",
    "inject_stub_targets",
    "preserve_versions",
    "version_transform",
    "widen_versions",
]
