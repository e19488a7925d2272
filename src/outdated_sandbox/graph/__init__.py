"""Dependency graph discovery: metadata loading and workspace manifest collection."""

from outdated_sandbox.graph.metadata import (
    load_cargo_metadata,
    parse_cargo_metadata,
)
from outdated_sandbox.graph.walker import GraphWalker, collect_manifest_paths

__all__ = [
    "GraphWalker",
    "collect_manifest_paths",
    "load_cargo_metadata",
    "parse_cargo_metadata",
]
