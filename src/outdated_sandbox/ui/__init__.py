"""User-facing entry points."""

from outdated_sandbox.ui.cli import CLIError, build_parser, cli_entrypoint, main, run_cli

__all__ = ["CLIError", "build_parser", "cli_entrypoint", "main", "run_cli"]
