"""Command-line entry point for outdated-sandbox."""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Any, Final

import structlog

from outdated_sandbox.config import ConfigLoadError, ConfigValidationError, load_config
from outdated_sandbox.constants import COLOR_MODES, MANIFEST_FILE
from outdated_sandbox.domain.errors import OutdatedSandboxError
from outdated_sandbox.domain.models import InspectionOptions
from outdated_sandbox.graph.metadata import load_cargo_metadata
from outdated_sandbox.inspection import InspectionResult, run_inspection
from outdated_sandbox.observability.logging import setup_logging_from_config
from outdated_sandbox.resolver.context import ResolverEnvironment

EXIT_OK: Final[int] = 0
EXIT_CORE_ERROR: Final[int] = 1
EXIT_CONFIG_ERROR: Final[int] = 2

_logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class CLIError(RuntimeError):
    """Typed CLI failure with an explicit process exit code."""

    message: str
    exit_code: int = EXIT_CORE_ERROR

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser. Unset flags stay ``None`` so config values win."""

    parser = argparse.ArgumentParser(
        prog="outdated-sandbox",
        description=(
            "Resolve a Cargo workspace twice inside a throwaway copy:\n"
            "once keeping declared requirements, once widening them to the latest.\n\n"
            "Examples:\n"
            "  outdated-sandbox\n"
            "  outdated-sandbox --manifest-path crates/app/Cargo.toml -vv\n"
            "  outdated-sandbox --offline --json\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--manifest-path",
        default=MANIFEST_FILE,
        help=f"Path to the manifest to inspect (default: ./{MANIFEST_FILE}).",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="count",
        default=None,
        help="Forward verbosity to the resolver; repeat for more.",
    )
    parser.add_argument(
        "--color",
        choices=COLOR_MODES,
        default=None,
        help="Coloring forwarded to the resolver.",
    )
    parser.add_argument("--frozen", action="store_true", default=None, help="Forward --frozen.")
    parser.add_argument("--locked", action="store_true", default=None, help="Forward --locked.")
    parser.add_argument("--offline", action="store_true", default=None, help="Forward --offline.")
    parser.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to a TOML config file (default: ./outdated-sandbox.toml if present).",
    )
    parser.add_argument("--json", action="store_true", default=False, help="Emit JSON output")
    return parser


# ---------------------------------------------------------------------------
# Entrypoints
# ---------------------------------------------------------------------------


def run_cli(
    argv: Sequence[str] | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    out: IO[str] | None = None,
) -> int:
    """Parse argv, run one inspection, and return the process exit code."""

    namespace = build_parser().parse_args(list(argv) if argv is not None else None)
    stream = out if out is not None else sys.stdout
    try:
        result = _run(namespace, environ=environ)
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code

    if namespace.json:
        stream.write(json.dumps(result.to_dict(), sort_keys=True, indent=2) + "\n")
    else:
        stream.write(render_text(result))
    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    """Compatibility wrapper for main-module wiring."""

    return run_cli(argv)


def cli_entrypoint() -> None:
    """Console-script entrypoint."""

    raise SystemExit(run_cli())


def render_text(result: InspectionResult) -> str:
    lines: list[str] = []
    for policy_result in result.passes:
        lines.append(f"[{policy_result.policy.value}]")
        for name, versions in sorted(policy_result.lock_state.versions().items()):
            lines.append(f"  {name} {', '.join(versions)}")
    return "\n".join(lines) + "\n"


# ---------------------------------------------------------------------------
# Internals
# ---------------------------------------------------------------------------


def _run(
    args: argparse.Namespace,
    *,
    environ: Mapping[str, str] | None,
) -> InspectionResult:
    config = _load_effective_config(args, environ)
    setup_logging_from_config(
        config["observability"], verbosity=int(config["resolver"]["verbosity"])
    )

    try:
        options = InspectionOptions.from_config(config)
    except ValueError as exc:
        raise CLIError(str(exc), exit_code=EXIT_CONFIG_ERROR) from exc

    manifest_path = Path(args.manifest_path).expanduser().resolve()
    environment = ResolverEnvironment.from_process(environ)
    try:
        workspace, graph = load_cargo_metadata(
            manifest_path, cargo_bin=options.cargo_bin, env=environment.environ
        )
        return run_inspection(
            workspace,
            graph,
            manifest_path,
            options=options,
            environment=environment,
        )
    except OutdatedSandboxError as exc:
        _logger.error("inspection_failed", error=str(exc), error_type=type(exc).__name__)
        raise CLIError(str(exc), exit_code=EXIT_CORE_ERROR) from exc


def _load_effective_config(
    args: argparse.Namespace, environ: Mapping[str, str] | None
) -> dict[str, Any]:
    overrides: dict[str, object] = {
        "resolver.verbosity": args.verbose,
        "resolver.color": args.color,
        "resolver.frozen": args.frozen,
        "resolver.locked": args.locked,
        "resolver.offline": args.offline,
    }
    try:
        return load_config(args.config_path, cli_overrides=overrides, environ=environ)
    except (ConfigLoadError, ConfigValidationError) as exc:
        raise CLIError(str(exc), exit_code=EXIT_CONFIG_ERROR) from exc


__all__ = [
    "CLIError",
    "EXIT_CONFIG_ERROR",
    "EXIT_CORE_ERROR",
    "EXIT_OK",
    "build_parser",
    "cli_entrypoint",
    "main",
    "render_text",
    "run_cli",
]
