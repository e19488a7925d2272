"""Observability helpers: structured logging configuration."""

from outdated_sandbox.observability.logging import (
    level_for_verbosity,
    setup_logging,
    setup_logging_from_config,
)

__all__ = ["level_for_verbosity", "setup_logging", "setup_logging_from_config"]
