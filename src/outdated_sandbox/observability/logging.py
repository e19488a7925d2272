"""Structured logging setup: structlog on top of stdlib ``logging``, console or JSON lines."""

from __future__ import annotations

import logging
import sys
from collections.abc import Mapping
from typing import IO, Final

import structlog

_DEFAULT_LOGGER_NAME: Final[str] = "outdated_sandbox"
_LEVELS_BY_VERBOSITY: Final[tuple[int, ...]] = (logging.WARNING, logging.INFO, logging.DEBUG)


def level_for_verbosity(verbosity: int) -> int:
    """Map a forwarded ``-v`` count to a stdlib level (0 WARNING, 1 INFO, 2+ DEBUG)."""

    if verbosity <= 0:
        return logging.WARNING
    return _LEVELS_BY_VERBOSITY[min(verbosity, len(_LEVELS_BY_VERBOSITY) - 1)]


def setup_logging(
    *,
    level: int | str = logging.WARNING,
    json_output: bool = False,
    stream: IO[str] | None = None,
    logger_name: str = _DEFAULT_LOGGER_NAME,
) -> logging.Logger:
    """Configure structlog and the package's stdlib logger.

    Calling it again replaces handlers installed by a previous call, so the
    CLI and tests can reconfigure freely.
    """

    resolved_level = _normalize_level(level)
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    renderer: structlog.types.Processor
    if json_output:
        renderer = structlog.processors.JSONRenderer(sort_keys=True)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            renderer,
        ],
    )

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(formatter)

    logger = logging.getLogger(logger_name)
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(resolved_level)
    logger.propagate = False

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared_processors,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )
    return logger


def setup_logging_from_config(
    observability_config: Mapping[str, object] | None = None,
    *,
    verbosity: int = 0,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """Configure logging from an ``[observability]`` section.

    A non-zero ``verbosity`` lowers the configured level, never raises it.
    """

    cfg = dict(observability_config or {})
    raw_level = cfg.get("log_level", "WARNING")
    level = _normalize_level(raw_level if isinstance(raw_level, (int, str)) else "WARNING")
    if verbosity > 0:
        level = min(level, level_for_verbosity(verbosity))
    return setup_logging(
        level=level,
        json_output=cfg.get("log_format") == "json",
        stream=stream,
    )


def _normalize_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    if isinstance(resolved, int):
        return resolved
    return logging.WARNING


__all__ = ["level_for_verbosity", "setup_logging", "setup_logging_from_config"]
