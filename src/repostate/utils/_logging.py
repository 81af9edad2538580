"""Logging utilities for repostate.

This module provides standalone structlog logger factories that write
JSON-formatted or text-formatted logs to a file or to stderr. Each logger is
self-contained and does not modify global structlog configuration, so
importing repostate into a test suite never alters the host's logging.
"""

import functools
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, cast

import structlog

from repostate.config import LogFormat, LoggingConfig, LogLevel, load_logging_config

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger


def _log_level_from_config(level: LogLevel) -> int:
    """Convert a configured log level to a logging level integer.

    Args:
        level: Configured level.

    Returns:
        The logging level as an integer.
    """
    log_levels = logging.getLevelNamesMapping()
    return log_levels.get(level.value.upper(), logging.WARNING)


def create_logger(config: LoggingConfig | None = None) -> "FilteringBoundLogger":  # noqa: UP037
    """Create a standalone structlog logger.

    Args:
        config: Logging configuration. Read from the environment when None.

    Returns:
        A configured FilteringBoundLogger instance.
    """
    if config is None:
        config = load_logging_config()

    if config.file:
        log_path = Path(config.file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger_factory = structlog.WriteLoggerFactory(file=log_path.open("a"))
    else:
        logger_factory = structlog.PrintLoggerFactory(file=sys.stderr)

    processors: list[structlog.typing.Processor] = [
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if config.format == LogFormat.JSON:
        processors.append(structlog.processors.dict_tracebacks)
        processors.append(structlog.processors.JSONRenderer())
    else:
        # Text format: "timestamp [level] event key=value ..."
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    wrapper_class = structlog.make_filtering_bound_logger(
        _log_level_from_config(config.level)
    )

    return cast(
        "FilteringBoundLogger",
        structlog.wrap_logger(
            logger_factory(),
            processors=processors,
            wrapper_class=wrapper_class,
            context_class=dict,
        ),
    )


@functools.cache
def get_logger() -> "FilteringBoundLogger":  # noqa: UP037
    """Return the shared logger built from environment configuration.

    The logger is created on first use. Call get_logger.cache_clear() after
    changing REPOSTATE_* variables to pick up the new configuration.

    Returns:
        The shared FilteringBoundLogger instance.
    """
    return create_logger()
