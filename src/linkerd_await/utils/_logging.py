"""Logging utilities for linkerd-await.

This module provides a standalone structlog logger factory that writes
JSON-formatted or text-formatted diagnostics to stderr. The logger is
self-contained and does not modify global structlog configuration, so the
wrapped program's own logging is never affected.
"""

import logging
import sys
from os import getenv
from typing import TYPE_CHECKING, Literal, TextIO, cast

import structlog

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

LogFormatType = Literal["json", "text"]

DEFAULT_LOG_LEVEL: str = "warning"


def _log_level_from_string(level: str | None) -> int:
    """Convert a log level string to a logging level integer.

    The level is determined by (in order of precedence):
    1. LINKERD_AWAIT_DEBUG environment variable (if set, enables DEBUG level)
    2. The `level` parameter (if provided)
    3. LINKERD_AWAIT_LOG_LEVEL environment variable
    4. Default: WARNING

    Args:
        level: Log level string (debug, info, warning, error), or None.

    Returns:
        The logging level as an integer.
    """
    if getenv("LINKERD_AWAIT_DEBUG", None):
        return logging.DEBUG

    if level is None:
        level = getenv("LINKERD_AWAIT_LOG_LEVEL", DEFAULT_LOG_LEVEL)

    log_levels = logging.getLevelNamesMapping()
    return log_levels.get(level.upper(), logging.WARNING)


def create_logger(
    *,
    level: str | None = None,
    log_format: LogFormatType = "text",
    file: TextIO | None = None,
) -> "FilteringBoundLogger":  # noqa: UP037
    """Create a standalone structlog logger.

    Args:
        level: Log level threshold (debug, info, warning, error). Falls back
            to LINKERD_AWAIT_LOG_LEVEL when not given.
        log_format: Output format, either "json" or "text".
        file: Stream to write to. Defaults to stderr.

    Returns:
        A configured FilteringBoundLogger instance.
    """
    effective_level = _log_level_from_string(level)
    logger_factory = structlog.PrintLoggerFactory(
        file=file if file is not None else sys.stderr
    )

    processors: list[structlog.typing.Processor] = [
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if log_format == "json":
        # Add dict_tracebacks for structured exception logging in JSON
        processors.append(structlog.processors.dict_tracebacks)
        processors.append(structlog.processors.JSONRenderer())
    else:
        # Text format: "timestamp [level] event key=value ..."
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    wrapper_class = structlog.make_filtering_bound_logger(effective_level)

    # Use wrap_logger for standalone logger creation (doesn't affect global config)
    return cast(
        "FilteringBoundLogger",
        structlog.wrap_logger(
            logger_factory(),
            processors=processors,
            wrapper_class=wrapper_class,
            context_class=dict,
        ),
    )
