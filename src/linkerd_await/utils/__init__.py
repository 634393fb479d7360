"""Shared utilities for linkerd-await."""

from ._logging import DEFAULT_LOG_LEVEL, LogFormatType, create_logger

__all__ = ["DEFAULT_LOG_LEVEL", "LogFormatType", "create_logger"]
