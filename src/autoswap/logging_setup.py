"""Structured logging configuration for autoswap."""

import atexit
import logging
import sys
from typing import Any, List, Optional, TextIO

import structlog

from autoswap.config import LoggingConfig

_log_file: Optional[TextIO] = None


def close_log_file() -> None:
    """Close the file opened by the last ``configure_logging`` call, if any."""
    global _log_file
    if _log_file is not None:
        _log_file.close()
        _log_file = None


atexit.register(close_log_file)


def configure_logging(config: LoggingConfig) -> None:
    """Configure structlog from a logging configuration object.

    Presentation settings (colours, JSON, destination) come only from
    ``config``; nothing else in the package touches them.

    Args:
        config: Logging configuration
    """
    global _log_file
    close_log_file()
    level = logging.getLevelName(config.level)

    processors: List[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
        structlog.processors.StackInfoRenderer(),
    ]

    stream: TextIO = sys.stdout
    if config.file is not None:
        config.file.parent.mkdir(parents=True, exist_ok=True)
        _log_file = stream = open(config.file, "a", encoding="utf-8")

    if config.json_output:
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        colors = config.colors and config.file is None and stream.isatty()
        processors.append(structlog.dev.ConsoleRenderer(colors=colors))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=stream),
    )
