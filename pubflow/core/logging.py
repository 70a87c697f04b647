"""
Structured logging setup (structlog on top of stdlib logging).

Usage:
    from pubflow.core.logging import get_logger, setup_logging

    setup_logging("DEBUG")    # call once at startup
    logger = get_logger(__name__)
    logger.info("Step completed", step_name="publish")
"""

from __future__ import annotations

import logging
import sys

import structlog


def setup_logging(level: str = "INFO", json_logs: bool | None = None) -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        level: Log level name, e.g. "DEBUG" or "INFO".
        json_logs: Render JSON lines instead of the console renderer.
                   Defaults to JSON whenever stderr is not a TTY.
    """
    if json_logs is None:
        json_logs = not sys.stderr.isatty()

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_logs:
        processors = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [*shared_processors, structlog.dev.ConsoleRenderer()]

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
        force=True,
    )

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None):
    """Return a structlog logger named after the calling module."""
    return structlog.get_logger(name)
