"""
Structured logging setup.

Modules log through structlog with snake_case event names and keyword
context; this module only decides how those events are rendered.
"""
import logging
import sys
from typing import Optional

import structlog


def configure_logging(level: str = "INFO", json_output: bool = False) -> None:
    """
    Configure structlog processors and the minimum level.

    Args:
        level: Minimum level name (DEBUG, INFO, WARNING, ...)
        json_output: Render one JSON object per line instead of console output
    """
    log_level = getattr(logging, str(level).upper(), logging.INFO)

    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: Optional[str] = None):
    return structlog.get_logger(name)
