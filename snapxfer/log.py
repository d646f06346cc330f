# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Logging helpers.

Loggers are handed explicitly to each operation; these helpers only build
them and configure structlog once at process start.
"""

import logging
from typing import Any

import structlog


def get_logger(**context: Any) -> Any:
    """Return a structlog logger, bound to context when given."""
    logger = structlog.get_logger("snapxfer")
    if context:
        return logger.bind(**context)
    return logger


def configure_logging(level: str = "INFO", json: bool = False) -> None:
    """
    Configure structlog for a plugin process.

    Args:
        level: Minimum level name (DEBUG, INFO, WARNING, ERROR)
        json: Render JSON lines instead of the console format
    """
    renderer: Any = (
        structlog.processors.JSONRenderer()
        if json
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
        cache_logger_on_first_use=False,
    )
