"""Structured logging for topicbus.

The registry logs through structlog key/value events (``topic_subscribed``,
``subscriber_error``, ...). Applications embedding topicbus either configure
structlog themselves or call :func:`configure_logging` once at startup:

    from topicbus import LoggingSettings, configure_logging

    configure_logging()  # TOPICBUS_LOG_* environment variables
    configure_logging(LoggingSettings(level="DEBUG", json_output=True))
"""

from __future__ import annotations

import dataclasses
import logging
import sys
from typing import Any

import structlog

from topicbus.config import LoggingSettings


def _renderer(settings: LoggingSettings) -> structlog.types.Processor:
    if settings.json_output:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=settings.colors)


def _handler(settings: LoggingSettings) -> logging.Handler:
    if settings.log_file is None:
        return logging.StreamHandler(sys.stderr)
    settings.log_file.parent.mkdir(parents=True, exist_ok=True)
    return logging.FileHandler(settings.log_file, encoding="utf-8")


def configure_logging(
    settings: LoggingSettings | None = None, **overrides: Any
) -> LoggingSettings:
    """Route structlog events through stdlib logging.

    Args:
        settings: Logging settings. Loaded from the environment when omitted.
        **overrides: Individual LoggingSettings fields to replace

    Returns:
        The settings that were applied
    """
    if settings is None:
        settings = LoggingSettings.from_env()
    if overrides:
        settings = dataclasses.replace(settings, **overrides)
    if settings.json_output:
        settings = dataclasses.replace(settings, colors=False)

    logging.basicConfig(
        format="%(message)s",
        handlers=[_handler(settings)],
        level=settings.level.upper(),
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _renderer(settings),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    return settings


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Structured logger for ``name`` (typically ``__name__``)."""
    return structlog.get_logger(name)
