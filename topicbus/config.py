"""Configuration objects for topicbus.

``PubSubOptions`` is passed to a registry at construction time.
``LoggingSettings`` drives :mod:`topicbus.logging_config` and can be loaded
from environment variables.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

# (error, topic, is_wildcard)
ErrorHandler = Callable[[Exception, str, bool], None]

_TRUTHY = ("1", "true", "True")


@dataclass
class PubSubOptions:
    """Construction-time options for a PubSub registry.

    Args:
        on_error: Called with ``(error, topic, is_wildcard)`` whenever a
            subscriber raises during publish. ``None`` selects the default
            handler, which logs the failure and continues. Pass
            ``lambda *_: None`` for silent mode.
    """

    on_error: ErrorHandler | None = None

    def __post_init__(self):
        if self.on_error is not None and not callable(self.on_error):
            raise TypeError("on_error must be callable")


@dataclass
class LoggingSettings:
    """Logging configuration."""

    level: str = "INFO"
    json_output: bool = False
    log_file: Path | None = None
    colors: bool = True

    def __post_init__(self):
        if not isinstance(logging.getLevelName(self.level.upper()), int):
            raise ValueError(f"Unknown log level: {self.level}")

    @classmethod
    def from_env(cls) -> LoggingSettings:
        """Load settings from TOPICBUS_LOG_* environment variables."""
        log_file = os.environ.get("TOPICBUS_LOG_FILE")
        return cls(
            level=os.environ.get("TOPICBUS_LOG_LEVEL", "INFO"),
            json_output=os.environ.get("TOPICBUS_LOG_JSON") in _TRUTHY,
            log_file=Path(log_file) if log_file else None,
            colors=os.environ.get("TOPICBUS_LOG_COLORS", "1") in _TRUTHY,
        )
