"""
Error types raised by the topic registry.

Only invalid input is raised to callers. Subscriber failures during publish
are routed to the registry's error handler instead.
"""

from __future__ import annotations

from typing import Any


class PubSubError(Exception):
    """Base error for registry operations."""


class InvalidArgument(PubSubError, ValueError):
    """Topic name is empty or not a string."""

    def __init__(self, topic: Any, message: str | None = None):
        self.topic = topic
        self.message = message or f"Topic must be a non-empty string, got {topic!r}"
        super().__init__(self.message)


class InvalidCallback(PubSubError, TypeError):
    """Subscriber cannot be registered (not callable or not hashable)."""

    def __init__(self, callback: Any, message: str | None = None):
        self.callback = callback
        self.message = message or (
            f"Subscriber must be a hashable callable, got {type(callback).__name__}"
        )
        super().__init__(self.message)
