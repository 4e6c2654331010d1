"""
topicbus: in-process publish/subscribe registry.

Provides topic subscriptions, one-shot subscriptions, wildcard ("*")
fan-out and per-subscriber error isolation.
"""

from topicbus.bus import (
    WILDCARD,
    Envelope,
    PubSub,
    Subscriber,
    Unsubscriber,
    create_pubsub,
)
from topicbus.config import ErrorHandler, LoggingSettings, PubSubOptions
from topicbus.errors import InvalidArgument, InvalidCallback, PubSubError
from topicbus.logging_config import configure_logging, get_logger

__version__ = "0.1.0"

__all__ = [
    "WILDCARD",
    "Envelope",
    "ErrorHandler",
    "InvalidArgument",
    "InvalidCallback",
    "LoggingSettings",
    "PubSub",
    "PubSubError",
    "PubSubOptions",
    "Subscriber",
    "Unsubscriber",
    "configure_logging",
    "create_pubsub",
    "get_logger",
]
