"""
Topic registry for in-process publish/subscribe.

Provides:
- Topic subscriptions with idempotent unsubscribe functions
- One-shot subscriptions
- Wildcard ("*") subscriptions receiving an Envelope for every publish
- Per-subscriber error isolation with a configurable error handler
- Automatic removal of topics with no subscribers left

Example:
    from topicbus import create_pubsub

    bus = create_pubsub()
    unsub = bus.subscribe("user.login", lambda data: print(data))
    bus.publish("user.login", {"user_id": 123})
    unsub()
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from topicbus.config import ErrorHandler, PubSubOptions
from topicbus.errors import InvalidArgument, InvalidCallback
from topicbus.logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

WILDCARD = "*"

Subscriber = Callable[[Any], Any]
Unsubscriber = Callable[[], bool]


# =============================================================================
# Envelope
# =============================================================================


@dataclass(frozen=True)
class Envelope(Generic[T]):
    """
    Payload wrapper delivered to wildcard subscribers.

    Attributes:
        event: Topic the payload was published to
        data: The published payload, untouched
    """

    event: str
    data: T

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {"event": self.event, "data": self.data}


def _callback_name(callback: Any) -> str:
    return getattr(callback, "__qualname__", None) or type(callback).__name__


def _default_error_handler(error: Exception, topic: str, is_wildcard: bool) -> None:
    logger.error(
        "subscriber_error",
        topic=topic,
        wildcard=is_wildcard,
        error_type=type(error).__name__,
        exc_info=error,
    )


# =============================================================================
# Registry
# =============================================================================


class PubSub:
    """
    In-process publish/subscribe registry.

    Subscribers are called synchronously, in subscription order, in the
    publisher's thread. A failing subscriber never stops delivery to the
    others; its exception is handed to the error handler.

    Instances share no state. The registry is not thread-safe; callers
    sharing one across threads must synchronise access themselves.
    """

    def __init__(
        self,
        options: PubSubOptions | None = None,
        *,
        on_error: ErrorHandler | None = None,
    ):
        """
        Initialize registry.

        Args:
            options: Construction options
            on_error: Error handler, overrides ``options.on_error``
        """
        if options is None:
            options = PubSubOptions()
        # dict values are unused; keys act as an insertion-ordered set
        self._subs: dict[str, dict[Subscriber, None]] = {}
        if on_error is None:
            on_error = options.on_error
        self._on_error: ErrorHandler = on_error if on_error is not None else _default_error_handler

    # -------------------------------------------------------------------------
    # Subscription
    # -------------------------------------------------------------------------

    def _lookup(self, topic: Any) -> dict[Subscriber, None] | None:
        """Subscribers of a topic, or None. Unhashable topics have none."""
        try:
            return self._subs.get(topic)
        except TypeError:
            return None

    @staticmethod
    def _validate(topic: Any, callback: Any) -> None:
        if not isinstance(topic, str) or not topic:
            raise InvalidArgument(topic)
        if not callable(callback):
            raise InvalidCallback(callback)
        try:
            hash(callback)
        except TypeError:
            raise InvalidCallback(
                callback, f"Subscriber must be hashable: {_callback_name(callback)}"
            ) from None

    def subscribe(self, topic: str, callback: Subscriber) -> Unsubscriber:
        """
        Subscribe a callback to a topic.

        Use the topic ``"*"`` to receive every publish wrapped in an
        :class:`Envelope`. Subscribing the same callback twice is a no-op.

        Args:
            topic: Topic name, or "*" for all topics
            callback: Called with the published payload

        Returns:
            Unsubscribe function. Safe to call more than once.

        Raises:
            InvalidArgument: topic is empty or not a string
            InvalidCallback: callback is not a hashable callable
        """
        self._validate(topic, callback)

        subscribers = self._subs.setdefault(topic, {})
        subscribers[callback] = None

        logger.debug(
            "topic_subscribed",
            topic=topic,
            handler=_callback_name(callback),
            subscribers=len(subscribers),
        )

        def unsubscribe() -> bool:
            return self.unsubscribe(topic, callback)

        return unsubscribe

    def subscribe_once(self, topic: str, callback: Subscriber) -> Unsubscriber:
        """
        Subscribe to the first publish of a topic only.

        The subscription is removed after the first delivery, even when the
        callback raises. The exception still reaches the error handler.

        Returns:
            Unsubscribe function cancelling the subscription before it fires
        """
        self._validate(topic, callback)
        fired = False

        def once_wrapper(data: Any) -> None:
            nonlocal fired
            if fired:
                return
            fired = True
            try:
                callback(data)
            finally:
                self.unsubscribe(topic, once_wrapper)

        once_wrapper.__qualname__ = f"once({_callback_name(callback)})"
        return self.subscribe(topic, once_wrapper)

    def on(self, topic: str) -> Callable[[Subscriber], Subscriber]:
        """
        Decorator form of :meth:`subscribe`.

        Usage:
            @bus.on("model.loaded")
            def on_loaded(data):
                ...
        """

        def decorator(fn: Subscriber) -> Subscriber:
            self.subscribe(topic, fn)
            return fn

        return decorator

    def unsubscribe(self, topic: str, callback: Subscriber | None = None) -> bool:
        """
        Remove one callback from a topic, or the whole topic.

        Args:
            topic: Topic to unsubscribe from
            callback: Callback to remove. If omitted, all subscribers of the
                topic are removed. A non-callable value removes nothing.

        Returns:
            True if something was removed, False otherwise
        """
        subscribers = self._lookup(topic)
        if subscribers is None:
            return False

        if callback is None:
            del self._subs[topic]
            logger.debug("topic_cleared", topic=topic)
            return True

        if not callable(callback):
            return False

        try:
            del subscribers[callback]
        except (KeyError, TypeError):
            return False

        if not subscribers:
            del self._subs[topic]
        logger.debug(
            "topic_unsubscribed",
            topic=topic,
            handler=_callback_name(callback),
            subscribers=len(subscribers),
        )
        return True

    def unsubscribe_all(self, topic: str | None = None) -> bool:
        """
        Remove all subscribers of one topic, or of every topic.

        Args:
            topic: Topic to clear, or None for all topics

        Returns:
            False if the given topic did not exist, True otherwise
        """
        if topic is not None:
            if self._lookup(topic) is None:
                return False
            del self._subs[topic]
            logger.debug("topic_cleared", topic=topic)
            return True

        self._subs.clear()
        logger.debug("registry_cleared")
        return True

    def is_subscribed(
        self,
        topic: str,
        callback: Subscriber,
        consider_wildcard: bool = True,
    ) -> bool:
        """
        Check whether a callback is subscribed to a topic.

        A callback subscribed to "*" counts as subscribed to every topic
        unless ``consider_wildcard`` is False.
        """
        try:
            if callback in self._subs.get(topic, ()):
                return True
            return consider_wildcard and callback in self._subs.get(WILDCARD, ())
        except TypeError:
            return False

    # -------------------------------------------------------------------------
    # Publishing
    # -------------------------------------------------------------------------

    def _deliver(self, topic: str, source: str, message: Any, is_wildcard: bool) -> None:
        """Call a snapshot of ``topic``'s subscribers with ``message``."""
        subscribers = self._subs.get(topic)
        if not subscribers:
            return

        for callback in list(subscribers):
            # Skip subscribers removed earlier in this pass
            live = self._subs.get(topic)
            if live is None or callback not in live:
                continue
            try:
                callback(message)
            except Exception as e:
                self._on_error(e, source, is_wildcard)

    def publish(self, topic: str, data: Any = None) -> bool:
        """
        Publish data to all subscribers of a topic.

        Wildcard subscribers receive ``Envelope(event=topic, data=data)``
        afterwards, unless the topic itself is "*".

        Args:
            topic: Topic to publish to
            data: Payload passed to subscribers as-is

        Returns:
            True if the topic had direct subscribers when publish was called
        """
        try:
            had_subscribers = topic in self._subs
        except TypeError:
            # unhashable, so it cannot be a topic
            return False

        self._deliver(topic, topic, data, False)

        if topic != WILDCARD:
            self._deliver(WILDCARD, topic, Envelope(event=topic, data=data), True)

        return had_subscribers

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    def dump(self) -> dict[str, list[Subscriber]]:
        """
        Snapshot of all subscriptions, for debugging and tests.

        Returns:
            New dict mapping topic to a new list of its subscribers
        """
        return {topic: list(subs) for topic, subs in self._subs.items()}

    def get_stats(self) -> dict[str, int]:
        """Get registry statistics."""
        return {
            "topics": len(self._subs),
            "total_subscriptions": sum(len(subs) for subs in self._subs.values()),
            "wildcard_subscriptions": len(self._subs.get(WILDCARD, ())),
        }


def create_pubsub(
    options: PubSubOptions | None = None,
    *,
    on_error: ErrorHandler | None = None,
) -> PubSub:
    """
    Create a new PubSub registry.

    Equivalent to ``PubSub(options, on_error=on_error)``.

    Example:
        bus = create_pubsub(on_error=lambda e, topic, wildcard: report(e, topic))
    """
    return PubSub(options, on_error=on_error)
