"""In-process publish/subscribe channel."""

import logging
from collections import defaultdict
from typing import Any, Callable

from cryptofolio.domain.models import Topic

logger = logging.getLogger(__name__)

Handler = Callable[[Any], None]


class EventBus:
    """
    Synchronous event bus.

    Handlers run in subscription order, once per publish. A failing handler
    is logged and does not stop delivery to the others. Construct one per
    application scope; there is no global instance.
    """

    def __init__(self) -> None:
        self._handlers: dict[Topic, list[Handler]] = defaultdict(list)

    def subscribe(self, topic: Topic, handler: Handler) -> Callable[[], None]:
        """Register handler for topic. Returns a function that unsubscribes it."""
        self._handlers[topic].append(handler)

        def unsubscribe() -> None:
            handlers = self._handlers.get(topic)
            if handlers and handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    def publish(self, topic: Topic, payload: Any = None) -> None:
        """Deliver payload to every handler subscribed to topic."""
        handlers = list(self._handlers.get(topic, ()))
        logger.debug("Publishing %s to %d handler(s)", topic.value, len(handlers))
        for handler in handlers:
            try:
                handler(payload)
            except Exception:
                logger.exception("Error in event handler for %s", topic.value)

    def subscriber_count(self, topic: Topic) -> int:
        return len(self._handlers.get(topic, ()))
