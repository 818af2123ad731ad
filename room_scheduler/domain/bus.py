"""Synchronous in-process bus for reservation lifecycle notifications."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Callable

logger = logging.getLogger(__name__)


class EventBus:
    """Publish/subscribe bus keyed on the notification's class.

    Handlers run in registration order on the publishing thread; a handler
    error propagates to the publisher.
    """

    def __init__(self) -> None:
        self._subscribers: dict[type, list[Callable[[Any], None]]] = defaultdict(list)

    def subscribe(self, event_type: type, handler: Callable[[Any], None]) -> None:
        self._subscribers[event_type].append(handler)

    def publish(self, event: Any) -> None:
        handlers = self._subscribers.get(type(event), [])
        logger.debug("Publishing %s to %d handler(s)", type(event).__name__, len(handlers))
        for handler in handlers:
            handler(event)
