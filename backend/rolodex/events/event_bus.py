"""In-process publish/subscribe.

Handlers are async callables taking the event payload.  They run in the
order they subscribed, one after another, on the publisher's task.
"""

import logging
from enum import Enum
from typing import Any
from typing import Awaitable
from typing import Callable
from typing import Dict
from typing import List

logger = logging.getLogger(__name__)

Handler = Callable[[Dict[str, Any]], Awaitable[None]]


class EventType(str, Enum):
    """Events observers can subscribe to."""

    # Any create, update or delete of contact data
    CONTACTS_CHANGED = "contacts_changed"


class EventBus:
    """Routes published events to the handlers registered for their type."""

    def __init__(self):
        self._handlers: Dict[EventType, List[Handler]] = {}

    def subscribe(self, event_type: EventType, handler: Handler) -> None:
        """Register *handler*; registering the same handler twice is a no-op."""
        handlers = self._handlers.setdefault(event_type, [])
        if handler not in handlers:
            handlers.append(handler)
            logger.debug("Subscribed %s to %s", getattr(handler, "__qualname__", handler), event_type.value)

    def unsubscribe(self, event_type: EventType, handler: Handler) -> None:
        handlers = self._handlers.get(event_type)
        if not handlers or handler not in handlers:
            return
        handlers.remove(handler)
        if not handlers:
            del self._handlers[event_type]

    def subscriber_count(self, event_type: EventType) -> int:
        return len(self._handlers.get(event_type, ()))

    async def publish(self, event_type: EventType, data: Dict[str, Any]) -> None:
        """Deliver *data* to every handler of *event_type*.

        A handler that raises is logged and skipped; the remaining handlers
        still run and the publisher never sees the error.
        """
        # Copy so handlers may unsubscribe while we iterate.
        handlers = list(self._handlers.get(event_type, ()))
        if not handlers:
            return

        logger.debug("Publishing %s to %d handler(s)", event_type.value, len(handlers))
        for handler in handlers:
            try:
                await handler(data)
            except Exception as exc:
                logger.error("Handler for %s failed: %s", event_type.value, exc)


# Process-wide bus shared by the announcer and the websocket manager
event_bus = EventBus()
