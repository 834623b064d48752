"""Change announcement sink.

The contact service only knows that *something* wants to hear about data
changes.  It calls :meth:`ChangeAnnouncer.announce_change` and never sees
who is listening; observers register on the :class:`EventBus` instead.
"""

from __future__ import annotations

import logging
from typing import Protocol
from typing import runtime_checkable

from .event_bus import EventBus
from .event_bus import EventType
from .event_bus import event_bus

logger = logging.getLogger(__name__)


@runtime_checkable
class ChangeAnnouncer(Protocol):
    """Minimal interface the contact service depends on."""

    async def announce_change(self) -> None:  # noqa: D401 – async handler
        """Tell every current observer that contact data changed."""


class EventBusAnnouncer:
    """:class:`ChangeAnnouncer` that publishes on an :class:`EventBus`."""

    def __init__(self, bus: EventBus | None = None) -> None:
        self._bus = bus or event_bus

    async def announce_change(self) -> None:
        logger.debug("Announcing %s", EventType.CONTACTS_CHANGED.value)
        # The signal carries no payload; observers re-fetch what they need.
        await self._bus.publish(EventType.CONTACTS_CHANGED, {})
