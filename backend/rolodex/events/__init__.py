"""In-process publish/subscribe used for live-update fan-out."""

from .announcer import ChangeAnnouncer
from .announcer import EventBusAnnouncer
from .event_bus import EventBus
from .event_bus import EventType
from .event_bus import event_bus

__all__ = [
    "ChangeAnnouncer",
    "EventBus",
    "EventBusAnnouncer",
    "EventType",
    "event_bus",
]
