"""Event bus (event sink) for sale events."""

from saleflow.bus.interface import EventBus, EventHandler, EventHandlerFunc
from saleflow.bus.memory import InMemoryEventBus

__all__ = [
    "EventBus",
    "EventHandler",
    "EventHandlerFunc",
    "InMemoryEventBus",
]
