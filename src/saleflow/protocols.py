"""
Protocol definitions for event handlers and subscribers.

These are the shapes the event bus accepts. Handlers may be sync or async;
the bus wraps each in a HandlerAdapter.
"""

from abc import ABC, abstractmethod
from collections.abc import Awaitable
from typing import Protocol, runtime_checkable

from saleflow.events.base import DomainEvent


@runtime_checkable
class FlexibleEventHandler(Protocol):
    """Protocol for handlers that may be sync or async."""

    def handle(self, event: DomainEvent) -> Awaitable[None] | None:
        """Handle event, returning Awaitable if async."""
        ...


class EventSubscriber(ABC):
    """
    Abstract base class for event subscribers.

    Subscribers declare which event types they handle and provide a handler
    method. Register them with EventBus.subscribe_all().

    Example:
        >>> class SaleTotalsProjection(EventSubscriber):
        ...     def subscribed_to(self) -> list[type[DomainEvent]]:
        ...         return [SaleCreated, SaleCancelled]
        ...
        ...     async def handle(self, event: DomainEvent) -> None:
        ...         ...
    """

    @abstractmethod
    def subscribed_to(self) -> list[type[DomainEvent]]:
        """Return list of event types this subscriber handles."""
        pass

    @abstractmethod
    def handle(self, event: DomainEvent) -> Awaitable[None] | None:
        """Handle one of the subscribed events."""
        pass


@runtime_checkable
class FlexibleEventSubscriber(Protocol):
    """Protocol version of EventSubscriber for flexible typing."""

    def subscribed_to(self) -> list[type[DomainEvent]]:
        """Return list of event types this subscriber handles."""
        ...

    def handle(self, event: DomainEvent) -> Awaitable[None] | None:
        """Handle event, returning Awaitable if async."""
        ...


__all__ = [
    "EventSubscriber",
    "FlexibleEventHandler",
    "FlexibleEventSubscriber",
]
