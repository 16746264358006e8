"""Event sink contract for the sale workflows."""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Sequence

from saleflow.events.base import DomainEvent
from saleflow.protocols import FlexibleEventHandler, FlexibleEventSubscriber

EventHandlerFunc = Callable[[DomainEvent], Awaitable[None] | None]
EventHandler = FlexibleEventHandler | EventHandlerFunc


class EventBus(ABC):
    """
    Where workflows hand sale events after a successful save.

    A workflow never inspects what happens next: handler errors stay inside
    the bus, and ``background=True`` returns before any handler runs.
    Subscribing to a base class (``SaleEvent``, ``DomainEvent``) receives
    all of its subclasses.

    Example:
        >>> bus.subscribe(SaleCancelled, refund_payment)
        >>> bus.subscribe_all(SaleEventLogger())
        >>> await bus.publish(sale.uncommitted_events)
    """

    @abstractmethod
    async def publish(self, events: Sequence[DomainEvent], background: bool = False) -> None:
        """Deliver events in order; each reaches all its handlers before the next."""

    @abstractmethod
    def subscribe(self, event_type: type[DomainEvent], handler: EventHandler) -> None: ...

    @abstractmethod
    def unsubscribe(self, event_type: type[DomainEvent], handler: EventHandler) -> bool:
        """Remove handler from event_type. False if it was not subscribed there."""

    def subscribe_all(self, subscriber: FlexibleEventSubscriber) -> None:
        """Subscribe to every type listed by ``subscriber.subscribed_to()``."""
        for event_type in subscriber.subscribed_to():
            self.subscribe(event_type, subscriber)

    def subscribe_to_all_events(self, handler: EventHandler) -> None:
        self.subscribe(DomainEvent, handler)

    def unsubscribe_from_all_events(self, handler: EventHandler) -> bool:
        return self.unsubscribe(DomainEvent, handler)


__all__ = [
    "EventBus",
    "EventHandler",
    "EventHandlerFunc",
]
