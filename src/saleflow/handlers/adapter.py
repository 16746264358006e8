"""
Handlers as the event bus stores them.

A sale event handler is either an object with a ``handle(event)`` method
(SaleEventLogger, any EventSubscriber) or a plain callable. Either may be
sync or async.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from saleflow.events.base import DomainEvent


def handler_name(handler: Any) -> str:
    """Name used for a handler in bus logs and span attributes."""
    if inspect.isfunction(handler) or inspect.ismethod(handler):
        return str(handler.__qualname__)
    if hasattr(handler, "handle"):
        return type(handler).__name__
    return str(getattr(handler, "__name__", repr(handler)))


@dataclass(frozen=True, eq=False)
class HandlerAdapter:
    """
    One registered handler, callable as ``await adapter.handle(event)``.

    The bus finds a subscription again with ``wraps(handler)``, which
    matches on the identity of the subscribed object.
    """

    original: Any
    name: str
    call: Callable[[DomainEvent], Any]

    @classmethod
    def wrap(cls, handler: Any) -> HandlerAdapter:
        call = getattr(handler, "handle", handler)
        if not callable(call):
            raise TypeError(
                f"Sale event handlers need a handle() method or must be callable, "
                f"got {type(handler).__name__}"
            )
        return cls(handler, handler_name(handler), call)

    async def handle(self, event: DomainEvent) -> None:
        result = self.call(event)
        if inspect.isawaitable(result):
            await result

    def wraps(self, handler: Any) -> bool:
        return self.original is handler


__all__ = [
    "HandlerAdapter",
    "handler_name",
]
