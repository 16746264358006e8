"""
Unit tests for HandlerAdapter and handler_name.
"""

from uuid import uuid4

import pytest

from saleflow.events.base import DomainEvent
from saleflow.events.sales import SaleDeleted
from saleflow.handlers import HandlerAdapter, SaleEventLogger, handler_name


def make_event() -> SaleDeleted:
    return SaleDeleted(aggregate_id=uuid4(), number="S-1")


class SyncHandler:
    def __init__(self) -> None:
        self.handled: list[DomainEvent] = []

    def handle(self, event: DomainEvent) -> None:
        self.handled.append(event)


class AsyncHandler:
    def __init__(self) -> None:
        self.handled: list[DomainEvent] = []

    async def handle(self, event: DomainEvent) -> None:
        self.handled.append(event)


def notify_warehouse(event: DomainEvent) -> None:
    pass


class TestHandlerAdapter:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("handler_class", [SyncHandler, AsyncHandler])
    async def test_objects_with_handle(self, handler_class: type) -> None:
        handler = handler_class()
        event = make_event()

        await HandlerAdapter.wrap(handler).handle(event)

        assert handler.handled == [event]

    @pytest.mark.asyncio
    async def test_async_function(self) -> None:
        received: list[DomainEvent] = []

        async def on_event(event: DomainEvent) -> None:
            received.append(event)

        await HandlerAdapter.wrap(on_event).handle(make_event())

        assert len(received) == 1

    @pytest.mark.asyncio
    async def test_sync_function_returning_coroutine_is_awaited(self) -> None:
        received: list[DomainEvent] = []

        async def record(event: DomainEvent) -> None:
            received.append(event)

        await HandlerAdapter.wrap(lambda event: record(event)).handle(make_event())

        assert len(received) == 1

    def test_rejects_non_callable(self) -> None:
        with pytest.raises(TypeError, match="got str"):
            HandlerAdapter.wrap("not a handler")

    def test_wraps_matches_identity(self) -> None:
        handler = SyncHandler()
        adapter = HandlerAdapter.wrap(handler)

        assert adapter.wraps(handler)
        assert not adapter.wraps(SyncHandler())
        assert adapter.original is handler


class TestHandlerName:
    def test_object_with_handle_uses_class_name(self) -> None:
        assert handler_name(SaleEventLogger()) == "SaleEventLogger"

    def test_function_uses_its_name(self) -> None:
        assert handler_name(notify_warehouse) == "notify_warehouse"

    def test_bound_method_includes_class(self) -> None:
        assert handler_name(SyncHandler().handle) == "SyncHandler.handle"

    def test_builtin_method(self) -> None:
        assert handler_name([].append) == "append"
