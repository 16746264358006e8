"""In-process event bus used by SalesService unless another one is passed in."""

import asyncio
import logging
import threading
from collections.abc import Sequence

from saleflow.bus.interface import EventBus, EventHandler
from saleflow.events.base import DomainEvent
from saleflow.handlers.adapter import HandlerAdapter
from saleflow.observability import Tracer, create_tracer
from saleflow.observability.attributes import (
    ATTR_AGGREGATE_ID,
    ATTR_EVENT_COUNT,
    ATTR_EVENT_ID,
    ATTR_EVENT_TYPE,
    ATTR_HANDLER_COUNT,
    ATTR_HANDLER_NAME,
    ATTR_HANDLER_SUCCESS,
)

logger = logging.getLogger(__name__)


class InMemoryEventBus(EventBus):
    """
    Delivers sale events to handlers in this process.

    Handlers run one at a time in subscription order. A handler that appears
    under several matching types (``SaleEvent`` and ``SaleCreated``, say) runs
    once per event. A failing handler is logged and skipped.

    Background publishes run as tasks held by the bus until they finish;
    call ``shutdown()`` before the event loop closes to let them drain.
    """

    def __init__(
        self,
        *,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        self._registrations: list[tuple[type[DomainEvent], HandlerAdapter]] = []
        self._lock = threading.RLock()
        self._tasks: set[asyncio.Task[None]] = set()
        self._tracer = tracer or create_tracer(__name__, enable_tracing)

    @property
    def pending_tasks(self) -> int:
        """Background publishes that have not finished yet."""
        return len(self._tasks)

    def subscribe(self, event_type: type[DomainEvent], handler: EventHandler) -> None:
        adapter = HandlerAdapter.wrap(handler)
        with self._lock:
            self._registrations.append((event_type, adapter))
        logger.info(
            "Subscribed %s to %s",
            adapter.name,
            event_type.__name__,
            extra={"handler": adapter.name, "event_type": event_type.__name__},
        )

    def unsubscribe(self, event_type: type[DomainEvent], handler: EventHandler) -> bool:
        with self._lock:
            for index, (registered, adapter) in enumerate(self._registrations):
                if registered is event_type and adapter.wraps(handler):
                    del self._registrations[index]
                    logger.info(
                        "Unsubscribed %s from %s",
                        adapter.name,
                        event_type.__name__,
                        extra={"handler": adapter.name, "event_type": event_type.__name__},
                    )
                    return True
        return False

    def handlers_for(self, event: DomainEvent) -> list[HandlerAdapter]:
        """Handlers an event would be delivered to, in delivery order."""
        with self._lock:
            registrations = list(self._registrations)
        matched: list[HandlerAdapter] = []
        for event_type, adapter in registrations:
            if isinstance(event, event_type) and not any(
                m.wraps(adapter.original) for m in matched
            ):
                matched.append(adapter)
        return matched

    async def publish(self, events: Sequence[DomainEvent], background: bool = False) -> None:
        if not events:
            return
        batch = list(events)
        if not background:
            await self._deliver(batch)
            return

        task = asyncio.create_task(self._deliver(batch))
        self._tasks.add(task)
        task.add_done_callback(self._forget)
        logger.debug(
            "Publishing %d sale event(s) in the background",
            len(batch),
            extra={"event_count": len(batch)},
        )

    def _forget(self, task: asyncio.Task[None]) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(
                "Background publish failed: %s", task.exception(), exc_info=task.exception()
            )

    async def _deliver(self, events: list[DomainEvent]) -> None:
        with self._tracer.span("saleflow.event_bus.publish", {ATTR_EVENT_COUNT: len(events)}):
            for event in events:
                handlers = self.handlers_for(event)
                if not handlers:
                    logger.debug("No handlers for %s", event.event_type)
                    continue
                with self._tracer.span(
                    "saleflow.event_bus.dispatch",
                    {
                        ATTR_EVENT_TYPE: event.event_type,
                        ATTR_EVENT_ID: str(event.event_id),
                        ATTR_AGGREGATE_ID: str(event.aggregate_id),
                        ATTR_HANDLER_COUNT: len(handlers),
                    },
                ):
                    for adapter in handlers:
                        await self._run(adapter, event)

    async def _run(self, adapter: HandlerAdapter, event: DomainEvent) -> None:
        with self._tracer.span(
            "saleflow.event_bus.handle",
            {ATTR_EVENT_TYPE: event.event_type, ATTR_HANDLER_NAME: adapter.name},
        ) as span:
            try:
                await adapter.handle(event)
            except Exception as e:
                if span:
                    span.set_attribute(ATTR_HANDLER_SUCCESS, False)
                    span.record_exception(e)
                logger.error(
                    "Handler %s failed on %s for sale %s: %s",
                    adapter.name,
                    event.event_type,
                    event.aggregate_id,
                    e,
                    exc_info=True,
                    extra={
                        "handler": adapter.name,
                        "event_type": event.event_type,
                        "sale_id": str(event.aggregate_id),
                    },
                )
                return
            if span:
                span.set_attribute(ATTR_HANDLER_SUCCESS, True)

    async def shutdown(self, timeout: float = 30.0) -> None:
        """Wait up to timeout seconds for background publishes, then cancel the rest."""
        if not self._tasks:
            return
        logger.info("Draining %d background publish(es)", len(self._tasks))
        _, unfinished = await asyncio.wait(set(self._tasks), timeout=timeout)
        for task in unfinished:
            task.cancel()
        if unfinished:
            await asyncio.gather(*unfinished, return_exceptions=True)
            logger.warning(
                "Cancelled %d background publish(es) still running after %.1fs",
                len(unfinished),
                timeout,
                extra={"remaining_tasks": len(unfinished)},
            )


__all__ = ["InMemoryEventBus"]
