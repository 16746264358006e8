"""
Event subscriber that logs sale lifecycle events.

Register it on the bus to get one INFO line per published sale event:

    >>> bus.subscribe_all(SaleEventLogger())
"""

import logging

from saleflow.events.base import DomainEvent
from saleflow.events.sales import (
    SaleCancelled,
    SaleCreated,
    SaleDeleted,
    SaleItemCancelled,
    SaleModified,
)
from saleflow.protocols import EventSubscriber

logger = logging.getLogger(__name__)


class SaleEventLogger(EventSubscriber):
    """Logs every sale event it receives."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._logger = log or logger

    def subscribed_to(self) -> list[type[DomainEvent]]:
        return [SaleCreated, SaleModified, SaleCancelled, SaleItemCancelled, SaleDeleted]

    def handle(self, event: DomainEvent) -> None:
        extra = {
            "sale_id": str(event.aggregate_id),
            "event_type": event.event_type,
            "event_id": str(event.event_id),
            "correlation_id": str(event.correlation_id),
        }

        if isinstance(event, SaleCreated):
            self._logger.info(
                "Sale created: %s (number %s, total %s, %d item(s))",
                event.aggregate_id,
                event.number,
                event.total_amount,
                event.item_count,
                extra=extra,
            )
        elif isinstance(event, SaleModified):
            self._logger.info(
                "Sale modified: %s (total %s; added %d, removed %d, changed %d)",
                event.aggregate_id,
                event.total_amount,
                len(event.added),
                len(event.removed),
                len(event.changed),
                extra=extra,
            )
        elif isinstance(event, SaleCancelled):
            self._logger.info(
                "Sale cancelled: %s (%d item(s), %s released)",
                event.aggregate_id,
                event.items_cancelled,
                event.total_released,
                extra=extra,
            )
        elif isinstance(event, SaleItemCancelled):
            self._logger.info(
                "Item cancelled in sale %s: product %s",
                event.aggregate_id,
                event.product_id,
                extra={**extra, "product_id": str(event.product_id)},
            )
        elif isinstance(event, SaleDeleted):
            self._logger.info("Sale deleted: %s", event.aggregate_id, extra=extra)
        else:
            self._logger.debug("Ignoring %s", event.event_type, extra=extra)


__all__ = ["SaleEventLogger"]
