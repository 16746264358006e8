"""Domain events for the saleflow package."""

from saleflow.events.base import DomainEvent
from saleflow.events.sales import (
    SaleCancelled,
    SaleCreated,
    SaleDeleted,
    SaleEvent,
    SaleItemCancelled,
    SaleModified,
)

__all__ = [
    # Base event class
    "DomainEvent",
    # Sale events
    "SaleEvent",
    "SaleCreated",
    "SaleModified",
    "SaleCancelled",
    "SaleItemCancelled",
    "SaleDeleted",
]
