"""
Domain events raised by the Sale aggregate.

Each event carries enough of the sale's state to be useful to a subscriber
without loading the sale again.
"""

from decimal import Decimal
from uuid import UUID

from pydantic import Field

from saleflow.events.base import DomainEvent


class SaleEvent(DomainEvent):
    """Base class for events raised by a Sale."""

    aggregate_type: str = "Sale"


class SaleCreated(SaleEvent):
    """A sale was opened with its initial line items."""

    number: str
    customer_id: UUID
    branch_id: UUID
    total_amount: Decimal
    item_count: int = Field(ge=0)


class SaleModified(SaleEvent):
    """
    A sale was reconciled against a new set of line items.

    added, removed and changed list the product ids touched by each step.
    """

    total_amount: Decimal
    added: list[UUID] = Field(default_factory=list)
    removed: list[UUID] = Field(default_factory=list)
    changed: list[UUID] = Field(default_factory=list)


class SaleCancelled(SaleEvent):
    """A whole sale was cancelled."""

    total_released: Decimal
    items_cancelled: int = Field(ge=0)


class SaleItemCancelled(SaleEvent):
    """A single line item was cancelled."""

    product_id: UUID
    quantity: int
    new_total_amount: Decimal


class SaleDeleted(SaleEvent):
    """A sale was deleted from the store."""

    number: str


__all__ = [
    "SaleCancelled",
    "SaleCreated",
    "SaleDeleted",
    "SaleEvent",
    "SaleItemCancelled",
    "SaleModified",
]
