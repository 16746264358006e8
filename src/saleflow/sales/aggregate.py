"""
The Sale aggregate.

A Sale owns an ordered list of line items and enforces the invariants that
span them:

- At most one active (non-cancelled) line item per product.
- The total amount is always derived from the active line items.
- A cancelled sale has every line item cancelled and accepts no further changes.
- Status only moves from Active to Cancelled.

Command methods raise saleflow exceptions on violations; workflows translate
those into results at their boundary.
"""

import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from saleflow.aggregates.base import AggregateRoot
from saleflow.config import ABSOLUTE_MAX_QUANTITY, DEFAULT_CONFIG, SalesConfig
from saleflow.events.sales import (
    SaleCancelled,
    SaleCreated,
    SaleDeleted,
    SaleItemCancelled,
    SaleModified,
)
from saleflow.exceptions import (
    AlreadyCancelledError,
    DuplicateProductError,
    ItemNotFoundError,
    SaleCancelledError,
    SaleValidationError,
)
from saleflow.sales.discount import ZERO
from saleflow.sales.items import SaleItem

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SaleStatus(str, Enum):
    """Lifecycle status of a sale. Cancelled is terminal."""

    ACTIVE = "Active"
    CANCELLED = "Cancelled"


class SaleState(BaseModel):
    """Persisted state of a Sale."""

    sale_id: UUID
    number: str = ""
    sale_date: datetime = Field(default_factory=_utcnow)
    customer_id: UUID | None = None
    customer_name: str = ""
    branch_id: UUID | None = None
    branch_name: str = ""
    items: list[SaleItem] = Field(default_factory=list)
    status: SaleStatus = SaleStatus.ACTIVE
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime | None = None


def _require_text(value: str, field: str, max_length: int) -> None:
    if not value or not value.strip():
        raise SaleValidationError(f"{field} is required")
    if len(value) > max_length:
        raise SaleValidationError(f"{field} must not exceed {max_length} characters")


def validate_header(
    number: str,
    customer_name: str,
    branch_name: str,
    config: SalesConfig = DEFAULT_CONFIG,
) -> None:
    """
    Validate the header fields of a sale.

    Raises:
        SaleValidationError: If a field is empty or too long
    """
    _require_text(number, "Sale number", config.max_number_length)
    _require_text(customer_name, "Customer name", config.max_name_length)
    _require_text(branch_name, "Branch name", config.max_name_length)


class Sale(AggregateRoot[SaleState]):
    """
    Sale aggregate root.

    Build a new sale with Sale.open(), add its lines with add_item(), then call
    record_created() once the sale is complete. Persisted sales are restored
    with Sale.from_snapshot().

    Example:
        >>> sale = Sale.open(
        ...     number="S-001",
        ...     sale_date=datetime.now(UTC),
        ...     customer_id=customer.id,
        ...     customer_name=customer.name,
        ...     branch_id=branch.id,
        ...     branch_name=branch.name,
        ... )
        >>> sale.add_item(product.id, product.name, 12, Decimal("10.00"))
        >>> sale.total_amount
        Decimal('96.0000')
    """

    aggregate_type = "Sale"

    def _get_initial_state(self) -> SaleState:
        return SaleState(sale_id=self.aggregate_id)

    @classmethod
    def open(
        cls,
        *,
        number: str,
        sale_date: datetime,
        customer_id: UUID,
        customer_name: str,
        branch_id: UUID,
        branch_name: str,
        sale_id: UUID | None = None,
        config: SalesConfig = DEFAULT_CONFIG,
    ) -> "Sale":
        """
        Open a new, empty, active sale.

        Raises:
            SaleValidationError: If a header field is empty or too long
        """
        validate_header(number, customer_name, branch_name, config)
        sale = cls(sale_id or uuid4())
        sale._state = SaleState(
            sale_id=sale.aggregate_id,
            number=number,
            sale_date=sale_date,
            customer_id=customer_id,
            customer_name=customer_name,
            branch_id=branch_id,
            branch_name=branch_name,
        )
        return sale

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def number(self) -> str:
        return self._state.number

    @property
    def status(self) -> SaleStatus:
        return self._state.status

    @property
    def is_cancelled(self) -> bool:
        return self._state.status is SaleStatus.CANCELLED

    @property
    def items(self) -> list[SaleItem]:
        """All line items in insertion order, cancelled ones included."""
        return list(self._state.items)

    @property
    def active_items(self) -> list[SaleItem]:
        return [item for item in self._state.items if item.is_active]

    @property
    def total_amount(self) -> Decimal:
        """Sum of the totals of all active line items."""
        return sum((item.total for item in self.active_items), ZERO)

    def find_item(self, product_id: UUID, *, active_only: bool = True) -> SaleItem | None:
        """
        Find the line item for a product.

        The active line is preferred. With active_only=False the most recently
        added cancelled line is returned when no active line exists.
        """
        for item in self._state.items:
            if item.product_id == product_id and item.is_active:
                return item
        if active_only:
            return None
        for item in reversed(self._state.items):
            if item.product_id == product_id:
                return item
        return None

    # =========================================================================
    # Commands
    # =========================================================================

    def add_item(
        self,
        product_id: UUID,
        product_name: str,
        quantity: int,
        unit_price: Decimal,
        *,
        max_quantity: int = ABSOLUTE_MAX_QUANTITY,
        max_name_length: int = DEFAULT_CONFIG.max_name_length,
    ) -> SaleItem:
        """
        Append a new active line item.

        Raises:
            SaleCancelledError: If the sale is cancelled
            DuplicateProductError: If the product already has an active line
            InvalidQuantityError: If quantity is outside 1..max_quantity
            InvalidUnitPriceError: If unit_price is not positive
            SaleValidationError: If product_name is empty or too long
        """
        self._ensure_active()
        if self.find_item(product_id) is not None:
            raise DuplicateProductError(product_id)
        if product_name and len(product_name) > max_name_length:
            raise SaleValidationError(
                f"Product name must not exceed {max_name_length} characters"
            )

        item = SaleItem.create(
            product_id=product_id,
            product_name=product_name,
            quantity=quantity,
            unit_price=unit_price,
            max_quantity=max_quantity,
        )
        self._state.items.append(item)
        self._touch()
        return item

    def update_item(
        self,
        product_id: UUID,
        quantity: int,
        *,
        max_quantity: int = ABSOLUTE_MAX_QUANTITY,
    ) -> SaleItem:
        """
        Change the quantity of a product's active line item.

        Raises:
            SaleCancelledError: If the sale is cancelled
            ItemNotFoundError: If the product has no active line
            InvalidQuantityError: If quantity is outside 1..max_quantity
        """
        self._ensure_active()
        item = self.find_item(product_id)
        if item is None:
            raise ItemNotFoundError(product_id, self.aggregate_id)
        item.update_quantity(quantity, max_quantity)
        self._touch()
        return item

    def remove_item(self, product_id: UUID) -> SaleItem:
        """
        Delete a product's line item from the sale entirely.

        This is not cancellation: the line disappears instead of being kept
        with a zero total. The active line is removed when there is one.

        Raises:
            SaleCancelledError: If the sale is cancelled
            ItemNotFoundError: If the product has no line at all
        """
        self._ensure_active()
        item = self.find_item(product_id, active_only=False)
        if item is None:
            raise ItemNotFoundError(product_id, self.aggregate_id)
        self._state.items = [i for i in self._state.items if i.id != item.id]
        self._touch()
        return item

    def cancel_item(self, product_id: UUID) -> SaleItem:
        """
        Cancel a product's active line item.

        Raises:
            SaleCancelledError: If the sale is cancelled
            ItemNotFoundError: If the product has no line at all
            AlreadyCancelledError: If the product's line is already cancelled
        """
        self._ensure_active()
        item = self.find_item(product_id, active_only=False)
        if item is None:
            raise ItemNotFoundError(product_id, self.aggregate_id)
        item.cancel()
        self._touch()

        self._raise_event(
            SaleItemCancelled(
                aggregate_id=self.aggregate_id,
                product_id=product_id,
                quantity=item.quantity,
                new_total_amount=self.total_amount,
            )
        )
        logger.debug(
            "Cancelled item of product %s on sale %s",
            product_id,
            self.aggregate_id,
            extra={
                "sale_id": str(self.aggregate_id),
                "product_id": str(product_id),
                "quantity": item.quantity,
            },
        )
        return item

    def cancel(self) -> list[SaleItem]:
        """
        Cancel the whole sale and every active line item.

        Returns:
            Copies of the line items that were active before cancellation

        Raises:
            AlreadyCancelledError: If the sale is already cancelled
        """
        if self.is_cancelled:
            raise AlreadyCancelledError("Sale", self.aggregate_id)

        released = [item.model_copy() for item in self.active_items]
        total_released = self.total_amount
        for item in self.active_items:
            item.cancel()
        self._state.status = SaleStatus.CANCELLED
        self._touch()

        self._raise_event(
            SaleCancelled(
                aggregate_id=self.aggregate_id,
                total_released=total_released,
                items_cancelled=len(released),
            )
        )
        return released

    def update_details(
        self,
        *,
        sale_date: datetime,
        customer_id: UUID,
        customer_name: str,
        branch_id: UUID,
        branch_name: str,
        config: SalesConfig = DEFAULT_CONFIG,
    ) -> None:
        """
        Replace the header fields. Has no stock implications.

        Raises:
            SaleCancelledError: If the sale is cancelled
            SaleValidationError: If a name is empty or too long
        """
        self._ensure_active()
        _require_text(customer_name, "Customer name", config.max_name_length)
        _require_text(branch_name, "Branch name", config.max_name_length)
        self._state.sale_date = sale_date
        self._state.customer_id = customer_id
        self._state.customer_name = customer_name
        self._state.branch_id = branch_id
        self._state.branch_name = branch_name
        self._touch()

    # =========================================================================
    # Events recorded by workflows
    # =========================================================================

    def record_created(self) -> None:
        """Record that the sale has been opened with its initial items."""
        assert self._state.customer_id is not None
        assert self._state.branch_id is not None
        self._raise_event(
            SaleCreated(
                aggregate_id=self.aggregate_id,
                number=self._state.number,
                customer_id=self._state.customer_id,
                branch_id=self._state.branch_id,
                total_amount=self.total_amount,
                item_count=len(self.active_items),
            )
        )

    def record_modified(
        self,
        *,
        added: Sequence[UUID] = (),
        removed: Sequence[UUID] = (),
        changed: Sequence[UUID] = (),
    ) -> None:
        """Record that the sale's items have been reconciled."""
        self._raise_event(
            SaleModified(
                aggregate_id=self.aggregate_id,
                total_amount=self.total_amount,
                added=list(added),
                removed=list(removed),
                changed=list(changed),
            )
        )

    def record_deleted(self) -> None:
        """Record that the sale has been removed from the store."""
        self._raise_event(SaleDeleted(aggregate_id=self.aggregate_id, number=self._state.number))

    # =========================================================================
    # Internals
    # =========================================================================

    def _ensure_active(self) -> None:
        if self.is_cancelled:
            raise SaleCancelledError(self.aggregate_id)

    def _touch(self) -> None:
        self._state.updated_at = _utcnow()


__all__ = [
    "Sale",
    "SaleState",
    "SaleStatus",
    "validate_header",
]
