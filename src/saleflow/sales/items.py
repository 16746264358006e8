"""
Sale line items.

A line item is one product entry within a sale. It carries its own quantity,
unit price, tier discount and cancellation flag, and derives its total from
them. Line items are owned exclusively by their Sale.
"""

from decimal import Decimal
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from saleflow.config import ABSOLUTE_MAX_QUANTITY
from saleflow.exceptions import AlreadyCancelledError, SaleValidationError
from saleflow.sales.discount import (
    ZERO,
    compute_discount,
    validate_quantity,
    validate_unit_price,
)


class SaleItem(BaseModel):
    """
    One product entry within a sale.

    The discount is derived from quantity and unit price and is recomputed by
    every quantity change; it is never set on its own. Once cancelled, the
    item's total reads 0 but the line is kept for history.

    Use SaleItem.create() to build a new line; the plain constructor is used
    when restoring persisted state and does not recompute anything.

    Example:
        >>> item = SaleItem.create(uuid4(), "Beer", 12, Decimal("10.00"))
        >>> item.discount
        Decimal('24.0000')
        >>> item.total
        Decimal('96.0000')
    """

    id: UUID = Field(default_factory=uuid4)
    product_id: UUID
    product_name: str
    quantity: int
    unit_price: Decimal
    discount: Decimal = ZERO
    is_cancelled: bool = False

    @classmethod
    def create(
        cls,
        product_id: UUID,
        product_name: str,
        quantity: int,
        unit_price: Decimal,
        max_quantity: int = ABSOLUTE_MAX_QUANTITY,
    ) -> "SaleItem":
        """
        Create a new, active line item.

        Raises:
            InvalidQuantityError: If quantity is outside 1..max_quantity
            InvalidUnitPriceError: If unit_price is not positive
            SaleValidationError: If product_name is empty
        """
        validate_quantity(quantity, max_quantity)
        unit_price = Decimal(unit_price)
        validate_unit_price(unit_price)
        if not product_name or not product_name.strip():
            raise SaleValidationError("Product name is required")

        return cls(
            product_id=product_id,
            product_name=product_name,
            quantity=quantity,
            unit_price=unit_price,
            discount=compute_discount(quantity, unit_price),
        )

    @property
    def gross_amount(self) -> Decimal:
        """quantity x unit price, before discount."""
        return self.quantity * self.unit_price

    @property
    def total(self) -> Decimal:
        """Amount charged for this line: 0 once cancelled."""
        if self.is_cancelled:
            return ZERO
        return self.gross_amount - self.discount

    @property
    def is_active(self) -> bool:
        return not self.is_cancelled

    def update_quantity(self, quantity: int, max_quantity: int = ABSOLUTE_MAX_QUANTITY) -> None:
        """
        Change the quantity and recompute the discount.

        The cancelled flag is left as it is.

        Raises:
            InvalidQuantityError: If quantity is outside 1..max_quantity
        """
        validate_quantity(quantity, max_quantity)
        self.quantity = quantity
        self.discount = compute_discount(quantity, self.unit_price)

    def cancel(self) -> None:
        """
        Cancel this line.

        Raises:
            AlreadyCancelledError: If the line was already cancelled
        """
        if self.is_cancelled:
            raise AlreadyCancelledError("Item", self.id)
        self.is_cancelled = True


__all__ = ["SaleItem"]
