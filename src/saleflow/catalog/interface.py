"""
Collaborator interfaces consumed by the sale workflows.

The workflows depend only on these protocols. In-memory and SQLAlchemy
implementations live next to this module; any object with the same async
methods works.
"""

from typing import Protocol, runtime_checkable
from uuid import UUID

from saleflow.catalog.models import Branch, Customer, Product


@runtime_checkable
class ProductStockService(Protocol):
    """
    Reads products and writes their absolute stock.

    There is no increment/decrement primitive: callers read the current stock,
    decide, and write the new absolute value. Passing expected_stock turns the
    write into a compare-and-swap so concurrent writers cannot overwrite each
    other.
    """

    async def get_by_id(self, product_id: UUID) -> Product | None:
        """Return the product, or None if it does not exist."""
        ...

    async def set_stock(
        self,
        product_id: UUID,
        quantity: int,
        *,
        expected_stock: int | None = None,
    ) -> bool:
        """
        Set a product's stock to an absolute quantity.

        Args:
            product_id: Product to update
            quantity: New stock value, must be >= 0
            expected_stock: When given, only write if the current stock equals it

        Returns:
            True if the stock was written. False if the product does not exist
            or, with expected_stock, the current stock differs.
        """
        ...


@runtime_checkable
class CustomerLookup(Protocol):
    async def get_by_id(self, customer_id: UUID) -> Customer | None:
        """Return the customer, or None if it does not exist."""
        ...


@runtime_checkable
class BranchLookup(Protocol):
    async def get_by_id(self, branch_id: UUID) -> Branch | None:
        """Return the branch, or None if it does not exist."""
        ...


__all__ = [
    "BranchLookup",
    "CustomerLookup",
    "ProductStockService",
]
