"""
Exceptions for the saleflow package.

The hierarchy mirrors the failure taxonomy used at workflow boundaries:

- NotFoundError: a sale, customer, branch or product id does not resolve
- SaleValidationError: structurally invalid input (quantity, price, header fields)
- DomainRuleViolation: a business rule rejected the operation
- ConcurrencyError: a concurrent writer won a race on a sale or a product stock
- InfrastructureError: a store or service call itself failed

The aggregate and its line items raise these; workflows translate them into
WorkflowResult failures (see saleflow.workflows.results).
"""

from decimal import Decimal
from uuid import UUID


class SaleflowError(Exception):
    """Base exception for the saleflow package."""

    pass


class NotFoundError(SaleflowError):
    """Raised when a referenced entity cannot be found."""

    def __init__(self, entity: str, entity_id: UUID) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} with ID {entity_id} not found")


# =============================================================================
# Validation
# =============================================================================


class SaleValidationError(SaleflowError):
    """Raised when input is structurally invalid."""

    pass


class InvalidQuantityError(SaleValidationError):
    """Raised when a line item quantity is outside the allowed range."""

    def __init__(self, quantity: int, max_quantity: int) -> None:
        self.quantity = quantity
        self.max_quantity = max_quantity
        if quantity <= 0:
            message = f"Quantity must be at least 1, got {quantity}"
        else:
            message = (
                f"Cannot sell more than {max_quantity} units of the same product, "
                f"got {quantity}"
            )
        super().__init__(message)


class InvalidUnitPriceError(SaleValidationError):
    """Raised when a unit price is not strictly positive."""

    def __init__(self, unit_price: Decimal) -> None:
        self.unit_price = unit_price
        super().__init__(f"Unit price must be greater than 0, got {unit_price}")


# =============================================================================
# Domain rules
# =============================================================================


class DomainRuleViolation(SaleflowError):
    """Raised when a business rule rejects an operation."""

    pass


class DuplicateProductError(DomainRuleViolation):
    """Raised when a product already has an active line item on the sale."""

    def __init__(self, product_id: UUID) -> None:
        self.product_id = product_id
        super().__init__(f"Product {product_id} already has an active item on this sale")


class ItemNotFoundError(DomainRuleViolation):
    """Raised when a sale has no line item for the given product."""

    def __init__(self, product_id: UUID, sale_id: UUID | None = None) -> None:
        self.product_id = product_id
        self.sale_id = sale_id
        where = f" in sale {sale_id}" if sale_id else ""
        super().__init__(f"Item with product {product_id} not found{where}")


class AlreadyCancelledError(DomainRuleViolation):
    """Raised when cancelling a sale or line item that is already cancelled."""

    def __init__(self, entity: str, entity_id: UUID) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} is already cancelled")


class SaleCancelledError(DomainRuleViolation):
    """Raised when mutating a sale that has been cancelled."""

    def __init__(self, sale_id: UUID) -> None:
        self.sale_id = sale_id
        super().__init__(f"Cannot update a cancelled sale ({sale_id})")


class InsufficientStockError(DomainRuleViolation):
    """Raised when a product does not have enough stock for a request."""

    def __init__(
        self,
        product_id: UUID,
        product_name: str,
        available: int,
        requested: int,
    ) -> None:
        self.product_id = product_id
        self.product_name = product_name
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for product '{product_name}'. "
            f"Available: {available}, Requested: {requested}"
        )


# =============================================================================
# Concurrency
# =============================================================================


class ConcurrencyError(SaleflowError):
    """Raised when a concurrent writer changed the data being updated."""

    pass


class OptimisticLockError(ConcurrencyError):
    """Raised when there's a version conflict while saving a sale."""

    def __init__(self, sale_id: UUID, expected_version: int, actual_version: int) -> None:
        self.sale_id = sale_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Optimistic lock error for sale {sale_id}: "
            f"expected version {expected_version}, but current version is {actual_version}"
        )


class StockConflictError(ConcurrencyError):
    """Raised when a stock compare-and-swap keeps losing to concurrent writers."""

    def __init__(self, product_id: UUID, attempts: int) -> None:
        self.product_id = product_id
        self.attempts = attempts
        super().__init__(
            f"Stock for product {product_id} changed concurrently; "
            f"gave up after {attempts} attempt(s)"
        )


# =============================================================================
# Infrastructure
# =============================================================================


class InfrastructureError(SaleflowError):
    """Raised when a store or service call fails."""

    pass


class StockUpdateError(InfrastructureError):
    """Raised when the product stock service rejects a write."""

    def __init__(self, product_id: UUID, quantity: int) -> None:
        self.product_id = product_id
        self.quantity = quantity
        super().__init__(f"Failed to set stock of product {product_id} to {quantity}")
