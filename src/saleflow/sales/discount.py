"""
Quantity-tiered discount policy.

The discount for a line is a step function of its quantity:

    quantity 1-3    -> no discount
    quantity 4-9    -> 10% of quantity x unit price
    quantity 10-20  -> 20% of quantity x unit price

Tier boundaries are inclusive lower bounds, so 4 and 10 fall into the higher
tier. Quantities above the ceiling are rejected before any discount is computed.
No rounding is applied beyond Decimal's native precision.
"""

from dataclasses import dataclass
from decimal import Decimal

from saleflow.config import ABSOLUTE_MAX_QUANTITY
from saleflow.exceptions import InvalidQuantityError, InvalidUnitPriceError

ZERO = Decimal("0")


@dataclass(frozen=True)
class DiscountTier:
    """A discount rate that applies from min_quantity upwards."""

    min_quantity: int
    rate: Decimal


# Highest tier first
DISCOUNT_TIERS: tuple[DiscountTier, ...] = (
    DiscountTier(min_quantity=10, rate=Decimal("0.20")),
    DiscountTier(min_quantity=4, rate=Decimal("0.10")),
)


def validate_quantity(quantity: int, max_quantity: int = ABSOLUTE_MAX_QUANTITY) -> None:
    """
    Check that a line quantity is within 1..max_quantity.

    Raises:
        InvalidQuantityError: If the quantity is out of range
    """
    if quantity <= 0 or quantity > max_quantity:
        raise InvalidQuantityError(quantity, max_quantity)


def validate_unit_price(unit_price: Decimal) -> None:
    """
    Check that a unit price is strictly positive.

    Raises:
        InvalidUnitPriceError: If the price is zero or negative
    """
    if unit_price <= ZERO:
        raise InvalidUnitPriceError(unit_price)


def discount_rate(quantity: int) -> Decimal:
    """Return the discount rate for a quantity (0 when no tier applies)."""
    for tier in DISCOUNT_TIERS:
        if quantity >= tier.min_quantity:
            return tier.rate
    return ZERO


def compute_discount(quantity: int, unit_price: Decimal) -> Decimal:
    """
    Compute the discount amount for a line.

    Args:
        quantity: Units sold, 1..20
        unit_price: Price per unit

    Returns:
        quantity x unit_price x tier rate

    Raises:
        InvalidQuantityError: If quantity is outside 1..20

    Example:
        >>> compute_discount(12, Decimal("10.00"))
        Decimal('24.0000')
    """
    validate_quantity(quantity)
    rate = discount_rate(quantity)
    if rate == ZERO:
        return ZERO
    return quantity * unit_price * rate


__all__ = [
    "DISCOUNT_TIERS",
    "DiscountTier",
    "compute_discount",
    "discount_rate",
    "validate_quantity",
    "validate_unit_price",
]
