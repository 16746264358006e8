"""Sale aggregate, line items and discount policy."""

from saleflow.sales.aggregate import Sale, SaleState, SaleStatus, validate_header
from saleflow.sales.discount import (
    DISCOUNT_TIERS,
    DiscountTier,
    compute_discount,
    discount_rate,
)
from saleflow.sales.items import SaleItem

__all__ = [
    "DISCOUNT_TIERS",
    "DiscountTier",
    "Sale",
    "SaleItem",
    "SaleState",
    "SaleStatus",
    "compute_discount",
    "discount_rate",
    "validate_header",
]
