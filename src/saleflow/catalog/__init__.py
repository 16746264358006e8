"""Products, customers and branches as seen by the sale workflows."""

from saleflow.catalog.in_memory import (
    InMemoryBranchLookup,
    InMemoryCustomerLookup,
    InMemoryProductStockService,
)
from saleflow.catalog.interface import BranchLookup, CustomerLookup, ProductStockService
from saleflow.catalog.models import Branch, Customer, Product
from saleflow.catalog.sql import (
    SQLAlchemyBranchLookup,
    SQLAlchemyCustomerLookup,
    SQLAlchemyProductStockService,
)

__all__ = [
    # Models
    "Branch",
    "Customer",
    "Product",
    # Interfaces
    "BranchLookup",
    "CustomerLookup",
    "ProductStockService",
    # In-memory
    "InMemoryBranchLookup",
    "InMemoryCustomerLookup",
    "InMemoryProductStockService",
    # SQLAlchemy
    "SQLAlchemyBranchLookup",
    "SQLAlchemyCustomerLookup",
    "SQLAlchemyProductStockService",
]
