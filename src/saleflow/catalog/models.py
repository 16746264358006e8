"""
Snapshots of the entities a sale references.

Sales refer to products, customers and branches by id and copy their names.
These models are what the lookup collaborators return; the sale workflows
never modify them except for a product's stock, and only through the
ProductStockService.
"""

from decimal import Decimal
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


class Product(BaseModel):
    """A sellable product and its current stock."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    name: str = Field(min_length=1)
    price: Decimal = Field(gt=0)
    stock_quantity: int = Field(default=0, ge=0)


class Customer(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    name: str = Field(min_length=1)
    email: str | None = None


class Branch(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    name: str = Field(min_length=1)
    is_active: bool = True


__all__ = ["Branch", "Customer", "Product"]
