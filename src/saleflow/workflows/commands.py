"""Input commands for the sale workflows."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class SaleLineRequest(BaseModel):
    """One requested line of a sale: product, quantity and unit price."""

    model_config = ConfigDict(frozen=True)

    product_id: UUID
    product_name: str = ""
    quantity: int
    unit_price: Decimal


class CreateSaleCommand(BaseModel):
    """
    Request to create a sale.

    Lines are validated by the workflow, not here, so that every problem is
    reported as a WorkflowResult failure instead of a pydantic error.
    """

    model_config = ConfigDict(frozen=True)

    number: str
    sale_date: datetime
    customer_id: UUID
    customer_name: str
    branch_id: UUID
    branch_name: str
    items: list[SaleLineRequest] = Field(default_factory=list)


class UpdateSaleCommand(BaseModel):
    """
    Request to replace a sale's header and line items.

    ``items`` is the desired end state of the sale's active lines, not a
    delta. Products missing from it are removed from the sale.
    """

    model_config = ConfigDict(frozen=True)

    sale_id: UUID
    sale_date: datetime
    customer_id: UUID
    customer_name: str
    branch_id: UUID
    branch_name: str
    items: list[SaleLineRequest] = Field(default_factory=list)


__all__ = [
    "CreateSaleCommand",
    "SaleLineRequest",
    "UpdateSaleCommand",
]
