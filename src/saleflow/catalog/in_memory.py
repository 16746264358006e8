"""
In-memory collaborator implementations.

Useful for tests and single-process development. All data is lost when the
instance is garbage collected.
"""

import asyncio
import logging
from collections.abc import Iterable
from typing import Generic, TypeVar
from uuid import UUID

from saleflow.catalog.models import Branch, Customer, Product
from saleflow.observability import Tracer, create_tracer
from saleflow.observability.attributes import ATTR_PRODUCT_ID

logger = logging.getLogger(__name__)

TEntity = TypeVar("TEntity", Customer, Branch)


class InMemoryProductStockService:
    """
    In-memory ProductStockService.

    Writes are guarded by an asyncio.Lock, so a compare-and-swap through
    set_stock(expected_stock=...) is atomic with respect to other writers.

    Example:
        >>> service = InMemoryProductStockService([Product(name="Beer", price=Decimal("10"), stock_quantity=50)])
        >>> await service.set_stock(product.id, 38, expected_stock=50)
        True
    """

    def __init__(
        self,
        products: Iterable[Product] = (),
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        self._tracer = tracer or create_tracer(__name__, enable_tracing)
        self._products: dict[UUID, Product] = {p.id: p for p in products}
        self._lock = asyncio.Lock()

    def add(self, product: Product) -> Product:
        """Register a product, replacing any product with the same id."""
        self._products[product.id] = product
        return product

    async def get_by_id(self, product_id: UUID) -> Product | None:
        with self._tracer.span(
            "saleflow.product_stock.get_by_id",
            {ATTR_PRODUCT_ID: str(product_id)},
        ):
            async with self._lock:
                return self._products.get(product_id)

    async def set_stock(
        self,
        product_id: UUID,
        quantity: int,
        *,
        expected_stock: int | None = None,
    ) -> bool:
        if quantity < 0:
            raise ValueError(f"Stock quantity cannot be negative, got {quantity}")

        with self._tracer.span(
            "saleflow.product_stock.set_stock",
            {ATTR_PRODUCT_ID: str(product_id)},
        ):
            async with self._lock:
                product = self._products.get(product_id)
                if product is None:
                    return False
                if expected_stock is not None and product.stock_quantity != expected_stock:
                    return False
                self._products[product_id] = product.model_copy(
                    update={"stock_quantity": quantity}
                )

        logger.debug(
            "Set stock of product %s to %d",
            product_id,
            quantity,
            extra={"product_id": str(product_id), "new_stock": quantity},
        )
        return True

    def stock_of(self, product_id: UUID) -> int:
        """Current stock of a product (synchronous, for assertions)."""
        return self._products[product_id].stock_quantity

    def clear(self) -> None:
        self._products.clear()


class _InMemoryLookup(Generic[TEntity]):
    def __init__(self, entities: Iterable[TEntity] = ()) -> None:
        self._entities: dict[UUID, TEntity] = {e.id: e for e in entities}

    def add(self, entity: TEntity) -> TEntity:
        self._entities[entity.id] = entity
        return entity

    async def get_by_id(self, entity_id: UUID) -> TEntity | None:
        return self._entities.get(entity_id)

    def clear(self) -> None:
        self._entities.clear()


class InMemoryCustomerLookup(_InMemoryLookup[Customer]):
    """In-memory CustomerLookup."""


class InMemoryBranchLookup(_InMemoryLookup[Branch]):
    """In-memory BranchLookup."""


__all__ = [
    "InMemoryBranchLookup",
    "InMemoryCustomerLookup",
    "InMemoryProductStockService",
]
