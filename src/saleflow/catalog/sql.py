"""
SQLAlchemy implementations of the collaborator interfaces.

Works with any async SQLAlchemy dialect that accepts the DDL in
saleflow.stores.schema (tested with sqlite+aiosqlite). The stock
compare-and-swap is a conditional UPDATE, so it is atomic in the database
rather than in this process.
"""

import logging
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from saleflow.catalog.models import Branch, Customer, Product
from saleflow.observability import Tracer, create_tracer
from saleflow.observability.attributes import (
    ATTR_DB_OPERATION,
    ATTR_DB_SYSTEM,
    ATTR_PRODUCT_ID,
)
from saleflow.stores._connection import dialect_name, execute_with_connection
from saleflow.stores.schema import BRANCHES_TABLE, CUSTOMERS_TABLE, PRODUCTS_TABLE

logger = logging.getLogger(__name__)


class SQLAlchemyProductStockService:
    """
    ProductStockService backed by the products table.

    Example:
        >>> service = SQLAlchemyProductStockService(engine)
        >>> await service.add(Product(name="Beer", price=Decimal("10.00"), stock_quantity=50))
        >>> await service.set_stock(product.id, 38, expected_stock=50)
        True
    """

    def __init__(
        self,
        conn: AsyncConnection | AsyncEngine,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        self._tracer = tracer or create_tracer(__name__, enable_tracing)
        self._conn = conn
        self._db_system = dialect_name(conn)

    async def add(self, product: Product) -> Product:
        """Insert a product row."""
        query = text(f"""
            INSERT INTO {PRODUCTS_TABLE} (id, name, price, stock_quantity)
            VALUES (:id, :name, :price, :stock_quantity)
        """)  # nosec B608 - table name is a module constant
        async with execute_with_connection(self._conn, transactional=True) as conn:
            await conn.execute(
                query,
                {
                    "id": str(product.id),
                    "name": product.name,
                    "price": str(product.price),
                    "stock_quantity": product.stock_quantity,
                },
            )
        return product

    async def get_by_id(self, product_id: UUID) -> Product | None:
        with self._tracer.span(
            "saleflow.product_stock.get_by_id",
            {
                ATTR_PRODUCT_ID: str(product_id),
                ATTR_DB_SYSTEM: self._db_system,
                ATTR_DB_OPERATION: "SELECT",
            },
        ):
            query = text(f"""
                SELECT id, name, price, stock_quantity
                FROM {PRODUCTS_TABLE}
                WHERE id = :id
            """)  # nosec B608
            async with execute_with_connection(self._conn, transactional=False) as conn:
                result = await conn.execute(query, {"id": str(product_id)})
                row = result.fetchone()

            if row is None:
                return None
            return Product(
                id=UUID(row[0]),
                name=row[1],
                price=Decimal(str(row[2])),
                stock_quantity=int(row[3]),
            )

    async def set_stock(
        self,
        product_id: UUID,
        quantity: int,
        *,
        expected_stock: int | None = None,
    ) -> bool:
        if quantity < 0:
            raise ValueError(f"Stock quantity cannot be negative, got {quantity}")

        params: dict[str, Any] = {"id": str(product_id), "quantity": quantity}
        condition = "id = :id"
        if expected_stock is not None:
            condition += " AND stock_quantity = :expected"
            params["expected"] = expected_stock

        with self._tracer.span(
            "saleflow.product_stock.set_stock",
            {
                ATTR_PRODUCT_ID: str(product_id),
                ATTR_DB_SYSTEM: self._db_system,
                ATTR_DB_OPERATION: "UPDATE",
            },
        ):
            query = text(f"""
                UPDATE {PRODUCTS_TABLE}
                SET stock_quantity = :quantity
                WHERE {condition}
            """)  # nosec B608
            async with execute_with_connection(self._conn, transactional=True) as conn:
                result = await conn.execute(query, params)

        return bool(result.rowcount == 1)


class SQLAlchemyCustomerLookup:
    """CustomerLookup backed by the customers table."""

    def __init__(self, conn: AsyncConnection | AsyncEngine) -> None:
        self._conn = conn

    async def add(self, customer: Customer) -> Customer:
        query = text(f"""
            INSERT INTO {CUSTOMERS_TABLE} (id, name, email)
            VALUES (:id, :name, :email)
        """)  # nosec B608
        async with execute_with_connection(self._conn, transactional=True) as conn:
            await conn.execute(
                query,
                {"id": str(customer.id), "name": customer.name, "email": customer.email},
            )
        return customer

    async def get_by_id(self, customer_id: UUID) -> Customer | None:
        query = text(f"SELECT id, name, email FROM {CUSTOMERS_TABLE} WHERE id = :id")  # nosec B608
        async with execute_with_connection(self._conn, transactional=False) as conn:
            result = await conn.execute(query, {"id": str(customer_id)})
            row = result.fetchone()
        if row is None:
            return None
        return Customer(id=UUID(row[0]), name=row[1], email=row[2])


class SQLAlchemyBranchLookup:
    """BranchLookup backed by the branches table."""

    def __init__(self, conn: AsyncConnection | AsyncEngine) -> None:
        self._conn = conn

    async def add(self, branch: Branch) -> Branch:
        query = text(f"""
            INSERT INTO {BRANCHES_TABLE} (id, name, is_active)
            VALUES (:id, :name, :is_active)
        """)  # nosec B608
        async with execute_with_connection(self._conn, transactional=True) as conn:
            await conn.execute(
                query,
                {"id": str(branch.id), "name": branch.name, "is_active": int(branch.is_active)},
            )
        return branch

    async def get_by_id(self, branch_id: UUID) -> Branch | None:
        query = text(f"SELECT id, name, is_active FROM {BRANCHES_TABLE} WHERE id = :id")  # nosec B608
        async with execute_with_connection(self._conn, transactional=False) as conn:
            result = await conn.execute(query, {"id": str(branch_id)})
            row = result.fetchone()
        if row is None:
            return None
        return Branch(id=UUID(row[0]), name=row[1], is_active=bool(row[2]))


__all__ = [
    "SQLAlchemyBranchLookup",
    "SQLAlchemyCustomerLookup",
    "SQLAlchemyProductStockService",
]
