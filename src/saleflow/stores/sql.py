"""
SQLAlchemy implementation of the sale store.

Each sale is one row: the aggregate state as a JSON document, a version column
for optimistic concurrency, and a few denormalized columns (number, status,
sale date) for listing. Requires the tables from saleflow.stores.schema.
"""

import json
import logging
from uuid import UUID

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from saleflow.exceptions import OptimisticLockError
from saleflow.observability import Tracer, create_tracer
from saleflow.observability.attributes import (
    ATTR_DB_OPERATION,
    ATTR_DB_SYSTEM,
    ATTR_EXPECTED_VERSION,
    ATTR_PAGE,
    ATTR_PAGE_SIZE,
    ATTR_SALE_ID,
)
from saleflow.sales.aggregate import Sale
from saleflow.stores._connection import dialect_name, execute_with_connection
from saleflow.stores.interface import SalePage, as_utc
from saleflow.stores.schema import SALES_TABLE

logger = logging.getLogger(__name__)


class SQLAlchemySaleStore:
    """
    SaleStore backed by a SQL table.

    Example:
        >>> engine = create_async_engine("sqlite+aiosqlite:///sales.db")
        >>> await create_schema(engine)
        >>> store = SQLAlchemySaleStore(engine)
        >>> await store.save(sale)
        >>> loaded = await store.get(sale.aggregate_id)

    Note:
        Passing an AsyncConnection instead of an engine leaves transaction
        management to the caller.
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

    async def get(self, sale_id: UUID) -> Sale | None:
        with self._tracer.span(
            "saleflow.sale_store.get",
            {
                ATTR_SALE_ID: str(sale_id),
                ATTR_DB_SYSTEM: self._db_system,
                ATTR_DB_OPERATION: "SELECT",
            },
        ):
            query = text(f"""
                SELECT state, version
                FROM {SALES_TABLE}
                WHERE id = :id
            """)  # nosec B608 - table name is a module constant
            async with execute_with_connection(self._conn, transactional=False) as conn:
                result = await conn.execute(query, {"id": str(sale_id)})
                row = result.fetchone()

            if row is None:
                return None
            return Sale.from_snapshot(sale_id, json.loads(row[0]), int(row[1]))

    async def save(self, sale: Sale) -> Sale:
        sale_id = sale.aggregate_id
        expected_version = sale.version
        new_version = expected_version + 1
        state = sale.state
        params = {
            "id": str(sale_id),
            "number": state.number,
            "status": state.status.value,
            "sale_date": as_utc(state.sale_date).isoformat(),
            "state": json.dumps(sale.to_snapshot()),
            "version": new_version,
            "expected_version": expected_version,
            "created_at": as_utc(state.created_at).isoformat(),
            "updated_at": as_utc(state.updated_at).isoformat() if state.updated_at else None,
        }

        with self._tracer.span(
            "saleflow.sale_store.save",
            {
                ATTR_SALE_ID: str(sale_id),
                ATTR_EXPECTED_VERSION: expected_version,
                ATTR_DB_SYSTEM: self._db_system,
                ATTR_DB_OPERATION: "INSERT" if expected_version == 0 else "UPDATE",
            },
        ):
            if expected_version == 0:
                await self._insert(sale_id, params)
            else:
                await self._update(sale_id, expected_version, params)

        sale.mark_persisted(new_version)
        logger.debug(
            "Saved sale %s at version %d",
            sale_id,
            new_version,
            extra={"sale_id": str(sale_id), "version": new_version},
        )
        return sale

    async def _insert(self, sale_id: UUID, params: dict[str, object]) -> None:
        existing = await self._current_version(sale_id)
        if existing is not None:
            raise OptimisticLockError(sale_id, 0, existing)

        query = text(f"""
            INSERT INTO {SALES_TABLE}
                (id, number, status, sale_date, state, version, created_at, updated_at)
            VALUES
                (:id, :number, :status, :sale_date, :state, :version, :created_at, :updated_at)
        """)  # nosec B608
        try:
            async with execute_with_connection(self._conn, transactional=True) as conn:
                await conn.execute(query, params)
        except IntegrityError as e:
            # Lost an insert race against another writer of the same id
            raise OptimisticLockError(sale_id, 0, 1) from e

    async def _update(
        self, sale_id: UUID, expected_version: int, params: dict[str, object]
    ) -> None:
        query = text(f"""
            UPDATE {SALES_TABLE}
            SET number = :number,
                status = :status,
                sale_date = :sale_date,
                state = :state,
                version = :version,
                updated_at = :updated_at
            WHERE id = :id AND version = :expected_version
        """)  # nosec B608
        async with execute_with_connection(self._conn, transactional=True) as conn:
            result = await conn.execute(query, params)

        if result.rowcount != 1:
            actual = await self._current_version(sale_id)
            raise OptimisticLockError(sale_id, expected_version, actual or 0)

    async def _current_version(self, sale_id: UUID) -> int | None:
        query = text(f"SELECT version FROM {SALES_TABLE} WHERE id = :id")  # nosec B608
        async with execute_with_connection(self._conn, transactional=False) as conn:
            result = await conn.execute(query, {"id": str(sale_id)})
            row = result.fetchone()
        return None if row is None else int(row[0])

    async def list_page(self, page: int, page_size: int) -> SalePage:
        with self._tracer.span(
            "saleflow.sale_store.list_page",
            {
                ATTR_PAGE: page,
                ATTR_PAGE_SIZE: page_size,
                ATTR_DB_SYSTEM: self._db_system,
                ATTR_DB_OPERATION: "SELECT",
            },
        ):
            count_query = text(f"SELECT COUNT(*) FROM {SALES_TABLE}")  # nosec B608
            page_query = text(f"""
                SELECT id, state, version
                FROM {SALES_TABLE}
                ORDER BY sale_date DESC, created_at DESC
                LIMIT :limit OFFSET :offset
            """)  # nosec B608

            async with execute_with_connection(self._conn, transactional=False) as conn:
                total = (await conn.execute(count_query)).scalar_one()
                result = await conn.execute(
                    page_query,
                    {"limit": page_size, "offset": (page - 1) * page_size},
                )
                rows = result.fetchall()

            items = [Sale.from_snapshot(UUID(row[0]), json.loads(row[1]), int(row[2])) for row in rows]
            return SalePage(items=items, total_count=int(total))

    async def delete(self, sale_id: UUID) -> bool:
        with self._tracer.span(
            "saleflow.sale_store.delete",
            {
                ATTR_SALE_ID: str(sale_id),
                ATTR_DB_SYSTEM: self._db_system,
                ATTR_DB_OPERATION: "DELETE",
            },
        ):
            query = text(f"DELETE FROM {SALES_TABLE} WHERE id = :id")  # nosec B608
            async with execute_with_connection(self._conn, transactional=True) as conn:
                result = await conn.execute(query, {"id": str(sale_id)})
            return bool(result.rowcount == 1)


__all__ = ["SQLAlchemySaleStore"]
