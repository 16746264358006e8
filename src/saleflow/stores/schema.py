"""
Database schema for the SQL-backed stores.

The DDL sticks to types both SQLite and PostgreSQL accept: ids are UUID
strings, money is a Decimal string, timestamps are ISO-8601 UTC strings (which
sort chronologically) and the sale state is a JSON document.
"""

import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from saleflow.stores._connection import execute_with_connection

logger = logging.getLogger(__name__)

SALES_TABLE = "sales"
PRODUCTS_TABLE = "products"
CUSTOMERS_TABLE = "customers"
BRANCHES_TABLE = "branches"

SCHEMA_STATEMENTS: tuple[str, ...] = (
    f"""
    CREATE TABLE IF NOT EXISTS {SALES_TABLE} (
        id VARCHAR(36) PRIMARY KEY,
        number VARCHAR(50) NOT NULL,
        status VARCHAR(20) NOT NULL,
        sale_date VARCHAR(40) NOT NULL,
        state TEXT NOT NULL,
        version INTEGER NOT NULL,
        created_at VARCHAR(40) NOT NULL,
        updated_at VARCHAR(40)
    )
    """,
    f"CREATE INDEX IF NOT EXISTS idx_{SALES_TABLE}_sale_date ON {SALES_TABLE} (sale_date)",
    f"""
    CREATE TABLE IF NOT EXISTS {PRODUCTS_TABLE} (
        id VARCHAR(36) PRIMARY KEY,
        name VARCHAR(100) NOT NULL,
        price VARCHAR(40) NOT NULL,
        stock_quantity INTEGER NOT NULL CHECK (stock_quantity >= 0)
    )
    """,
    f"""
    CREATE TABLE IF NOT EXISTS {CUSTOMERS_TABLE} (
        id VARCHAR(36) PRIMARY KEY,
        name VARCHAR(100) NOT NULL,
        email VARCHAR(255)
    )
    """,
    f"""
    CREATE TABLE IF NOT EXISTS {BRANCHES_TABLE} (
        id VARCHAR(36) PRIMARY KEY,
        name VARCHAR(100) NOT NULL,
        is_active INTEGER NOT NULL DEFAULT 1
    )
    """,
)


async def create_schema(conn: AsyncConnection | AsyncEngine) -> None:
    """
    Create the sales, products, customers and branches tables if missing.

    Example:
        >>> engine = create_async_engine("sqlite+aiosqlite:///sales.db")
        >>> await create_schema(engine)
    """
    async with execute_with_connection(conn, transactional=True) as connection:
        for statement in SCHEMA_STATEMENTS:
            await connection.execute(text(statement))

    logger.info("Sale schema created", extra={"tables": 4})


async def drop_schema(conn: AsyncConnection | AsyncEngine) -> None:
    """Drop every table created by create_schema()."""
    async with execute_with_connection(conn, transactional=True) as connection:
        for table in (SALES_TABLE, PRODUCTS_TABLE, CUSTOMERS_TABLE, BRANCHES_TABLE):
            await connection.execute(text(f"DROP TABLE IF EXISTS {table}"))  # nosec B608


__all__ = [
    "BRANCHES_TABLE",
    "CUSTOMERS_TABLE",
    "PRODUCTS_TABLE",
    "SALES_TABLE",
    "create_schema",
    "drop_schema",
]
