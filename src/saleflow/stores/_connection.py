"""
Connection handling helper for database operations.

SQL-backed stores accept either an AsyncEngine or an AsyncConnection. With
an engine each call gets its own connection (and transaction for writes);
with a connection the caller owns the transaction, which lets a sale save and
its stock writes share one unit of work.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine


@asynccontextmanager
async def execute_with_connection(
    conn: AsyncConnection | AsyncEngine,
    transactional: bool = True,
) -> AsyncIterator[AsyncConnection]:
    """
    Context manager for executing database operations.

    Args:
        conn: Database connection or engine
        transactional: If True, wrap in transaction (begin).
                       If False, use bare connection (connect).
                       Only applies when conn is an AsyncEngine.

    Yields:
        AsyncConnection ready for execute() calls

    Example:
        >>> async with execute_with_connection(self._conn) as conn:
        ...     await conn.execute(query, params)
    """
    if isinstance(conn, AsyncEngine):
        if transactional:
            async with conn.begin() as connection:
                yield connection
        else:
            async with conn.connect() as connection:
                yield connection
    else:
        # Caller is responsible for transaction management
        yield conn


def dialect_name(conn: AsyncConnection | AsyncEngine) -> str:
    """Name of the database dialect behind conn (e.g. 'sqlite', 'postgresql')."""
    return conn.dialect.name


__all__ = ["dialect_name", "execute_with_connection"]
