"""
Sale store interface.

A sale store persists whole Sale aggregates. Saves are guarded by the
aggregate's version: a save based on a stale copy of the sale fails with
OptimisticLockError instead of silently overwriting a concurrent change.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol, runtime_checkable
from uuid import UUID

from saleflow.sales.aggregate import Sale


@dataclass(frozen=True)
class SalePage:
    """
    One page of sales.

    Attributes:
        items: Sales on this page, newest sale date first
        total_count: Number of sales across all pages
    """

    items: list[Sale] = field(default_factory=list)
    total_count: int = 0


@runtime_checkable
class SaleStore(Protocol):
    """
    Protocol for sale persistence.

    Implementations:
    - InMemorySaleStore: dictionary of JSON snapshots, for tests and development
    - SQLAlchemySaleStore: JSON document plus version column in a SQL table
    """

    async def get(self, sale_id: UUID) -> Sale | None:
        """
        Load a sale.

        Returns:
            An independent copy of the stored sale, or None if it does not exist
        """
        ...

    async def save(self, sale: Sale) -> Sale:
        """
        Insert a new sale (version 0) or update an existing one.

        On success the sale's version is advanced to the stored version.

        Raises:
            OptimisticLockError: If the stored version differs from sale.version
        """
        ...

    async def list_page(self, page: int, page_size: int) -> SalePage:
        """
        Return one page of sales ordered by sale date, newest first.

        Args:
            page: 1-based page number
            page_size: Sales per page
        """
        ...

    async def delete(self, sale_id: UUID) -> bool:
        """
        Delete a sale.

        Returns:
            True if the sale existed and was deleted
        """
        ...


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


__all__ = [
    "SalePage",
    "SaleStore",
    "as_utc",
]
