"""
In-memory sale store.

Sales are kept as JSON snapshots so every load returns an independent copy,
the same as a database-backed store. All data is lost when the store is
garbage collected.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from saleflow.exceptions import OptimisticLockError
from saleflow.observability import Tracer, create_tracer
from saleflow.observability.attributes import (
    ATTR_EXPECTED_VERSION,
    ATTR_PAGE,
    ATTR_PAGE_SIZE,
    ATTR_SALE_ID,
)
from saleflow.sales.aggregate import Sale
from saleflow.stores.interface import SalePage, as_utc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _StoredSale:
    state: dict[str, Any]
    version: int


class InMemorySaleStore:
    """
    In-memory implementation of SaleStore.

    Thread-safe for concurrent coroutines via asyncio.Lock.

    Example:
        >>> store = InMemorySaleStore()
        >>> await store.save(sale)
        >>> loaded = await store.get(sale.aggregate_id)
        >>> assert loaded == sale and loaded is not sale
    """

    def __init__(
        self,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        self._tracer = tracer or create_tracer(__name__, enable_tracing)
        self._sales: dict[UUID, _StoredSale] = {}
        self._lock = asyncio.Lock()

    async def get(self, sale_id: UUID) -> Sale | None:
        with self._tracer.span("saleflow.sale_store.get", {ATTR_SALE_ID: str(sale_id)}):
            async with self._lock:
                stored = self._sales.get(sale_id)
            if stored is None:
                return None
            return Sale.from_snapshot(sale_id, stored.state, stored.version)

    async def save(self, sale: Sale) -> Sale:
        sale_id = sale.aggregate_id
        with self._tracer.span(
            "saleflow.sale_store.save",
            {ATTR_SALE_ID: str(sale_id), ATTR_EXPECTED_VERSION: sale.version},
        ):
            async with self._lock:
                stored = self._sales.get(sale_id)
                current_version = stored.version if stored else 0
                if current_version != sale.version:
                    raise OptimisticLockError(sale_id, sale.version, current_version)

                new_version = current_version + 1
                self._sales[sale_id] = _StoredSale(state=sale.to_snapshot(), version=new_version)

            sale.mark_persisted(new_version)
            logger.debug(
                "Saved sale %s at version %d",
                sale_id,
                new_version,
                extra={"sale_id": str(sale_id), "version": new_version},
            )
            return sale

    async def list_page(self, page: int, page_size: int) -> SalePage:
        with self._tracer.span(
            "saleflow.sale_store.list_page",
            {ATTR_PAGE: page, ATTR_PAGE_SIZE: page_size},
        ):
            async with self._lock:
                snapshot = list(self._sales.items())

            sales = [
                Sale.from_snapshot(sale_id, stored.state, stored.version)
                for sale_id, stored in snapshot
            ]
            sales.sort(
                key=lambda s: (as_utc(s.state.sale_date), as_utc(s.state.created_at)),
                reverse=True,
            )
            offset = (page - 1) * page_size
            return SalePage(items=sales[offset : offset + page_size], total_count=len(sales))

    async def delete(self, sale_id: UUID) -> bool:
        with self._tracer.span("saleflow.sale_store.delete", {ATTR_SALE_ID: str(sale_id)}):
            async with self._lock:
                return self._sales.pop(sale_id, None) is not None

    async def count(self) -> int:
        async with self._lock:
            return len(self._sales)

    def clear(self) -> None:
        """Remove all sales. Intended for test teardown."""
        self._sales.clear()


__all__ = ["InMemorySaleStore"]
