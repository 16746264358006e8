"""
Integration tests for the SQLAlchemy product stock service and lookups on SQLite.
"""

from __future__ import annotations

import asyncio
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import uuid4

import pytest

from saleflow.catalog import ProductStockService
from saleflow.config import SalesConfig
from saleflow.observability import MockTracer
from saleflow.workflows.stock import StockAdjuster
from tests.conftest import skip_if_no_aiosqlite
from tests.fixtures import make_branch, make_customer, make_product

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

    from saleflow.catalog.sql import SQLAlchemyProductStockService

pytestmark = [
    pytest.mark.integration,
    pytest.mark.sqlite,
    skip_if_no_aiosqlite,
]


class TestSQLAlchemyProductStockService:
    def test_satisfies_protocol(self, sqlite_products: SQLAlchemyProductStockService) -> None:
        assert isinstance(sqlite_products, ProductStockService)

    @pytest.mark.asyncio
    async def test_add_and_get(self, sqlite_products: SQLAlchemyProductStockService) -> None:
        beer = await sqlite_products.add(make_product("Beer", "10.50", stock=7))

        loaded = await sqlite_products.get_by_id(beer.id)

        assert loaded == beer
        assert loaded is not None and loaded.price == Decimal("10.50")
        assert await sqlite_products.get_by_id(uuid4()) is None

    @pytest.mark.asyncio
    async def test_compare_and_swap(self, sqlite_products: SQLAlchemyProductStockService) -> None:
        beer = await sqlite_products.add(make_product(stock=10))

        assert await sqlite_products.set_stock(beer.id, 4, expected_stock=9) is False
        assert await sqlite_products.set_stock(beer.id, 4, expected_stock=10) is True
        assert await sqlite_products.set_stock(beer.id, 2) is True

        loaded = await sqlite_products.get_by_id(beer.id)
        assert loaded is not None and loaded.stock_quantity == 2

    @pytest.mark.asyncio
    async def test_unknown_product(self, sqlite_products: SQLAlchemyProductStockService) -> None:
        assert await sqlite_products.set_stock(uuid4(), 3) is False

    @pytest.mark.asyncio
    async def test_negative_stock(self, sqlite_products: SQLAlchemyProductStockService) -> None:
        beer = await sqlite_products.add(make_product())

        with pytest.raises(ValueError):
            await sqlite_products.set_stock(beer.id, -1)

    @pytest.mark.asyncio
    async def test_concurrent_reservations_never_oversell(
        self, sqlite_products: SQLAlchemyProductStockService
    ) -> None:
        beer = await sqlite_products.add(make_product(stock=10))
        config = SalesConfig(
            stock_conflict_retries=20, stock_retry_delay=0.001, stock_retry_max_delay=0.01
        )
        adjuster = StockAdjuster(sqlite_products, config, enable_tracing=False)

        results = await asyncio.gather(
            *(adjuster.reserve(beer.id, 3) for _ in range(5)),
            return_exceptions=True,
        )

        succeeded = [r for r in results if not isinstance(r, BaseException)]
        loaded = await sqlite_products.get_by_id(beer.id)
        assert loaded is not None
        assert len(succeeded) <= 3
        assert loaded.stock_quantity == 10 - 3 * len(succeeded)

    @pytest.mark.asyncio
    async def test_traces_with_db_attributes(self, sqlite_engine: AsyncEngine) -> None:
        from saleflow.catalog.sql import SQLAlchemyProductStockService

        tracer = MockTracer()
        products = SQLAlchemyProductStockService(sqlite_engine, tracer=tracer)

        await products.get_by_id(uuid4())

        [span] = tracer.spans
        assert span.name == "saleflow.product_stock.get_by_id"
        assert span.attributes is not None
        assert span.attributes["db.system"] == "sqlite"
        assert span.attributes["db.operation"] == "SELECT"


class TestSQLAlchemyLookups:
    @pytest.mark.asyncio
    async def test_customer_and_branch(self, sqlite_engine: AsyncEngine) -> None:
        from saleflow.catalog.sql import SQLAlchemyBranchLookup, SQLAlchemyCustomerLookup

        customers = SQLAlchemyCustomerLookup(sqlite_engine)
        branches = SQLAlchemyBranchLookup(sqlite_engine)
        customer = await customers.add(make_customer())
        branch = await branches.add(make_branch())

        assert await customers.get_by_id(customer.id) == customer
        assert await branches.get_by_id(branch.id) == branch
        assert await customers.get_by_id(uuid4()) is None
        assert await branches.get_by_id(uuid4()) is None
