"""
Shared pytest fixtures for integration tests.

Integration tests run the sale workflows against the SQLAlchemy store and
catalog on a file-backed SQLite database (sqlite+aiosqlite). They are
skipped when aiosqlite is not installed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import pytest
import pytest_asyncio

from saleflow.bus.memory import InMemoryEventBus
from saleflow.catalog.models import Branch, Customer, Product
from saleflow.service import SalesService
from tests.fixtures import RecordingHandler, make_branch, make_customer, make_product

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

    from saleflow.catalog.sql import SQLAlchemyProductStockService
    from saleflow.stores.sql import SQLAlchemySaleStore


# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for integration tests."""
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "e2e: marks tests as end-to-end integration tests")


# ============================================================================
# SQLite-backed environment
# ============================================================================


@dataclass
class SqliteWorld:
    """SalesService wired to SQL-backed collaborators on one SQLite database."""

    engine: AsyncEngine
    store: SQLAlchemySaleStore
    products: SQLAlchemyProductStockService
    service: SalesService
    recorder: RecordingHandler
    customer: Customer
    branch: Branch
    beer: Product
    wine: Product

    async def stock(self, product: Product) -> int:
        current = await self.products.get_by_id(product.id)
        assert current is not None
        return current.stock_quantity


@pytest_asyncio.fixture
async def sqlite_world(sqlite_engine: AsyncEngine) -> SqliteWorld:
    """
    Provide a SqliteWorld with beer (100 @ 10.00) and wine (30 @ 45.50).
    """
    from saleflow.catalog.sql import (
        SQLAlchemyBranchLookup,
        SQLAlchemyCustomerLookup,
        SQLAlchemyProductStockService,
    )
    from saleflow.stores.sql import SQLAlchemySaleStore

    store = SQLAlchemySaleStore(sqlite_engine, enable_tracing=False)
    products = SQLAlchemyProductStockService(sqlite_engine, enable_tracing=False)
    customers = SQLAlchemyCustomerLookup(sqlite_engine)
    branches = SQLAlchemyBranchLookup(sqlite_engine)

    beer = await products.add(make_product("Beer", "10.00", stock=100))
    wine = await products.add(make_product("Wine", "45.50", stock=30))
    customer = await customers.add(make_customer())
    branch = await branches.add(make_branch())

    bus = InMemoryEventBus(enable_tracing=False)
    recorder = RecordingHandler()
    bus.subscribe_to_all_events(recorder)

    service = SalesService(
        store=store,
        products=products,
        customers=customers,
        branches=branches,
        event_bus=bus,
        enable_tracing=False,
    )
    return SqliteWorld(
        engine=sqlite_engine,
        store=store,
        products=products,
        service=service,
        recorder=recorder,
        customer=customer,
        branch=branch,
        beer=beer,
        wine=wine,
    )
