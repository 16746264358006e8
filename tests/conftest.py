"""
Shared pytest fixtures for the saleflow tests.

This module provides:
- A SalesWorld: in-memory collaborators wired to a SalesService
- SQLite fixtures (sqlite_engine, sqlite_sale_store, sqlite_products)

SQLite fixtures require aiosqlite and are skipped when it is missing.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from pathlib import Path
from typing import TYPE_CHECKING

import pytest
import pytest_asyncio

from tests.fixtures import SalesWorld, build_world

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

    from saleflow.catalog.sql import SQLAlchemyProductStockService
    from saleflow.stores.sql import SQLAlchemySaleStore

# ============================================================================
# SQLite Availability Check
# ============================================================================

AIOSQLITE_AVAILABLE = False
try:
    import aiosqlite  # noqa: F401

    AIOSQLITE_AVAILABLE = True
except ImportError:
    pass


# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for tests."""
    config.addinivalue_line("markers", "sqlite: marks tests that require SQLite (aiosqlite)")


skip_if_no_aiosqlite = pytest.mark.skipif(not AIOSQLITE_AVAILABLE, reason="aiosqlite not installed")


# =============================================================================
# In-memory fixtures
# =============================================================================


@pytest.fixture
def world() -> SalesWorld:
    """
    Provide in-memory collaborators wired to a SalesService.

    Stock: beer 100 @ 10.00, wine 30 @ 45.50, soda 8 @ 3.25.
    """
    return build_world()


# =============================================================================
# SQLite fixtures
# =============================================================================


@pytest_asyncio.fixture
async def sqlite_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """
    Provide an async SQLite engine with the saleflow schema created.

    Uses a file database under tmp_path so every connection sees the same data.
    """
    if not AIOSQLITE_AVAILABLE:
        pytest.skip("aiosqlite not installed")

    from sqlalchemy.ext.asyncio import create_async_engine

    from saleflow.stores.schema import create_schema

    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'sales.db'}")
    await create_schema(engine)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def sqlite_sale_store(sqlite_engine: AsyncEngine) -> SQLAlchemySaleStore:
    from saleflow.stores.sql import SQLAlchemySaleStore

    return SQLAlchemySaleStore(sqlite_engine, enable_tracing=False)


@pytest_asyncio.fixture
async def sqlite_products(sqlite_engine: AsyncEngine) -> SQLAlchemyProductStockService:
    from saleflow.catalog.sql import SQLAlchemyProductStockService

    return SQLAlchemyProductStockService(sqlite_engine, enable_tracing=False)
