"""
Shared test fixtures for the saleflow tests.

Usage:
    from tests.fixtures import (
        SalesWorld,
        build_world,
        create_command,
        line,
        make_product,
        update_command,
    )
"""

from tests.fixtures.sales import (
    FailingEventBus,
    FailingProductStockService,
    FailingSaleStore,
    RacingProductStockService,
    RecordingHandler,
    SalesWorld,
    build_world,
    create_command,
    line,
    make_branch,
    make_customer,
    make_product,
    open_sale,
    update_command,
)

__all__ = [
    "FailingEventBus",
    "FailingProductStockService",
    "FailingSaleStore",
    "RacingProductStockService",
    "RecordingHandler",
    "SalesWorld",
    "build_world",
    "create_command",
    "line",
    "make_branch",
    "make_customer",
    "make_product",
    "open_sale",
    "update_command",
]
