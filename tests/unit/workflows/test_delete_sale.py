"""
Unit tests for DeleteSaleWorkflow.
"""

from uuid import uuid4

import pytest

from saleflow.workflows.results import FailureKind
from tests.fixtures import SalesWorld, create_command, line


class TestDeleteSale:
    @pytest.mark.asyncio
    async def test_deletes_and_restores_active_stock(self, world: SalesWorld) -> None:
        created = await world.service.create_sale(
            create_command(world.customer, world.branch, [line(world.beer, 12), line(world.wine, 2)])
        )
        sale_id = created.value.aggregate_id
        await world.service.cancel_item(sale_id, world.wine.id)
        world.recorder.events.clear()

        result = await world.service.delete_sale(sale_id)

        assert result.success, result.message
        assert await world.store.get(sale_id) is None
        assert world.stock(world.beer) == 100
        assert world.stock(world.wine) == 30
        # only the active beer line is restored; wine was restored on cancel
        assert [o.product_id for o in result.stock_outcomes] == [world.beer.id]
        assert world.recorder.event_types == ["SaleDeleted"]

    @pytest.mark.asyncio
    async def test_deleting_cancelled_sale_moves_no_stock(self, world: SalesWorld) -> None:
        created = await world.service.create_sale(
            create_command(world.customer, world.branch, [line(world.beer, 3)])
        )
        sale_id = created.value.aggregate_id
        await world.service.cancel_sale(sale_id)

        result = await world.service.delete_sale(sale_id)

        assert result.success
        assert result.stock_outcomes == ()
        assert world.stock(world.beer) == 100

    @pytest.mark.asyncio
    async def test_unknown_sale(self, world: SalesWorld) -> None:
        result = await world.service.delete_sale(uuid4())

        assert result.failure.kind is FailureKind.NOT_FOUND
        assert result.failure.details["entity"] == "Sale"
