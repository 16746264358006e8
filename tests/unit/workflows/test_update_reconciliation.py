"""
Unit tests for update reconciliation: plan_reconciliation and UpdateSaleWorkflow.
"""

from datetime import UTC, datetime
from decimal import Decimal
from uuid import UUID, uuid4

import pytest

from saleflow.events.sales import SaleModified
from saleflow.sales.aggregate import Sale
from saleflow.stores.in_memory import InMemorySaleStore
from saleflow.workflows.commands import SaleLineRequest
from saleflow.workflows.reconciler import LineChange, ReconciliationPlan, plan_reconciliation
from saleflow.workflows.results import FailureKind
from tests.fixtures import (
    FailingSaleStore,
    SalesWorld,
    build_world,
    create_command,
    line,
    make_branch,
    make_product,
    open_sale,
    update_command,
)


class ConcurrentWriterStore(InMemorySaleStore):
    """Store where another writer saves the sale right before the next save."""

    def __init__(self) -> None:
        super().__init__(enable_tracing=False)
        self.interfere = False

    async def save(self, sale: Sale) -> Sale:
        if self.interfere:
            self.interfere = False
            other = await self.get(sale.aggregate_id)
            assert other is not None
            await super().save(other)
        return await super().save(sale)


async def create_sale(world: SalesWorld, *lines: SaleLineRequest) -> Sale:
    result = await world.service.create_sale(create_command(world.customer, world.branch, lines))
    assert result.success, result.message
    world.recorder.events.clear()
    return result.value


def quantities(sale: Sale) -> dict[UUID, int]:
    return {item.product_id: item.quantity for item in sale.active_items}


class TestPlanReconciliation:
    def test_classifies_lines(self) -> None:
        beer, wine, soda = make_product("Beer"), make_product("Wine"), make_product("Soda")
        sale = open_sale()
        sale.add_item(beer.id, "Beer", 5, Decimal("10"))
        sale.add_item(wine.id, "Wine", 2, Decimal("45.50"))

        plan = plan_reconciliation(sale, [line(wine, 4), line(soda, 1)])

        assert plan.removed == [LineChange(beer.id, "Beer", 5, 0, Decimal("10"))]
        assert plan.matched == [LineChange(wine.id, "Wine", 2, 4, Decimal("45.50"))]
        assert [c.product_id for c in plan.added] == [soda.id]
        assert plan.added[0].delta == 1

    def test_cancelled_lines_do_not_take_part(self) -> None:
        beer = make_product("Beer")
        sale = open_sale()
        sale.add_item(beer.id, "Beer", 5, Decimal("10"))
        sale.cancel_item(beer.id)

        plan = plan_reconciliation(sale, [line(beer, 3)])

        assert plan.removed == []
        assert plan.matched == []
        assert [c.requested_quantity for c in plan.added] == [3]

    def test_stock_requirements_and_changed(self) -> None:
        a, b, c = uuid4(), uuid4(), uuid4()
        plan = ReconciliationPlan(
            matched=[
                LineChange(a, "A", 2, 5),
                LineChange(b, "B", 5, 2),
                LineChange(c, "C", 3, 3),
            ],
            added=[LineChange(uuid4(), "D", 0, 1)],
        )

        assert [ch.product_id for ch in plan.changed] == [a, b]
        assert [ch.delta for ch in plan.stock_requirements] == [3, 1]


class TestUpdateQuantities:
    @pytest.mark.asyncio
    async def test_decrease_releases_difference(self, world: SalesWorld) -> None:
        sale = await create_sale(world, line(world.beer, 12))

        result = await world.service.update_sale(
            update_command(sale.aggregate_id, world.customer, world.branch, [line(world.beer, 2)])
        )

        assert result.success, result.message
        assert result.value.total_amount == Decimal("20.00")
        assert result.value.version == 2
        assert world.stock(world.beer) == 98
        assert [o.delta for o in result.stock_outcomes] == [10]

    @pytest.mark.asyncio
    async def test_increase_reserves_difference(self, world: SalesWorld) -> None:
        sale = await create_sale(world, line(world.beer, 2))

        result = await world.service.update_sale(
            update_command(sale.aggregate_id, world.customer, world.branch, [line(world.beer, 10)])
        )

        assert result.success
        assert result.value.total_amount == Decimal("80.00")
        assert world.stock(world.beer) == 90

    @pytest.mark.asyncio
    async def test_unchanged_quantity_moves_no_stock(self, world: SalesWorld) -> None:
        sale = await create_sale(world, line(world.beer, 4))

        result = await world.service.update_sale(
            update_command(sale.aggregate_id, world.customer, world.branch, [line(world.beer, 4)])
        )

        assert result.success
        assert result.stock_outcomes == ()
        assert world.stock(world.beer) == 96

    @pytest.mark.asyncio
    async def test_unit_price_of_matched_line_is_kept(self, world: SalesWorld) -> None:
        sale = await create_sale(world, line(world.beer, 2, "9.00"))

        result = await world.service.update_sale(
            update_command(
                sale.aggregate_id, world.customer, world.branch, [line(world.beer, 3, "12.00")]
            )
        )

        assert result.value.items[0].unit_price == Decimal("9.00")


class TestReplaceProducts:
    @pytest.mark.asyncio
    async def test_swapping_products_conserves_stock(self, world: SalesWorld) -> None:
        sale = await create_sale(world, line(world.beer, 5))
        assert world.stock(world.beer) == 95

        result = await world.service.update_sale(
            update_command(sale.aggregate_id, world.customer, world.branch, [line(world.wine, 3)])
        )

        assert result.success
        assert quantities(result.value) == {world.wine.id: 3}
        assert world.stock(world.beer) == 100
        assert world.stock(world.wine) == 27
        # removed lines are released before added lines reserve
        assert [(o.product_id, o.delta) for o in result.stock_outcomes] == [
            (world.beer.id, 5),
            (world.wine.id, -3),
        ]

    @pytest.mark.asyncio
    async def test_removed_line_is_deleted_not_cancelled(self, world: SalesWorld) -> None:
        sale = await create_sale(world, line(world.beer, 5), line(world.wine, 1))

        result = await world.service.update_sale(
            update_command(sale.aggregate_id, world.customer, world.branch, [line(world.wine, 1)])
        )

        assert [item.product_id for item in result.value.items] == [world.wine.id]

    @pytest.mark.asyncio
    async def test_records_sale_modified(self, world: SalesWorld) -> None:
        sale = await create_sale(
            world, line(world.beer, 5), line(world.wine, 1), line(world.soda, 1)
        )

        await world.service.update_sale(
            update_command(
                sale.aggregate_id,
                world.customer,
                world.branch,
                [line(world.wine, 2), line(world.soda, 1), line(world.beer, 5)],
            )
        )

        assert world.recorder.event_types == ["SaleModified"]
        event = world.recorder.events[0]
        assert isinstance(event, SaleModified)
        assert event.changed == [world.wine.id]
        assert event.added == []
        assert event.removed == []

    @pytest.mark.asyncio
    async def test_cancelled_line_is_re_added_fresh(self, world: SalesWorld) -> None:
        sale = await create_sale(world, line(world.beer, 5), line(world.wine, 2))
        cancelled = await world.service.cancel_item(sale.aggregate_id, world.beer.id)
        assert cancelled.success
        assert world.stock(world.beer) == 100

        result = await world.service.update_sale(
            update_command(
                sale.aggregate_id,
                world.customer,
                world.branch,
                [line(world.beer, 3), line(world.wine, 2)],
            )
        )

        assert result.success, result.message
        beer_lines = [i for i in result.value.items if i.product_id == world.beer.id]
        assert [(i.quantity, i.is_cancelled) for i in beer_lines] == [(5, True), (3, False)]
        assert world.stock(world.beer) == 97
        assert result.value.total_amount == Decimal("30.00") + Decimal("91.00")


class TestUpdateHeader:
    @pytest.mark.asyncio
    async def test_replaces_header_fields(self, world: SalesWorld) -> None:
        sale = await create_sale(world, line(world.beer, 1))
        uptown = world.branches.add(make_branch("Uptown"))
        new_date = datetime(2026, 4, 1, 8, 0, tzinfo=UTC)

        result = await world.service.update_sale(
            update_command(
                sale.aggregate_id, world.customer, uptown, [line(world.beer, 1)], sale_date=new_date
            )
        )

        state = result.value.state
        assert state.branch_id == uptown.id
        assert state.branch_name == "Uptown"
        assert state.sale_date == new_date
        assert state.number == sale.number
        assert state.updated_at is not None


class TestUpdateRejections:
    @pytest.mark.asyncio
    async def test_unknown_sale(self, world: SalesWorld) -> None:
        result = await world.service.update_sale(
            update_command(uuid4(), world.customer, world.branch, [line(world.beer, 1)])
        )

        assert result.failure.kind is FailureKind.NOT_FOUND
        assert result.failure.details["entity"] == "Sale"

    @pytest.mark.asyncio
    async def test_cancelled_sale(self, world: SalesWorld) -> None:
        sale = await create_sale(world, line(world.beer, 5))
        await world.service.cancel_sale(sale.aggregate_id)

        result = await world.service.update_sale(
            update_command(sale.aggregate_id, world.customer, world.branch, [line(world.beer, 1)])
        )

        assert result.failure.kind is FailureKind.DOMAIN_RULE
        assert "cancelled" in result.message
        assert world.stock(world.beer) == 100

    @pytest.mark.asyncio
    async def test_items_are_required(self, world: SalesWorld) -> None:
        sale = await create_sale(world, line(world.beer, 5))

        result = await world.service.update_sale(
            update_command(sale.aggregate_id, world.customer, world.branch, [])
        )

        assert result.failure.kind is FailureKind.VALIDATION
        assert result.message == "At least one sale item is required"
        assert world.stock(world.beer) == 95

    @pytest.mark.asyncio
    async def test_duplicate_products_are_rejected(self, world: SalesWorld) -> None:
        sale = await create_sale(world, line(world.beer, 5))

        result = await world.service.update_sale(
            update_command(
                sale.aggregate_id,
                world.customer,
                world.branch,
                [line(world.beer, 1), line(world.beer, 2)],
            )
        )

        assert result.failure.kind is FailureKind.VALIDATION

    @pytest.mark.asyncio
    async def test_quantity_above_limit(self, world: SalesWorld) -> None:
        sale = await create_sale(world, line(world.beer, 5))

        result = await world.service.update_sale(
            update_command(sale.aggregate_id, world.customer, world.branch, [line(world.beer, 21)])
        )

        assert result.failure.kind is FailureKind.VALIDATION
        assert world.stock(world.beer) == 95

    @pytest.mark.asyncio
    async def test_unknown_branch(self, world: SalesWorld) -> None:
        sale = await create_sale(world, line(world.beer, 5))

        result = await world.service.update_sale(
            update_command(
                sale.aggregate_id, world.customer, make_branch("Nowhere"), [line(world.beer, 5)]
            )
        )

        assert result.failure.kind is FailureKind.NOT_FOUND
        assert result.failure.details["entity"] == "Branch"

    @pytest.mark.asyncio
    async def test_insufficient_stock_is_checked_before_any_write(
        self, world: SalesWorld
    ) -> None:
        sale = await create_sale(world, line(world.beer, 5), line(world.soda, 2))

        # beer would be released first, but soda cannot grow from 2 to 12
        result = await world.service.update_sale(
            update_command(sale.aggregate_id, world.customer, world.branch, [line(world.soda, 12)])
        )

        assert result.failure.kind is FailureKind.DOMAIN_RULE
        assert result.failure.details["available"] == 6
        assert result.failure.details["requested"] == 10
        assert result.stock_outcomes == ()
        assert world.stock(world.beer) == 95
        assert world.stock(world.soda) == 6
        stored = await world.store.get(sale.aggregate_id)
        assert quantities(stored) == {world.beer.id: 5, world.soda.id: 2}

    @pytest.mark.asyncio
    async def test_unknown_added_product(self, world: SalesWorld) -> None:
        sale = await create_sale(world, line(world.beer, 5))
        ghost = make_product("Ghost")

        result = await world.service.update_sale(
            update_command(sale.aggregate_id, world.customer, world.branch, [line(ghost, 1)])
        )

        assert result.failure.kind is FailureKind.NOT_FOUND
        assert world.stock(world.beer) == 95


class TestUpdateCompensation:
    @pytest.mark.asyncio
    async def test_failed_save_restores_stock(self) -> None:
        world = build_world(store=FailingSaleStore(fail_after=1))
        sale = await create_sale(world, line(world.beer, 5), line(world.wine, 2))

        result = await world.service.update_sale(
            update_command(
                sale.aggregate_id,
                world.customer,
                world.branch,
                [line(world.wine, 6), line(world.soda, 3)],
            )
        )

        assert result.failure.kind is FailureKind.INFRASTRUCTURE
        assert result.message == "An internal error occurred while updating the sale"
        assert world.stock(world.beer) == 95
        assert world.stock(world.wine) == 28
        assert world.stock(world.soda) == 8
        assert world.recorder.events == []

    @pytest.mark.asyncio
    async def test_concurrent_modification_is_a_conflict(self) -> None:
        store = ConcurrentWriterStore()
        world = build_world(store=store)
        sale = await create_sale(world, line(world.beer, 5))
        store.interfere = True

        result = await world.service.update_sale(
            update_command(sale.aggregate_id, world.customer, world.branch, [line(world.beer, 8)])
        )

        assert result.failure.kind is FailureKind.CONFLICT
        assert result.failure.details["expected_version"] == 1
        assert result.failure.details["actual_version"] == 2
        assert world.stock(world.beer) == 95
