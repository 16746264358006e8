"""
Unit tests for InMemorySaleStore.
"""

from datetime import UTC, datetime, timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

from saleflow.exceptions import OptimisticLockError
from saleflow.observability import MockTracer
from saleflow.stores import InMemorySaleStore, SaleStore
from tests.fixtures import open_sale

BASE_DATE = datetime(2026, 3, 1, tzinfo=UTC)


@pytest.fixture
def store() -> InMemorySaleStore:
    return InMemorySaleStore(enable_tracing=False)


class TestSaveAndGet:
    def test_satisfies_protocol(self, store: InMemorySaleStore) -> None:
        assert isinstance(store, SaleStore)

    @pytest.mark.asyncio
    async def test_insert_sets_version(self, store: InMemorySaleStore) -> None:
        sale = open_sale()

        saved = await store.save(sale)

        assert saved is sale
        assert sale.version == 1

    @pytest.mark.asyncio
    async def test_get_returns_independent_copy(self, store: InMemorySaleStore) -> None:
        sale = open_sale()
        sale.add_item(uuid4(), "Beer", 12, Decimal("10.00"))
        await store.save(sale)

        loaded = await store.get(sale.aggregate_id)

        assert loaded is not None and loaded is not sale
        assert loaded.version == 1
        assert loaded.total_amount == Decimal("96.00")
        loaded.cancel()
        reloaded = await store.get(sale.aggregate_id)
        assert reloaded is not None and not reloaded.is_cancelled

    @pytest.mark.asyncio
    async def test_get_unknown(self, store: InMemorySaleStore) -> None:
        assert await store.get(uuid4()) is None

    @pytest.mark.asyncio
    async def test_update_advances_version(self, store: InMemorySaleStore) -> None:
        sale = await store.save(open_sale())
        loaded = await store.get(sale.aggregate_id)
        assert loaded is not None
        loaded.add_item(uuid4(), "Beer", 1, Decimal("1"))

        await store.save(loaded)

        assert loaded.version == 2

    @pytest.mark.asyncio
    async def test_stale_save_is_rejected(self, store: InMemorySaleStore) -> None:
        sale = await store.save(open_sale())
        first = await store.get(sale.aggregate_id)
        second = await store.get(sale.aggregate_id)
        assert first is not None and second is not None
        await store.save(first)

        with pytest.raises(OptimisticLockError) as exc_info:
            await store.save(second)

        assert exc_info.value.expected_version == 1
        assert exc_info.value.actual_version == 2

    @pytest.mark.asyncio
    async def test_inserting_same_new_sale_twice_is_rejected(
        self, store: InMemorySaleStore
    ) -> None:
        sale = open_sale()
        await store.save(sale)
        duplicate = type(sale).from_snapshot(sale.aggregate_id, sale.to_snapshot(), 0)

        with pytest.raises(OptimisticLockError):
            await store.save(duplicate)


class TestListAndDelete:
    @pytest.mark.asyncio
    async def test_orders_by_sale_date_then_created_at(self, store: InMemorySaleStore) -> None:
        older = open_sale("S-1", BASE_DATE)
        newer = open_sale("S-2", BASE_DATE + timedelta(days=1))
        same_day_later = open_sale("S-3", BASE_DATE + timedelta(days=1))
        newer.state.created_at = BASE_DATE
        same_day_later.state.created_at = BASE_DATE + timedelta(hours=1)
        for sale in (older, newer, same_day_later):
            await store.save(sale)

        page = await store.list_page(1, 10)

        assert [s.number for s in page.items] == ["S-3", "S-2", "S-1"]
        assert page.total_count == 3

    @pytest.mark.asyncio
    async def test_offsets_pages(self, store: InMemorySaleStore) -> None:
        for n in range(5):
            await store.save(open_sale(f"S-{n}", BASE_DATE + timedelta(days=n)))

        page = await store.list_page(3, 2)

        assert [s.number for s in page.items] == ["S-0"]
        assert page.total_count == 5

    @pytest.mark.asyncio
    async def test_delete(self, store: InMemorySaleStore) -> None:
        sale = await store.save(open_sale())

        assert await store.delete(sale.aggregate_id) is True
        assert await store.delete(sale.aggregate_id) is False
        assert await store.count() == 0

    @pytest.mark.asyncio
    async def test_traces_calls(self) -> None:
        tracer = MockTracer()
        store = InMemorySaleStore(tracer=tracer)
        sale = await store.save(open_sale())

        await store.get(sale.aggregate_id)

        assert tracer.span_names == ["saleflow.sale_store.save", "saleflow.sale_store.get"]
