"""
Read-side queries over the sale store.

Queries return read-only views rather than aggregates so that callers cannot
mutate a sale outside a workflow.
"""

import logging
import math
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from saleflow.config import DEFAULT_CONFIG, SalesConfig
from saleflow.exceptions import NotFoundError
from saleflow.observability import Tracer, create_tracer
from saleflow.observability.attributes import (
    ATTR_PAGE,
    ATTR_PAGE_SIZE,
    ATTR_SALE_ID,
    ATTR_WORKFLOW,
)
from saleflow.sales.aggregate import Sale, SaleStatus
from saleflow.sales.items import SaleItem
from saleflow.stores.interface import SaleStore
from saleflow.workflows.results import Failure, WorkflowResult, failure_from_exception

logger = logging.getLogger(__name__)


class SaleItemView(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID
    product_id: UUID
    product_name: str
    quantity: int
    unit_price: Decimal
    discount: Decimal
    total_amount: Decimal
    is_cancelled: bool

    @classmethod
    def from_item(cls, item: SaleItem) -> "SaleItemView":
        return cls(
            id=item.id,
            product_id=item.product_id,
            product_name=item.product_name,
            quantity=item.quantity,
            unit_price=item.unit_price,
            discount=item.discount,
            total_amount=item.total,
            is_cancelled=item.is_cancelled,
        )


class SaleView(BaseModel):
    """A sale with all of its line items, cancelled ones included."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    number: str
    sale_date: datetime
    customer_id: UUID | None
    customer_name: str
    branch_id: UUID | None
    branch_name: str
    status: SaleStatus
    is_cancelled: bool
    total_amount: Decimal
    items: list[SaleItemView] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime | None = None

    @classmethod
    def from_sale(cls, sale: Sale) -> "SaleView":
        state = sale.state
        return cls(
            id=sale.aggregate_id,
            number=state.number,
            sale_date=state.sale_date,
            customer_id=state.customer_id,
            customer_name=state.customer_name,
            branch_id=state.branch_id,
            branch_name=state.branch_name,
            status=state.status,
            is_cancelled=sale.is_cancelled,
            total_amount=sale.total_amount,
            items=[SaleItemView.from_item(item) for item in state.items],
            created_at=state.created_at,
            updated_at=state.updated_at,
        )


class SaleSummaryView(BaseModel):
    """
    One row of a sale listing.

    item_count counts every line of the sale, cancelled lines included.
    """

    model_config = ConfigDict(frozen=True)

    id: UUID
    number: str
    sale_date: datetime
    customer_name: str
    branch_name: str
    status: SaleStatus
    total_amount: Decimal
    item_count: int

    @classmethod
    def from_sale(cls, sale: Sale) -> "SaleSummaryView":
        state = sale.state
        return cls(
            id=sale.aggregate_id,
            number=state.number,
            sale_date=state.sale_date,
            customer_name=state.customer_name,
            branch_name=state.branch_name,
            status=state.status,
            total_amount=sale.total_amount,
            item_count=len(state.items),
        )


class SalePageView(BaseModel):
    model_config = ConfigDict(frozen=True)

    items: list[SaleSummaryView] = Field(default_factory=list)
    total_count: int = 0
    page: int = 1
    page_size: int = DEFAULT_CONFIG.default_page_size
    total_pages: int = 0


def clamp_paging(
    page: int | None,
    page_size: int | None,
    config: SalesConfig = DEFAULT_CONFIG,
) -> tuple[int, int]:
    """Return (page, page_size) with page >= 1 and 1 <= page_size <= max."""
    page = max(1, page or 1)
    page_size = config.default_page_size if page_size is None else page_size
    page_size = min(max(1, page_size), config.max_page_size)
    return page, page_size


class SaleQueries:
    """
    Sale lookups and paged listing.

    Example:
        >>> queries = SaleQueries(store)
        >>> result = await queries.list_sales(page=2, page_size=20)
        >>> result.value.total_pages
        3
    """

    def __init__(
        self,
        store: SaleStore,
        config: SalesConfig = DEFAULT_CONFIG,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        self._store = store
        self._config = config
        self._tracer = tracer or create_tracer(__name__, enable_tracing)

    async def get_sale(self, sale_id: UUID) -> WorkflowResult[SaleView]:
        with self._tracer.span(
            "saleflow.workflow.get_sale",
            {ATTR_WORKFLOW: "get_sale", ATTR_SALE_ID: str(sale_id)},
        ):
            try:
                sale = await self._store.get(sale_id)
                if sale is None:
                    raise NotFoundError("Sale", sale_id)
            except Exception as e:
                return WorkflowResult.fail(self._failure(e, "retrieving the sale"))
            return WorkflowResult.ok(SaleView.from_sale(sale))

    async def list_sales(
        self,
        page: int | None = None,
        page_size: int | None = None,
    ) -> WorkflowResult[SalePageView]:
        page, page_size = clamp_paging(page, page_size, self._config)
        with self._tracer.span(
            "saleflow.workflow.list_sales",
            {ATTR_WORKFLOW: "list_sales", ATTR_PAGE: page, ATTR_PAGE_SIZE: page_size},
        ):
            try:
                result = await self._store.list_page(page, page_size)
            except Exception as e:
                return WorkflowResult.fail(self._failure(e, "listing sales"))

            logger.debug(
                "Listed %d of %d sale(s) on page %d",
                len(result.items),
                result.total_count,
                page,
                extra={"page": page, "page_size": page_size},
            )
            return WorkflowResult.ok(
                SalePageView(
                    items=[SaleSummaryView.from_sale(sale) for sale in result.items],
                    total_count=result.total_count,
                    page=page,
                    page_size=page_size,
                    total_pages=math.ceil(result.total_count / page_size),
                )
            )

    def _failure(self, exc: Exception, operation: str) -> Failure:
        failure = failure_from_exception(exc, operation)
        if isinstance(exc, NotFoundError):
            logger.warning("%s", failure.message)
        else:
            logger.error("Query failed while %s: %s", operation, exc, exc_info=True)
        return failure


__all__ = [
    "SaleItemView",
    "SalePageView",
    "SaleQueries",
    "SaleSummaryView",
    "SaleView",
    "clamp_paging",
]
