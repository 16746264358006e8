"""
SalesService: one entry point for every sale operation.

The service wires the workflows to a shared set of collaborators, a single
stock adjuster and one tracer. It holds no state of its own between calls.

Example:
    >>> service = SalesService(
    ...     store=InMemorySaleStore(),
    ...     products=products,
    ...     customers=customers,
    ...     branches=branches,
    ...     event_bus=bus,
    ... )
    >>> result = await service.create_sale(command)
    >>> sale_id = result.value.aggregate_id
    >>> await service.cancel_sale(sale_id)
"""

import logging
from uuid import UUID

from saleflow.bus.interface import EventBus
from saleflow.catalog.interface import BranchLookup, CustomerLookup, ProductStockService
from saleflow.config import DEFAULT_CONFIG, SalesConfig
from saleflow.observability import Tracer, create_tracer
from saleflow.sales.aggregate import Sale
from saleflow.stores.interface import SaleStore
from saleflow.workflows.cancellation import CancelItemWorkflow, CancelSaleWorkflow
from saleflow.workflows.commands import CreateSaleCommand, UpdateSaleCommand
from saleflow.workflows.creation import CreateSaleWorkflow
from saleflow.workflows.deletion import DeleteSaleWorkflow
from saleflow.workflows.queries import SalePageView, SaleQueries, SaleView
from saleflow.workflows.reconciler import UpdateSaleWorkflow
from saleflow.workflows.results import WorkflowResult
from saleflow.workflows.stock import StockAdjuster

logger = logging.getLogger(__name__)


class SalesService:
    """
    Facade over the sale workflows and queries.

    Args:
        store: Where sales are persisted
        products: Product stock service
        customers: Customer existence lookup
        branches: Branch existence lookup
        event_bus: Where sale events are published (optional)
        config: Workflow configuration
        tracer: Tracer shared by every workflow (optional)
        enable_tracing: Create an OpenTelemetry tracer when none is given
    """

    def __init__(
        self,
        store: SaleStore,
        products: ProductStockService,
        customers: CustomerLookup,
        branches: BranchLookup,
        event_bus: EventBus | None = None,
        config: SalesConfig = DEFAULT_CONFIG,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        self._config = config
        self._tracer = tracer or create_tracer(__name__, enable_tracing)
        self._adjuster = StockAdjuster(products, config, tracer=self._tracer)

        common = {
            "event_bus": event_bus,
            "config": config,
            "adjuster": self._adjuster,
            "tracer": self._tracer,
        }
        self._create = CreateSaleWorkflow(store, products, customers, branches, **common)
        self._update = UpdateSaleWorkflow(store, products, customers, branches, **common)
        self._cancel_sale = CancelSaleWorkflow(store, products, **common)
        self._cancel_item = CancelItemWorkflow(store, products, **common)
        self._delete = DeleteSaleWorkflow(store, products, **common)
        self._queries = SaleQueries(store, config, tracer=self._tracer)

        logger.debug(
            "SalesService initialized",
            extra={
                "store": type(store).__name__,
                "products": type(products).__name__,
                "event_bus": type(event_bus).__name__ if event_bus else None,
            },
        )

    @property
    def config(self) -> SalesConfig:
        return self._config

    @property
    def stock_adjuster(self) -> StockAdjuster:
        return self._adjuster

    async def create_sale(self, command: CreateSaleCommand) -> WorkflowResult[Sale]:
        """Create a sale and reserve stock for its lines."""
        return await self._create.execute(command)

    async def update_sale(self, command: UpdateSaleCommand) -> WorkflowResult[Sale]:
        """Replace a sale's header and reconcile its lines with stock."""
        return await self._update.execute(command)

    async def cancel_sale(self, sale_id: UUID) -> WorkflowResult[Sale]:
        """Cancel a whole sale and restore the stock of its active lines."""
        return await self._cancel_sale.execute(sale_id)

    async def cancel_item(self, sale_id: UUID, product_id: UUID) -> WorkflowResult[Sale]:
        """Cancel one product's line on a sale."""
        return await self._cancel_item.execute(sale_id, product_id)

    async def delete_sale(self, sale_id: UUID) -> WorkflowResult[Sale]:
        """Delete a sale and restore the stock of its active lines."""
        return await self._delete.execute(sale_id)

    async def get_sale(self, sale_id: UUID) -> WorkflowResult[SaleView]:
        return await self._queries.get_sale(sale_id)

    async def list_sales(
        self,
        page: int | None = None,
        page_size: int | None = None,
    ) -> WorkflowResult[SalePageView]:
        return await self._queries.list_sales(page, page_size)


__all__ = ["SalesService"]
