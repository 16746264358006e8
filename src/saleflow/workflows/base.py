"""
Shared plumbing for sale workflows.

SaleWorkflow holds the collaborators every workflow needs and implements the
two steps they all end with: publishing the sale's uncommitted events after
a successful save, and turning an exception into a logged Failure.
"""

import logging
from collections.abc import Sequence
from typing import Any, ClassVar
from uuid import UUID

from saleflow.bus.interface import EventBus
from saleflow.catalog.interface import ProductStockService
from saleflow.config import DEFAULT_CONFIG, SalesConfig
from saleflow.exceptions import NotFoundError, SaleValidationError
from saleflow.observability import Tracer, create_tracer
from saleflow.observability.attributes import ATTR_FAILURE_KIND, ATTR_WORKFLOW_SUCCESS
from saleflow.sales.aggregate import Sale
from saleflow.sales.discount import validate_quantity, validate_unit_price
from saleflow.stores.interface import SaleStore
from saleflow.workflows.commands import SaleLineRequest
from saleflow.workflows.results import Failure, FailureKind, failure_from_exception
from saleflow.workflows.stock import StockAdjuster

logger = logging.getLogger(__name__)


class SaleWorkflow:
    """
    Base class for sale workflows.

    Subclasses set ``name`` (span and log name) and ``operation`` (the
    phrase used in generic infrastructure failure messages).
    """

    name: ClassVar[str] = "workflow"
    operation: ClassVar[str] = "processing the sale"

    def __init__(
        self,
        store: SaleStore,
        products: ProductStockService,
        *,
        event_bus: EventBus | None = None,
        config: SalesConfig = DEFAULT_CONFIG,
        adjuster: StockAdjuster | None = None,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        self._store = store
        self._products = products
        self._event_bus = event_bus
        self._config = config
        self._tracer = tracer or create_tracer(__name__, enable_tracing)
        self._adjuster = adjuster or StockAdjuster(products, config, tracer=self._tracer)

    @property
    def span_name(self) -> str:
        return f"saleflow.workflow.{self.name}"

    async def _load(self, sale_id: UUID) -> Sale:
        sale = await self._store.get(sale_id)
        if sale is None:
            raise NotFoundError("Sale", sale_id)
        return sale

    async def _publish_events(self, sale: Sale) -> None:
        """
        Publish the sale's uncommitted events and mark them committed.

        Called only after the sale was saved. A failing event bus is logged
        and never fails the workflow.
        """
        events = sale.uncommitted_events
        if not events:
            return

        if self._event_bus is not None:
            try:
                await self._event_bus.publish(
                    events, background=self._config.publish_in_background
                )
            except Exception as e:
                logger.error(
                    "Failed to publish %d event(s) for sale %s: %s",
                    len(events),
                    sale.aggregate_id,
                    e,
                    exc_info=True,
                    extra={"sale_id": str(sale.aggregate_id), "event_count": len(events)},
                )
        sale.mark_events_as_committed()

    def _failure(
        self,
        exc: Exception,
        span: Any = None,
        sale_id: UUID | None = None,
    ) -> Failure:
        failure = failure_from_exception(exc, self.operation)
        extra = {
            "workflow": self.name,
            "failure_kind": failure.kind.value,
            "sale_id": str(sale_id) if sale_id else None,
        }
        if failure.kind is FailureKind.INFRASTRUCTURE:
            logger.error(
                "Workflow %s failed: %s", self.name, exc, exc_info=True, extra=extra
            )
        else:
            logger.warning("Workflow %s rejected: %s", self.name, failure.message, extra=extra)

        if span:
            span.set_attribute(ATTR_WORKFLOW_SUCCESS, False)
            span.set_attribute(ATTR_FAILURE_KIND, failure.kind.value)
        return failure

    def _succeeded(self, span: Any) -> None:
        if span:
            span.set_attribute(ATTR_WORKFLOW_SUCCESS, True)


def check_lines(
    lines: Sequence[SaleLineRequest],
    config: SalesConfig,
) -> None:
    """
    Validate requested lines before any collaborator is consulted.

    Raises:
        SaleValidationError: If a product appears twice, or a quantity or unit
            price is out of range
    """
    seen: set[UUID] = set()
    for line in lines:
        if line.product_id in seen:
            raise SaleValidationError(
                f"Product {line.product_id} appears more than once in the requested items"
            )
        seen.add(line.product_id)
        validate_quantity(line.quantity, config.max_quantity_per_product)
        validate_unit_price(line.unit_price)
        if len(line.product_name) > config.max_name_length:
            raise SaleValidationError(
                f"Product name must not exceed {config.max_name_length} characters"
            )


__all__ = [
    "SaleWorkflow",
    "check_lines",
]
