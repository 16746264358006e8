"""
Sale and line item cancellation.

Cancelling is committed first and stock is given back afterwards. Restoring
stock is best-effort: a product whose stock cannot be restored is logged and
reported as a failed StockOutcome, and the cancellation still succeeds.
"""

import logging
from uuid import UUID

from saleflow.exceptions import NotFoundError
from saleflow.observability.attributes import (
    ATTR_PRODUCT_ID,
    ATTR_SALE_ID,
    ATTR_SALE_STATUS,
    ATTR_WORKFLOW,
)
from saleflow.sales.aggregate import Sale
from saleflow.workflows.base import SaleWorkflow
from saleflow.workflows.results import StockOutcome, WorkflowResult

logger = logging.getLogger(__name__)


class CancelSaleWorkflow(SaleWorkflow):
    """
    Cancels a whole sale and gives back the stock of its active lines.

    Example:
        >>> result = await CancelSaleWorkflow(store, products).execute(sale_id)
        >>> result.value.total_amount
        Decimal('0')
        >>> result.failed_releases
        []
    """

    name = "cancel_sale"
    operation = "cancelling the sale"

    async def execute(self, sale_id: UUID) -> WorkflowResult[Sale]:
        with self._tracer.span(
            self.span_name,
            {ATTR_WORKFLOW: self.name, ATTR_SALE_ID: str(sale_id)},
        ) as span:
            logger.info("Cancelling sale %s", sale_id, extra={"sale_id": str(sale_id)})
            try:
                sale = await self._load(sale_id)
                released = sale.cancel()
                sale = await self._store.save(sale)
            except Exception as e:
                return WorkflowResult.fail(self._failure(e, span, sale_id))

            outcomes: list[StockOutcome] = []
            for item in released:
                outcomes.append(
                    await self._adjuster.release_best_effort(item.product_id, item.quantity)
                )

            await self._publish_events(sale)
            self._succeeded(span)
            if span:
                span.set_attribute(ATTR_SALE_STATUS, sale.status.value)

            failed = sum(1 for o in outcomes if not o.applied)
            logger.info(
                "Cancelled sale %s; restored stock for %d of %d item(s)",
                sale_id,
                len(outcomes) - failed,
                len(outcomes),
                extra={"sale_id": str(sale_id), "failed_restores": failed},
            )
            return WorkflowResult.ok(sale, outcomes)


class CancelItemWorkflow(SaleWorkflow):
    """
    Cancels one product's line on a sale.

    The line stays on the sale with a zero total. Its quantity is given back
    to stock unless the configuration turns that off.
    """

    name = "cancel_item"
    operation = "cancelling the sale item"

    async def execute(self, sale_id: UUID, product_id: UUID) -> WorkflowResult[Sale]:
        with self._tracer.span(
            self.span_name,
            {
                ATTR_WORKFLOW: self.name,
                ATTR_SALE_ID: str(sale_id),
                ATTR_PRODUCT_ID: str(product_id),
            },
        ) as span:
            logger.info(
                "Cancelling item of product %s on sale %s",
                product_id,
                sale_id,
                extra={"sale_id": str(sale_id), "product_id": str(product_id)},
            )
            try:
                sale = await self._load(sale_id)
                if await self._products.get_by_id(product_id) is None:
                    raise NotFoundError("Product", product_id)
                item = sale.cancel_item(product_id)
                sale = await self._store.save(sale)
            except Exception as e:
                return WorkflowResult.fail(self._failure(e, span, sale_id))

            outcomes: list[StockOutcome] = []
            if self._config.restore_stock_on_item_cancel:
                outcomes.append(
                    await self._adjuster.release_best_effort(product_id, item.quantity)
                )

            await self._publish_events(sale)
            self._succeeded(span)
            logger.info(
                "Cancelled item of product %s on sale %s; new total %s",
                product_id,
                sale_id,
                sale.total_amount,
                extra={
                    "sale_id": str(sale_id),
                    "product_id": str(product_id),
                    "total_amount": str(sale.total_amount),
                },
            )
            return WorkflowResult.ok(sale, outcomes)


__all__ = [
    "CancelItemWorkflow",
    "CancelSaleWorkflow",
]
