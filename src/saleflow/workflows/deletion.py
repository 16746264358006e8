"""Sale deletion workflow."""

import logging
from uuid import UUID

from saleflow.exceptions import NotFoundError
from saleflow.observability.attributes import ATTR_SALE_ID, ATTR_WORKFLOW
from saleflow.sales.aggregate import Sale
from saleflow.workflows.base import SaleWorkflow
from saleflow.workflows.results import StockOutcome, WorkflowResult

logger = logging.getLogger(__name__)


class DeleteSaleWorkflow(SaleWorkflow):
    """
    Removes a sale from the store and gives back the stock of its active lines.

    Stock is restored after the delete, best-effort, one outcome per line.
    A cancelled sale has no active lines, so deleting it moves no stock.
    """

    name = "delete_sale"
    operation = "deleting the sale"

    async def execute(self, sale_id: UUID) -> WorkflowResult[Sale]:
        with self._tracer.span(
            self.span_name,
            {ATTR_WORKFLOW: self.name, ATTR_SALE_ID: str(sale_id)},
        ) as span:
            logger.info("Deleting sale %s", sale_id, extra={"sale_id": str(sale_id)})
            try:
                sale = await self._load(sale_id)
                to_restore = sale.active_items
                if not await self._store.delete(sale_id):
                    # Deleted concurrently between load and delete
                    raise NotFoundError("Sale", sale_id)
            except Exception as e:
                return WorkflowResult.fail(self._failure(e, span, sale_id))

            sale.record_deleted()
            await self._publish_events(sale)

            outcomes: list[StockOutcome] = []
            for item in to_restore:
                outcomes.append(
                    await self._adjuster.release_best_effort(item.product_id, item.quantity)
                )

            self._succeeded(span)
            logger.info(
                "Deleted sale %s",
                sale_id,
                extra={"sale_id": str(sale_id), "restored_items": len(outcomes)},
            )
            return WorkflowResult.ok(sale, outcomes)


__all__ = ["DeleteSaleWorkflow"]
