"""
Sale creation workflow.

Creating a sale validates every reference first, then reserves stock for
each line, builds the Sale and saves it. Reservations are journaled, so a
failure anywhere after the first reservation puts the stock back and leaves
no partial state behind.
"""

import logging
from collections.abc import Sequence
from typing import Any
from uuid import UUID

from saleflow.catalog.interface import BranchLookup, CustomerLookup, ProductStockService
from saleflow.catalog.models import Product
from saleflow.exceptions import InsufficientStockError, NotFoundError, SaleValidationError
from saleflow.observability.attributes import (
    ATTR_ITEM_COUNT,
    ATTR_SALE_ID,
    ATTR_SALE_NUMBER,
    ATTR_WORKFLOW,
)
from saleflow.sales.aggregate import Sale, validate_header
from saleflow.stores.interface import SaleStore
from saleflow.workflows.base import SaleWorkflow, check_lines
from saleflow.workflows.commands import CreateSaleCommand, SaleLineRequest
from saleflow.workflows.results import WorkflowResult
from saleflow.workflows.stock import StockJournal

logger = logging.getLogger(__name__)


def deduplicate_lines(
    lines: Sequence[SaleLineRequest],
    reject_duplicates: bool = False,
) -> list[SaleLineRequest]:
    """
    Keep the first line requested for each product.

    Args:
        lines: Lines in request order
        reject_duplicates: Raise instead of dropping later duplicates

    Raises:
        SaleValidationError: If reject_duplicates is set and a product repeats
    """
    unique: dict[UUID, SaleLineRequest] = {}
    for line in lines:
        if line.product_id in unique:
            if reject_duplicates:
                raise SaleValidationError(
                    f"Product {line.product_id} appears more than once in the requested items"
                )
            logger.debug(
                "Dropping duplicate line for product %s",
                line.product_id,
                extra={"product_id": str(line.product_id)},
            )
            continue
        unique[line.product_id] = line
    return list(unique.values())


class CreateSaleWorkflow(SaleWorkflow):
    """
    Creates a sale and takes its quantities out of stock.

    Example:
        >>> workflow = CreateSaleWorkflow(store, products, customers, branches)
        >>> result = await workflow.execute(command)
        >>> result.value.total_amount
        Decimal('96.0000')
    """

    name = "create_sale"
    operation = "creating the sale"

    def __init__(
        self,
        store: SaleStore,
        products: ProductStockService,
        customers: CustomerLookup,
        branches: BranchLookup,
        **kwargs: Any,
    ) -> None:
        super().__init__(store, products, **kwargs)
        self._customers = customers
        self._branches = branches

    async def execute(self, command: CreateSaleCommand) -> WorkflowResult[Sale]:
        with self._tracer.span(
            self.span_name,
            {ATTR_WORKFLOW: self.name, ATTR_SALE_NUMBER: command.number},
        ) as span:
            logger.info(
                "Creating sale %s",
                command.number,
                extra={"number": command.number, "line_count": len(command.items)},
            )
            journal = StockJournal()
            try:
                sale = await self._create(command, journal)
            except Exception as e:
                failure = self._failure(e, span)
                reserved = journal.outcomes
                compensated = await journal.compensate(self._adjuster)
                return WorkflowResult.fail(failure, reserved + compensated)

            await self._publish_events(sale)
            self._succeeded(span)
            if span:
                span.set_attribute(ATTR_SALE_ID, str(sale.aggregate_id))
                span.set_attribute(ATTR_ITEM_COUNT, len(sale.items))
            logger.info(
                "Created sale %s (%s) with %d item(s), total %s",
                sale.number,
                sale.aggregate_id,
                len(sale.items),
                sale.total_amount,
                extra={
                    "sale_id": str(sale.aggregate_id),
                    "number": sale.number,
                    "total_amount": str(sale.total_amount),
                },
            )
            return WorkflowResult.ok(sale, journal.outcomes)

    async def _create(self, command: CreateSaleCommand, journal: StockJournal) -> Sale:
        lines = deduplicate_lines(command.items, self._config.reject_duplicate_lines)
        if not lines:
            raise SaleValidationError("At least one sale item is required")
        validate_header(command.number, command.customer_name, command.branch_name, self._config)
        check_lines(lines, self._config)

        if await self._customers.get_by_id(command.customer_id) is None:
            raise NotFoundError("Customer", command.customer_id)
        if await self._branches.get_by_id(command.branch_id) is None:
            raise NotFoundError("Branch", command.branch_id)

        products = await self._check_availability(lines)

        sale = Sale.open(
            number=command.number,
            sale_date=command.sale_date,
            customer_id=command.customer_id,
            customer_name=command.customer_name,
            branch_id=command.branch_id,
            branch_name=command.branch_name,
            config=self._config,
        )
        for line in lines:
            product = products[line.product_id]
            sale.add_item(
                line.product_id,
                line.product_name or product.name,
                line.quantity,
                line.unit_price,
                max_quantity=self._config.max_quantity_per_product,
                max_name_length=self._config.max_name_length,
            )
        sale.record_created()

        for line in lines:
            journal.record(
                await self._adjuster.reserve(
                    line.product_id, line.quantity, products[line.product_id].name
                )
            )

        return await self._store.save(sale)

    async def _check_availability(
        self, lines: Sequence[SaleLineRequest]
    ) -> dict[UUID, Product]:
        products: dict[UUID, Product] = {}
        for line in lines:
            product = await self._products.get_by_id(line.product_id)
            if product is None:
                raise NotFoundError("Product", line.product_id)
            if product.stock_quantity < line.quantity:
                raise InsufficientStockError(
                    product.id,
                    product.name,
                    available=product.stock_quantity,
                    requested=line.quantity,
                )
            products[line.product_id] = product
        return products


__all__ = [
    "CreateSaleWorkflow",
    "deduplicate_lines",
]
