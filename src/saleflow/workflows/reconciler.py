"""
Order update reconciliation.

An update request carries the desired end state of a sale's active lines.
Reconciliation diffs it against the sale and applies the minimal changes:

- removed: active products missing from the request give their stock back
  and their line is deleted
- matched: products on both sides have their quantity changed, taking or
  giving back the difference
- added: requested products without an active line take stock and get a
  new line at the requested unit price

Cancelled lines are history. They never take part in the diff, so asking for
a product whose only line is cancelled adds a fresh line.

The workflow runs in two phases. Planning reads the sale and the stock and
rejects the request before anything is written. Applying then runs removed,
matched and added in that order through the stock adjuster, journaling every
change so a later failure can give the stock back.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any
from uuid import UUID

from saleflow.catalog.interface import BranchLookup, CustomerLookup, ProductStockService
from saleflow.catalog.models import Product
from saleflow.exceptions import (
    InsufficientStockError,
    NotFoundError,
    SaleCancelledError,
    SaleValidationError,
)
from saleflow.observability.attributes import (
    ATTR_ITEM_COUNT,
    ATTR_SALE_ID,
    ATTR_VERSION,
    ATTR_WORKFLOW,
)
from saleflow.sales.aggregate import Sale, validate_header
from saleflow.stores.interface import SaleStore
from saleflow.workflows.base import SaleWorkflow, check_lines
from saleflow.workflows.commands import SaleLineRequest, UpdateSaleCommand
from saleflow.workflows.results import WorkflowResult
from saleflow.workflows.stock import StockJournal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LineChange:
    """
    Planned change for one product.

    Attributes:
        product_id: Product the line refers to
        product_name: Name used for new lines and error messages
        current_quantity: Active quantity on the sale (0 when added)
        requested_quantity: Quantity requested (0 when removed)
        unit_price: Unit price for a new line
    """

    product_id: UUID
    product_name: str
    current_quantity: int
    requested_quantity: int
    unit_price: Decimal = Decimal("0")

    @property
    def delta(self) -> int:
        """Change in sold quantity. Stock moves by the opposite amount."""
        return self.requested_quantity - self.current_quantity


@dataclass(frozen=True)
class ReconciliationPlan:
    """The removed, matched and added lines of an update, in apply order."""

    removed: list[LineChange] = field(default_factory=list)
    matched: list[LineChange] = field(default_factory=list)
    added: list[LineChange] = field(default_factory=list)

    @property
    def changed(self) -> list[LineChange]:
        """Matched lines whose quantity differs."""
        return [change for change in self.matched if change.delta != 0]

    @property
    def stock_requirements(self) -> list[LineChange]:
        """Lines that take stock: every added line and every matched increase."""
        return [c for c in self.matched if c.delta > 0] + list(self.added)


def plan_reconciliation(sale: Sale, lines: Sequence[SaleLineRequest]) -> ReconciliationPlan:
    """
    Diff a sale's active lines against the requested ones.

    Removed and matched lines follow the sale's line order; added lines
    follow the request order.
    """
    requested = {line.product_id: line for line in lines}
    active = {item.product_id: item for item in sale.active_items}

    removed = [
        LineChange(item.product_id, item.product_name, item.quantity, 0, item.unit_price)
        for product_id, item in active.items()
        if product_id not in requested
    ]
    matched = [
        LineChange(
            item.product_id,
            item.product_name,
            item.quantity,
            requested[product_id].quantity,
            item.unit_price,
        )
        for product_id, item in active.items()
        if product_id in requested
    ]
    added = [
        LineChange(
            line.product_id,
            line.product_name,
            0,
            line.quantity,
            line.unit_price,
        )
        for product_id, line in requested.items()
        if product_id not in active
    ]
    return ReconciliationPlan(removed=removed, matched=matched, added=added)


class UpdateSaleWorkflow(SaleWorkflow):
    """
    Replaces a sale's header and reconciles its lines with product stock.

    Example:
        >>> workflow = UpdateSaleWorkflow(store, products, customers, branches)
        >>> result = await workflow.execute(command)
        >>> if not result.success:
        ...     print(result.message)
    """

    name = "update_sale"
    operation = "updating the sale"

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

    async def execute(self, command: UpdateSaleCommand) -> WorkflowResult[Sale]:
        sale_id = command.sale_id
        with self._tracer.span(
            self.span_name,
            {ATTR_WORKFLOW: self.name, ATTR_SALE_ID: str(sale_id)},
        ) as span:
            logger.info(
                "Updating sale %s",
                sale_id,
                extra={"sale_id": str(sale_id), "line_count": len(command.items)},
            )
            journal = StockJournal()
            try:
                sale = await self._load(sale_id)
                plan = await self.plan(sale, command)
                await self._apply(sale, plan, command, journal)
                sale = await self._store.save(sale)
            except Exception as e:
                failure = self._failure(e, span, sale_id)
                applied = journal.outcomes
                compensated = await journal.compensate(self._adjuster)
                return WorkflowResult.fail(failure, applied + compensated)

            await self._publish_events(sale)
            self._succeeded(span)
            if span:
                span.set_attribute(ATTR_VERSION, sale.version)
                span.set_attribute(ATTR_ITEM_COUNT, len(sale.active_items))
            logger.info(
                "Updated sale %s: %d removed, %d changed, %d added, total %s",
                sale_id,
                len(plan.removed),
                len(plan.changed),
                len(plan.added),
                sale.total_amount,
                extra={
                    "sale_id": str(sale_id),
                    "version": sale.version,
                    "total_amount": str(sale.total_amount),
                },
            )
            return WorkflowResult.ok(sale, journal.outcomes)

    async def plan(self, sale: Sale, command: UpdateSaleCommand) -> ReconciliationPlan:
        """
        Validate an update against the sale and current stock.

        Nothing is written. Every stock increase is checked here so that a
        request that cannot be satisfied is rejected before any product's
        stock changes.

        Raises:
            SaleCancelledError: If the sale is cancelled
            SaleValidationError: If the header or a line is invalid
            NotFoundError: If the customer, branch or a product does not exist
            InsufficientStockError: If a product lacks stock for its increase
        """
        if sale.is_cancelled:
            raise SaleCancelledError(sale.aggregate_id)

        validate_header(sale.number, command.customer_name, command.branch_name, self._config)
        if not command.items:
            raise SaleValidationError("At least one sale item is required")
        check_lines(command.items, self._config)

        if await self._customers.get_by_id(command.customer_id) is None:
            raise NotFoundError("Customer", command.customer_id)
        if await self._branches.get_by_id(command.branch_id) is None:
            raise NotFoundError("Branch", command.branch_id)

        plan = plan_reconciliation(sale, command.items)
        products: dict[UUID, Product] = {}
        for change in plan.stock_requirements:
            product = await self._products.get_by_id(change.product_id)
            if product is None:
                raise NotFoundError("Product", change.product_id)
            if product.stock_quantity < change.delta:
                raise InsufficientStockError(
                    product.id,
                    product.name,
                    available=product.stock_quantity,
                    requested=change.delta,
                )
            products[product.id] = product

        # Added lines without a name take the product's
        added = [
            change
            if change.product_name
            else LineChange(
                change.product_id,
                products[change.product_id].name,
                change.current_quantity,
                change.requested_quantity,
                change.unit_price,
            )
            for change in plan.added
        ]
        return ReconciliationPlan(removed=plan.removed, matched=plan.matched, added=added)

    async def _apply(
        self,
        sale: Sale,
        plan: ReconciliationPlan,
        command: UpdateSaleCommand,
        journal: StockJournal,
    ) -> None:
        max_quantity = self._config.max_quantity_per_product

        for change in plan.removed:
            logger.debug(
                "Removing product %s from sale %s",
                change.product_id,
                sale.aggregate_id,
                extra={"sale_id": str(sale.aggregate_id), "product_id": str(change.product_id)},
            )
            journal.record(await self._adjuster.release(change.product_id, change.current_quantity))
            sale.remove_item(change.product_id)

        for change in plan.matched:
            logger.debug(
                "Changing quantity of product %s on sale %s from %d to %d",
                change.product_id,
                sale.aggregate_id,
                change.current_quantity,
                change.requested_quantity,
                extra={"sale_id": str(sale.aggregate_id), "product_id": str(change.product_id)},
            )
            if change.delta > 0:
                journal.record(
                    await self._adjuster.reserve(
                        change.product_id, change.delta, change.product_name
                    )
                )
            elif change.delta < 0:
                journal.record(await self._adjuster.release(change.product_id, -change.delta))
            sale.update_item(change.product_id, change.requested_quantity, max_quantity=max_quantity)

        for change in plan.added:
            logger.debug(
                "Adding product %s to sale %s",
                change.product_id,
                sale.aggregate_id,
                extra={"sale_id": str(sale.aggregate_id), "product_id": str(change.product_id)},
            )
            journal.record(
                await self._adjuster.reserve(
                    change.product_id, change.requested_quantity, change.product_name
                )
            )
            sale.add_item(
                change.product_id,
                change.product_name,
                change.requested_quantity,
                change.unit_price,
                max_quantity=max_quantity,
                max_name_length=self._config.max_name_length,
            )

        sale.update_details(
            sale_date=command.sale_date,
            customer_id=command.customer_id,
            customer_name=command.customer_name,
            branch_id=command.branch_id,
            branch_name=command.branch_name,
            config=self._config,
        )
        sale.record_modified(
            added=[c.product_id for c in plan.added],
            removed=[c.product_id for c in plan.removed],
            changed=[c.product_id for c in plan.changed],
        )


__all__ = [
    "LineChange",
    "ReconciliationPlan",
    "UpdateSaleWorkflow",
    "plan_reconciliation",
]
