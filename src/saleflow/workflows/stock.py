"""
Safe stock adjustment on top of a read/write-absolute stock service.

The product stock service only offers "read product" and "set stock to an
absolute value". StockAdjuster turns every mutation into a signed delta with
the precondition ``stock + delta >= 0`` and applies it as a compare-and-swap:

1. Read the current stock
2. Check the precondition (reservations only; releases always pass)
3. Write ``current + delta`` with ``expected_stock=current``
4. On a lost race, back off and start again, up to the configured retries

StockJournal records applied adjustments so a workflow that fails afterwards
can undo them in reverse order.
"""

import asyncio
import logging
import random
from dataclasses import dataclass, field
from uuid import UUID

from saleflow.catalog.interface import ProductStockService
from saleflow.config import DEFAULT_CONFIG, SalesConfig
from saleflow.exceptions import (
    InsufficientStockError,
    NotFoundError,
    StockConflictError,
    StockUpdateError,
)
from saleflow.observability import Tracer, create_tracer
from saleflow.observability.attributes import (
    ATTR_PRODUCT_ID,
    ATTR_STOCK_ATTEMPTS,
    ATTR_STOCK_DELTA,
)
from saleflow.workflows.results import StockOutcome

logger = logging.getLogger(__name__)

# Fraction of the retry delay added or removed at random
RETRY_JITTER = 0.1


@dataclass(frozen=True)
class StockAdjustment:
    """
    A stock change that was written.

    Attributes:
        product_id: Product whose stock changed
        delta: Signed change (negative reserves, positive releases)
        previous_stock: Stock read before the write
        new_stock: Stock written
        attempts: Compare-and-swap attempts it took
    """

    product_id: UUID
    delta: int
    previous_stock: int
    new_stock: int
    attempts: int = 1

    def to_outcome(self) -> StockOutcome:
        return StockOutcome(
            product_id=self.product_id,
            delta=self.delta,
            applied=True,
            previous_stock=self.previous_stock,
            new_stock=self.new_stock,
        )


def calculate_backoff(attempt: int, config: SalesConfig) -> float:
    """
    Delay before the next compare-and-swap attempt.

    Exponential in the 0-based attempt number, capped at
    config.stock_retry_max_delay, with +/- RETRY_JITTER random variation.
    """
    delay = config.stock_retry_delay * (2**attempt)
    delay = min(delay, config.stock_retry_max_delay)

    jitter_range = delay * RETRY_JITTER
    delay += random.uniform(-jitter_range, jitter_range)  # nosec B311 - not crypto

    return max(0.0, delay)


class StockAdjuster:
    """
    Applies signed stock deltas through a ProductStockService.

    Example:
        >>> adjuster = StockAdjuster(products)
        >>> adjustment = await adjuster.reserve(product_id, 12)
        >>> adjustment.new_stock
        88
        >>> await adjuster.release(product_id, 12)
    """

    def __init__(
        self,
        service: ProductStockService,
        config: SalesConfig = DEFAULT_CONFIG,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        self._service = service
        self._config = config
        self._tracer = tracer or create_tracer(__name__, enable_tracing)

    async def adjust(
        self,
        product_id: UUID,
        delta: int,
        product_name: str | None = None,
    ) -> StockAdjustment:
        """
        Apply a signed delta to a product's stock.

        Args:
            product_id: Product to adjust
            delta: Units to add (positive) or remove (negative)
            product_name: Name used in error messages when known

        Returns:
            The adjustment that was written. A zero delta writes nothing.

        Raises:
            NotFoundError: If the product does not exist
            InsufficientStockError: If the stock would become negative
            StockConflictError: If every compare-and-swap attempt lost a race
            StockUpdateError: If the stock service failed on write
        """
        max_attempts = self._config.stock_conflict_retries + 1

        with self._tracer.span(
            "saleflow.stock.adjust",
            {ATTR_PRODUCT_ID: str(product_id), ATTR_STOCK_DELTA: delta},
        ) as span:
            for attempt in range(max_attempts):
                product = await self._service.get_by_id(product_id)
                if product is None:
                    raise NotFoundError("Product", product_id)

                current = product.stock_quantity
                new_stock = current + delta
                if new_stock < 0:
                    raise InsufficientStockError(
                        product_id,
                        product_name or product.name,
                        available=current,
                        requested=-delta,
                    )

                if delta == 0:
                    return StockAdjustment(product_id, 0, current, current, attempt + 1)

                try:
                    written = await self._service.set_stock(
                        product_id, new_stock, expected_stock=current
                    )
                except Exception as e:
                    raise StockUpdateError(product_id, new_stock) from e

                if written:
                    if span:
                        span.set_attribute(ATTR_STOCK_ATTEMPTS, attempt + 1)
                    logger.info(
                        "Adjusted stock of product %s by %+d (%d -> %d)",
                        product_id,
                        delta,
                        current,
                        new_stock,
                        extra={
                            "product_id": str(product_id),
                            "delta": delta,
                            "previous_stock": current,
                            "new_stock": new_stock,
                            "attempts": attempt + 1,
                        },
                    )
                    return StockAdjustment(product_id, delta, current, new_stock, attempt + 1)

                logger.debug(
                    "Stock of product %s changed concurrently (attempt %d/%d)",
                    product_id,
                    attempt + 1,
                    max_attempts,
                    extra={"product_id": str(product_id), "attempt": attempt + 1},
                )
                if attempt + 1 < max_attempts:
                    await asyncio.sleep(calculate_backoff(attempt, self._config))

            if span:
                span.set_attribute(ATTR_STOCK_ATTEMPTS, max_attempts)
            raise StockConflictError(product_id, max_attempts)

    async def reserve(
        self,
        product_id: UUID,
        quantity: int,
        product_name: str | None = None,
    ) -> StockAdjustment:
        """Take quantity units out of stock."""
        return await self.adjust(product_id, -quantity, product_name)

    async def release(self, product_id: UUID, quantity: int) -> StockAdjustment:
        """Put quantity units back into stock."""
        return await self.adjust(product_id, quantity)

    async def release_best_effort(self, product_id: UUID, quantity: int) -> StockOutcome:
        """
        Put quantity units back into stock without raising.

        Failures are logged and reported in the returned outcome.
        """
        try:
            adjustment = await self.release(product_id, quantity)
        except Exception as e:
            logger.error(
                "Failed to restore %d unit(s) of stock for product %s: %s",
                quantity,
                product_id,
                e,
                exc_info=True,
                extra={"product_id": str(product_id), "quantity": quantity},
            )
            return StockOutcome(
                product_id=product_id,
                delta=quantity,
                applied=False,
                error=str(e),
            )
        return adjustment.to_outcome()


@dataclass
class StockJournal:
    """
    Ordered log of stock adjustments applied by one workflow run.

    Example:
        >>> journal = StockJournal()
        >>> journal.record(await adjuster.reserve(product_id, 3))
        >>> ...  # something fails
        >>> await journal.compensate(adjuster)
    """

    adjustments: list[StockAdjustment] = field(default_factory=list)

    def record(self, adjustment: StockAdjustment) -> StockAdjustment:
        if adjustment.delta != 0:
            self.adjustments.append(adjustment)
        return adjustment

    @property
    def outcomes(self) -> list[StockOutcome]:
        return [a.to_outcome() for a in self.adjustments]

    async def compensate(self, adjuster: StockAdjuster) -> list[StockOutcome]:
        """
        Undo every recorded adjustment, most recent first.

        Undoing is best-effort: a failure is logged and the remaining
        adjustments are still undone. The journal is empty afterwards.

        Returns:
            One outcome per compensating adjustment
        """
        outcomes: list[StockOutcome] = []
        for adjustment in reversed(self.adjustments):
            delta = -adjustment.delta
            try:
                undone = await adjuster.adjust(adjustment.product_id, delta)
            except Exception as e:
                logger.error(
                    "Failed to compensate stock adjustment of %+d for product %s: %s",
                    adjustment.delta,
                    adjustment.product_id,
                    e,
                    exc_info=True,
                    extra={"product_id": str(adjustment.product_id), "delta": delta},
                )
                outcomes.append(
                    StockOutcome(
                        product_id=adjustment.product_id,
                        delta=delta,
                        applied=False,
                        error=str(e),
                    )
                )
            else:
                outcomes.append(undone.to_outcome())

        if outcomes:
            logger.info(
                "Compensated %d stock adjustment(s)",
                len(outcomes),
                extra={"compensated": sum(1 for o in outcomes if o.applied)},
            )
        self.adjustments.clear()
        return outcomes


__all__ = [
    "StockAdjuster",
    "StockAdjustment",
    "StockJournal",
    "calculate_backoff",
]
