"""
Uniform result type for sale workflows.

Every workflow returns a WorkflowResult instead of raising. Exceptions from
the aggregate and from collaborators are translated at the workflow boundary
by failure_from_exception(), so callers handle exactly one shape:

    >>> result = await service.update_sale(command)
    >>> if not result.success:
    ...     print(result.failure.kind, result.failure.message)

Stock changes made along the way are reported per product in
stock_outcomes, including best-effort releases that failed.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar
from uuid import UUID

from saleflow.exceptions import (
    ConcurrencyError,
    DomainRuleViolation,
    InsufficientStockError,
    NotFoundError,
    OptimisticLockError,
    SaleValidationError,
    StockConflictError,
)

T = TypeVar("T")


class FailureKind(str, Enum):
    """Category of a workflow failure."""

    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    DOMAIN_RULE = "domain_rule"
    CONFLICT = "conflict"
    INFRASTRUCTURE = "infrastructure"


@dataclass(frozen=True)
class Failure:
    """
    Why a workflow did not succeed.

    Attributes:
        kind: Failure category
        message: Human-readable message, safe to show to a caller
        details: Structured context (ids, quantities) for programmatic use
    """

    kind: FailureKind
    message: str
    details: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class StockOutcome:
    """
    One stock change attempted by a workflow.

    Attributes:
        product_id: Product whose stock was changed
        delta: Signed change requested (negative reserves, positive releases)
        applied: Whether the change was written
        previous_stock: Stock before the change, when known
        new_stock: Stock after the change, when applied
        error: Why the change was not applied
    """

    product_id: UUID
    delta: int
    applied: bool
    previous_stock: int | None = None
    new_stock: int | None = None
    error: str | None = None


@dataclass(frozen=True)
class WorkflowResult(Generic[T]):
    """
    Outcome of a workflow.

    Attributes:
        success: True if the workflow completed
        value: The workflow's return value on success
        failure: Failure details when success is False
        stock_outcomes: Stock changes attempted, in order
    """

    success: bool
    value: T | None = None
    failure: Failure | None = None
    stock_outcomes: tuple[StockOutcome, ...] = ()

    @classmethod
    def ok(
        cls,
        value: T | None = None,
        stock_outcomes: tuple[StockOutcome, ...] | list[StockOutcome] = (),
    ) -> "WorkflowResult[T]":
        return cls(success=True, value=value, stock_outcomes=tuple(stock_outcomes))

    @classmethod
    def fail(
        cls,
        failure: Failure,
        stock_outcomes: tuple[StockOutcome, ...] | list[StockOutcome] = (),
    ) -> "WorkflowResult[T]":
        return cls(success=False, failure=failure, stock_outcomes=tuple(stock_outcomes))

    @property
    def message(self) -> str:
        """Failure message, or an empty string on success."""
        return self.failure.message if self.failure else ""

    @property
    def failed_releases(self) -> list[StockOutcome]:
        """Stock releases that could not be applied."""
        return [o for o in self.stock_outcomes if not o.applied and o.delta > 0]


def failure_from_exception(exc: Exception, operation: str) -> Failure:
    """
    Translate an exception into a Failure.

    Known saleflow exceptions keep their message. Anything else is reported
    as an infrastructure failure with a generic message; the caller is
    expected to log the exception itself.

    Args:
        exc: The exception raised while running the workflow
        operation: What was being done, e.g. "updating the sale"
    """
    if isinstance(exc, NotFoundError):
        return Failure(
            FailureKind.NOT_FOUND,
            str(exc),
            {"entity": exc.entity, "entity_id": str(exc.entity_id)},
        )
    if isinstance(exc, SaleValidationError):
        return Failure(FailureKind.VALIDATION, str(exc))
    if isinstance(exc, InsufficientStockError):
        return Failure(
            FailureKind.DOMAIN_RULE,
            str(exc),
            {
                "product_id": str(exc.product_id),
                "available": exc.available,
                "requested": exc.requested,
            },
        )
    if isinstance(exc, DomainRuleViolation):
        return Failure(FailureKind.DOMAIN_RULE, str(exc))
    if isinstance(exc, OptimisticLockError):
        return Failure(
            FailureKind.CONFLICT,
            "The sale was modified concurrently; reload it and try again",
            {
                "sale_id": str(exc.sale_id),
                "expected_version": exc.expected_version,
                "actual_version": exc.actual_version,
            },
        )
    if isinstance(exc, StockConflictError):
        return Failure(
            FailureKind.CONFLICT,
            str(exc),
            {"product_id": str(exc.product_id), "attempts": exc.attempts},
        )
    if isinstance(exc, ConcurrencyError):
        return Failure(FailureKind.CONFLICT, str(exc))
    return Failure(
        FailureKind.INFRASTRUCTURE,
        f"An internal error occurred while {operation}",
    )


__all__ = [
    "Failure",
    "FailureKind",
    "StockOutcome",
    "WorkflowResult",
    "failure_from_exception",
]
