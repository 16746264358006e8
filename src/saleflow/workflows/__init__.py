"""
Sale workflows.

Each workflow loads what it needs, changes the sale and product stock, saves,
and publishes the sale's events. Every workflow returns a WorkflowResult;
none raises for business or infrastructure failures.
"""

from saleflow.workflows.base import SaleWorkflow, check_lines
from saleflow.workflows.cancellation import CancelItemWorkflow, CancelSaleWorkflow
from saleflow.workflows.commands import (
    CreateSaleCommand,
    SaleLineRequest,
    UpdateSaleCommand,
)
from saleflow.workflows.creation import CreateSaleWorkflow, deduplicate_lines
from saleflow.workflows.deletion import DeleteSaleWorkflow
from saleflow.workflows.queries import (
    SaleItemView,
    SalePageView,
    SaleQueries,
    SaleSummaryView,
    SaleView,
    clamp_paging,
)
from saleflow.workflows.reconciler import (
    LineChange,
    ReconciliationPlan,
    UpdateSaleWorkflow,
    plan_reconciliation,
)
from saleflow.workflows.results import (
    Failure,
    FailureKind,
    StockOutcome,
    WorkflowResult,
    failure_from_exception,
)
from saleflow.workflows.stock import (
    StockAdjuster,
    StockAdjustment,
    StockJournal,
    calculate_backoff,
)

__all__ = [
    # Results
    "Failure",
    "FailureKind",
    "StockOutcome",
    "WorkflowResult",
    "failure_from_exception",
    # Commands
    "CreateSaleCommand",
    "SaleLineRequest",
    "UpdateSaleCommand",
    # Stock
    "StockAdjuster",
    "StockAdjustment",
    "StockJournal",
    "calculate_backoff",
    # Workflows
    "CancelItemWorkflow",
    "CancelSaleWorkflow",
    "CreateSaleWorkflow",
    "DeleteSaleWorkflow",
    "SaleWorkflow",
    "UpdateSaleWorkflow",
    "check_lines",
    "deduplicate_lines",
    # Reconciliation
    "LineChange",
    "ReconciliationPlan",
    "plan_reconciliation",
    # Queries
    "SaleItemView",
    "SalePageView",
    "SaleQueries",
    "SaleSummaryView",
    "SaleView",
    "clamp_paging",
]
