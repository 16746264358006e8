"""
saleflow - Sale aggregate and stock-reconciling sale workflows.

This library provides:
- Sale aggregate with tiered quantity discounts and line item cancellation
- Create, update (reconciliation), cancel and delete workflows that keep
  product stock consistent through compare-and-swap stock adjustments
- Uniform WorkflowResult failures instead of exceptions at workflow boundaries
- Sale stores and catalog collaborators with In-Memory and SQLAlchemy backends
- Event Bus for sale domain events
- Optional OpenTelemetry tracing
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("saleflow")
except PackageNotFoundError:
    # Package not installed (running from source without install)
    __version__ = "0.0.0.dev0"

# Aggregates
from saleflow.aggregates.base import AggregateRoot

# Event bus
from saleflow.bus.interface import EventBus, EventHandler, EventHandlerFunc
from saleflow.bus.memory import InMemoryEventBus

# Catalog collaborators
from saleflow.catalog import (
    Branch,
    BranchLookup,
    Customer,
    CustomerLookup,
    InMemoryBranchLookup,
    InMemoryCustomerLookup,
    InMemoryProductStockService,
    Product,
    ProductStockService,
    SQLAlchemyBranchLookup,
    SQLAlchemyCustomerLookup,
    SQLAlchemyProductStockService,
)

# Configuration
from saleflow.config import DEFAULT_CONFIG, SalesConfig

# Events
from saleflow.events import (
    DomainEvent,
    SaleCancelled,
    SaleCreated,
    SaleDeleted,
    SaleEvent,
    SaleItemCancelled,
    SaleModified,
)

# Exceptions
from saleflow.exceptions import (
    AlreadyCancelledError,
    ConcurrencyError,
    DomainRuleViolation,
    DuplicateProductError,
    InfrastructureError,
    InsufficientStockError,
    InvalidQuantityError,
    InvalidUnitPriceError,
    ItemNotFoundError,
    NotFoundError,
    OptimisticLockError,
    SaleCancelledError,
    SaleflowError,
    SaleValidationError,
    StockConflictError,
    StockUpdateError,
)

# Handlers
from saleflow.handlers import SaleEventLogger

# Sales domain
from saleflow.sales import (
    Sale,
    SaleItem,
    SaleState,
    SaleStatus,
    compute_discount,
)
from saleflow.service import SalesService

# Stores
from saleflow.stores import (
    InMemorySaleStore,
    SalePage,
    SaleStore,
    SQLAlchemySaleStore,
    create_schema,
    drop_schema,
)

# Workflows
from saleflow.workflows import (
    CreateSaleCommand,
    Failure,
    FailureKind,
    SaleLineRequest,
    SalePageView,
    SaleView,
    StockAdjuster,
    StockOutcome,
    UpdateSaleCommand,
    WorkflowResult,
)

__all__ = [
    "__version__",
    # Aggregates
    "AggregateRoot",
    # Event bus
    "EventBus",
    "EventHandler",
    "EventHandlerFunc",
    "InMemoryEventBus",
    # Catalog
    "Branch",
    "BranchLookup",
    "Customer",
    "CustomerLookup",
    "InMemoryBranchLookup",
    "InMemoryCustomerLookup",
    "InMemoryProductStockService",
    "Product",
    "ProductStockService",
    "SQLAlchemyBranchLookup",
    "SQLAlchemyCustomerLookup",
    "SQLAlchemyProductStockService",
    # Configuration
    "DEFAULT_CONFIG",
    "SalesConfig",
    # Events
    "DomainEvent",
    "SaleCancelled",
    "SaleCreated",
    "SaleDeleted",
    "SaleEvent",
    "SaleItemCancelled",
    "SaleModified",
    # Exceptions
    "AlreadyCancelledError",
    "ConcurrencyError",
    "DomainRuleViolation",
    "DuplicateProductError",
    "InfrastructureError",
    "InsufficientStockError",
    "InvalidQuantityError",
    "InvalidUnitPriceError",
    "ItemNotFoundError",
    "NotFoundError",
    "OptimisticLockError",
    "SaleCancelledError",
    "SaleflowError",
    "SaleValidationError",
    "StockConflictError",
    "StockUpdateError",
    # Handlers
    "SaleEventLogger",
    # Sales domain
    "Sale",
    "SaleItem",
    "SaleState",
    "SaleStatus",
    "compute_discount",
    # Service
    "SalesService",
    # Stores
    "InMemorySaleStore",
    "SQLAlchemySaleStore",
    "SalePage",
    "SaleStore",
    "create_schema",
    "drop_schema",
    # Workflows
    "CreateSaleCommand",
    "Failure",
    "FailureKind",
    "SaleLineRequest",
    "SalePageView",
    "SaleView",
    "StockAdjuster",
    "StockOutcome",
    "UpdateSaleCommand",
    "WorkflowResult",
]
