"""
Standard span attributes for saleflow.

Attribute constants used across all saleflow components for consistent span
naming. Database attributes follow OpenTelemetry semantic conventions.

Example:
    >>> with tracer.span(
    ...     "saleflow.workflow.update_sale",
    ...     {ATTR_SALE_ID: str(sale_id), ATTR_ITEM_COUNT: len(command.items)},
    ... ):
    ...     pass
"""

# =============================================================================
# Sale Attributes
# =============================================================================

ATTR_SALE_ID = "saleflow.sale.id"
"""Unique identifier of the sale (UUID string)."""

ATTR_SALE_NUMBER = "saleflow.sale.number"
"""Business number of the sale."""

ATTR_SALE_STATUS = "saleflow.sale.status"
"""Status of the sale ('Active' or 'Cancelled')."""

ATTR_ITEM_COUNT = "saleflow.sale.item_count"
"""Number of line items in an operation (integer)."""

ATTR_VERSION = "saleflow.sale.version"
"""Persisted version of a sale (integer)."""

ATTR_EXPECTED_VERSION = "saleflow.sale.expected_version"
"""Expected version for optimistic concurrency (integer)."""

# =============================================================================
# Product / Stock Attributes
# =============================================================================

ATTR_PRODUCT_ID = "saleflow.product.id"
"""Unique identifier of a product (UUID string)."""

ATTR_STOCK_DELTA = "saleflow.stock.delta"
"""Signed stock change requested (integer, negative reserves)."""

ATTR_STOCK_ATTEMPTS = "saleflow.stock.attempts"
"""Compare-and-swap attempts used for a stock change (integer)."""

# =============================================================================
# Workflow Attributes
# =============================================================================

ATTR_WORKFLOW = "saleflow.workflow.name"
"""Name of the workflow (e.g., 'create_sale')."""

ATTR_WORKFLOW_SUCCESS = "saleflow.workflow.success"
"""Whether the workflow succeeded (boolean)."""

ATTR_FAILURE_KIND = "saleflow.workflow.failure_kind"
"""Failure kind of an unsuccessful workflow."""

ATTR_PAGE = "saleflow.query.page"
"""Requested page number (integer)."""

ATTR_PAGE_SIZE = "saleflow.query.page_size"
"""Requested page size (integer)."""

# =============================================================================
# Event Attributes
# =============================================================================

ATTR_EVENT_ID = "saleflow.event.id"
"""Unique identifier for the event (UUID string)."""

ATTR_EVENT_TYPE = "saleflow.event.type"
"""Type name of the event (e.g., 'SaleCreated')."""

ATTR_EVENT_COUNT = "saleflow.event.count"
"""Number of events in an operation (integer)."""

ATTR_AGGREGATE_ID = "saleflow.aggregate.id"
"""Aggregate the event belongs to (UUID string)."""

ATTR_HANDLER_NAME = "saleflow.handler.name"
"""Name of the event handler."""

ATTR_HANDLER_COUNT = "saleflow.handler.count"
"""Number of handlers invoked for an event (integer)."""

ATTR_HANDLER_SUCCESS = "saleflow.handler.success"
"""Whether the handler succeeded (boolean)."""

# =============================================================================
# Database Attributes (OpenTelemetry semantic conventions)
# =============================================================================

ATTR_DB_SYSTEM = "db.system"
"""Database system (e.g., 'postgresql', 'sqlite')."""

ATTR_DB_OPERATION = "db.operation"
"""Database operation (e.g., 'SELECT', 'UPDATE')."""
