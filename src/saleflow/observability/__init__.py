"""
Observability utilities for saleflow.

Tracing is composition-based: components accept a ``Tracer`` and fall back
to ``create_tracer(__name__, enable_tracing)``. OpenTelemetry is optional and
every utility here works without it.
"""

from saleflow.observability.attributes import (
    ATTR_AGGREGATE_ID,
    ATTR_DB_OPERATION,
    ATTR_DB_SYSTEM,
    ATTR_EVENT_COUNT,
    ATTR_EVENT_ID,
    ATTR_EVENT_TYPE,
    ATTR_EXPECTED_VERSION,
    ATTR_FAILURE_KIND,
    ATTR_HANDLER_COUNT,
    ATTR_HANDLER_NAME,
    ATTR_HANDLER_SUCCESS,
    ATTR_ITEM_COUNT,
    ATTR_PAGE,
    ATTR_PAGE_SIZE,
    ATTR_PRODUCT_ID,
    ATTR_SALE_ID,
    ATTR_SALE_NUMBER,
    ATTR_SALE_STATUS,
    ATTR_STOCK_ATTEMPTS,
    ATTR_STOCK_DELTA,
    ATTR_VERSION,
    ATTR_WORKFLOW,
    ATTR_WORKFLOW_SUCCESS,
)
from saleflow.observability.tracer import (
    OTEL_AVAILABLE,
    MockTracer,
    NullTracer,
    OpenTelemetryTracer,
    RecordedSpan,
    Tracer,
    create_tracer,
    should_trace,
)

__all__ = [
    # Tracers
    "OTEL_AVAILABLE",
    "MockTracer",
    "NullTracer",
    "OpenTelemetryTracer",
    "RecordedSpan",
    "Tracer",
    "create_tracer",
    "should_trace",
    # Attributes - Sale
    "ATTR_SALE_ID",
    "ATTR_SALE_NUMBER",
    "ATTR_SALE_STATUS",
    "ATTR_ITEM_COUNT",
    "ATTR_VERSION",
    "ATTR_EXPECTED_VERSION",
    # Attributes - Stock
    "ATTR_PRODUCT_ID",
    "ATTR_STOCK_DELTA",
    "ATTR_STOCK_ATTEMPTS",
    # Attributes - Workflow
    "ATTR_WORKFLOW",
    "ATTR_WORKFLOW_SUCCESS",
    "ATTR_FAILURE_KIND",
    "ATTR_PAGE",
    "ATTR_PAGE_SIZE",
    # Attributes - Event
    "ATTR_EVENT_ID",
    "ATTR_EVENT_TYPE",
    "ATTR_EVENT_COUNT",
    "ATTR_AGGREGATE_ID",
    "ATTR_HANDLER_NAME",
    "ATTR_HANDLER_COUNT",
    "ATTR_HANDLER_SUCCESS",
    # Attributes - Database
    "ATTR_DB_SYSTEM",
    "ATTR_DB_OPERATION",
]
