"""
Tracing for stores, stock adjustments, workflows and the event bus.

Every traced saleflow component takes an optional ``tracer`` and otherwise
builds one with ``create_tracer(__name__, enable_tracing)``. Spans are used
only as context managers; a component may set attributes or record an
exception on the yielded span when it is not None.

OpenTelemetry is the ``telemetry`` extra. Without it ``create_tracer``
always returns a NullTracer.
"""

from __future__ import annotations

import contextlib
from collections.abc import Iterator
from contextlib import AbstractContextManager
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

try:
    from opentelemetry import trace as otel_trace

    OTEL_AVAILABLE = True
except ImportError:
    OTEL_AVAILABLE = False
    otel_trace = None  # type: ignore[assignment]

Attributes = dict[str, Any]


@runtime_checkable
class Tracer(Protocol):
    """Opens named spans, e.g. ``saleflow.workflow.create_sale``."""

    def span(
        self,
        name: str,
        attributes: Attributes | None = None,
    ) -> AbstractContextManager[Any]: ...


def should_trace(enable_tracing: bool) -> bool:
    """True when tracing was asked for and OpenTelemetry is installed."""
    return enable_tracing and OTEL_AVAILABLE


class NullTracer:
    """Tracer used when tracing is off. Its spans are None."""

    @contextlib.contextmanager
    def span(self, name: str, attributes: Attributes | None = None) -> Iterator[None]:
        yield None


class OpenTelemetryTracer:
    """Opens OpenTelemetry spans on the tracer named after the component."""

    def __init__(self, tracer_name: str) -> None:
        if otel_trace is None:
            raise ImportError("opentelemetry is not installed; install saleflow[telemetry]")
        self._tracer = otel_trace.get_tracer(tracer_name)

    def span(self, name: str, attributes: Attributes | None = None) -> AbstractContextManager[Any]:
        return self._tracer.start_as_current_span(name, attributes=attributes or {})


@dataclass
class RecordedSpan:
    """
    A span captured by MockTracer.

    ``attributes`` holds the attributes the span was opened with plus any set
    while it was open; it stays None if there were none.
    """

    name: str
    attributes: Attributes | None = None
    exceptions: list[BaseException] = field(default_factory=list)

    def set_attribute(self, key: str, value: Any) -> None:
        if self.attributes is None:
            self.attributes = {}
        self.attributes[key] = value

    def record_exception(self, exception: BaseException) -> None:
        self.exceptions.append(exception)


class MockTracer:
    """
    Tracer for tests. Keeps every span it opened, in opening order.

    Example:
        >>> tracer = MockTracer()
        >>> store = InMemorySaleStore(tracer=tracer)
        >>> await store.get(sale_id)
        >>> tracer.span_names
        ['saleflow.sale_store.get']
    """

    def __init__(self) -> None:
        self.spans: list[RecordedSpan] = []

    @contextlib.contextmanager
    def span(self, name: str, attributes: Attributes | None = None) -> Iterator[RecordedSpan]:
        recorded = RecordedSpan(name, dict(attributes) if attributes else None)
        self.spans.append(recorded)
        yield recorded

    @property
    def span_names(self) -> list[str]:
        return [s.name for s in self.spans]

    def find(self, name: str) -> RecordedSpan:
        """The first span with this name. Raises LookupError if none was opened."""
        for recorded in self.spans:
            if recorded.name == name:
                return recorded
        raise LookupError(f"No span named {name!r}; opened: {self.span_names}")

    def clear(self) -> None:
        self.spans.clear()


def create_tracer(name: str, enable_tracing: bool = True) -> Tracer:
    """An OpenTelemetryTracer when should_trace(enable_tracing), else a NullTracer."""
    if should_trace(enable_tracing):
        return OpenTelemetryTracer(name)
    return NullTracer()


__all__ = [
    "OTEL_AVAILABLE",
    "MockTracer",
    "NullTracer",
    "OpenTelemetryTracer",
    "RecordedSpan",
    "Tracer",
    "create_tracer",
    "should_trace",
]
