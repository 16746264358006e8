"""
Base class for domain events.

Events are immutable records of things that have happened to a sale. They are
recorded by the aggregate while a workflow mutates it and handed to the event
sink once the sale has been persisted.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Self
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator


class DomainEvent(BaseModel):
    """
    Base class for all domain events with automatic event_type derivation.

    The event_type field is automatically set to the class name if not
    explicitly provided.

    Attributes:
        event_id: Unique identifier for this event instance
        event_type: Type name of the event (auto-derived from class name if not set)
        event_version: Schema version for this event type
        occurred_at: When the event occurred (UTC timestamp)
        aggregate_id: ID of the aggregate this event belongs to
        aggregate_type: Type of aggregate (e.g., 'Sale')
        actor_id: User/system that triggered this event
        correlation_id: ID linking events produced by the same request
        metadata: Additional event metadata dictionary

    Example:
        >>> class SaleCreated(DomainEvent):
        ...     aggregate_type: str = "Sale"
        ...     number: str
        ...
        >>> event = SaleCreated(aggregate_id=uuid4(), number="S-001")
        >>> assert event.event_type == "SaleCreated"
    """

    model_config = ConfigDict(frozen=True)

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier",
    )
    event_type: str = Field(
        default="",
        description="Type of event (auto-derived from class name if not set)",
    )
    event_version: int = Field(
        default=1,
        ge=1,
        description="Event schema version",
    )
    occurred_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="When event occurred (UTC)",
    )

    aggregate_id: UUID = Field(
        ...,
        description="ID of the aggregate this event belongs to",
    )
    aggregate_type: str = Field(
        ...,
        description="Type of aggregate (e.g., 'Sale')",
    )

    actor_id: str | None = Field(
        default=None,
        description="User/system that triggered this event",
    )
    correlation_id: UUID = Field(
        default_factory=uuid4,
        description="ID linking events produced by the same request",
    )
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event metadata",
    )

    @model_validator(mode="before")
    @classmethod
    def _ensure_event_type(cls, data: Any) -> Any:
        """Fill in event_type from the class name when it is not given."""
        if isinstance(data, dict) and not data.get("event_type"):
            data = dict(data)
            data["event_type"] = cls.__name__
        return data

    def __str__(self) -> str:
        return f"{self.event_type}(event_id={self.event_id}, aggregate_id={self.aggregate_id})"

    def with_metadata(self, **kwargs: Any) -> Self:
        """
        Create a copy of this event with additional metadata.

        Example:
            >>> enriched = event.with_metadata(request_id="abc123")
            >>> assert enriched.metadata["request_id"] == "abc123"
        """
        return self.model_copy(update={"metadata": {**self.metadata, **kwargs}})

    def with_correlation(self, correlation_id: UUID) -> Self:
        """Create a copy of this event bound to a request's correlation id."""
        return self.model_copy(update={"correlation_id": correlation_id})

    def to_dict(self) -> dict[str, Any]:
        """
        Convert event to a JSON-compatible dictionary.

        UUIDs, datetimes and Decimals are rendered as strings.
        """
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """
        Create event from dictionary.

        Raises:
            ValidationError: If data doesn't match event schema
        """
        return cls.model_validate(data)


__all__ = ["DomainEvent"]
