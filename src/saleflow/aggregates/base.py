"""
Snapshot-persisted aggregate roots.

A sale is stored as one JSON document of its pydantic state plus a version
number. Command methods change the state in place and record the events
that the workflow publishes once the store has accepted the new version.
"""

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Generic, Self, get_args, get_origin
from uuid import UUID

from pydantic import BaseModel

from saleflow.events.base import DomainEvent
from saleflow.types import TState


class AggregateRoot(Generic[TState], ABC):
    """
    Identity, persisted version and pending events of an aggregate.

    Subclasses parameterize the class with their state model and build the
    empty state in ``_get_initial_state``:

        >>> class Sale(AggregateRoot[SaleState]):
        ...     aggregate_type = "Sale"
        ...
        ...     def _get_initial_state(self) -> SaleState:
        ...         return SaleState(sale_id=self.aggregate_id)

    ``version`` is 0 until a store saves the aggregate and reports the
    version it wrote through ``mark_persisted``.
    """

    aggregate_type: str = "Unknown"
    _state_type: ClassVar[type[BaseModel] | None] = None

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        for base in cls.__dict__.get("__orig_bases__", ()):
            origin = get_origin(base)
            if isinstance(origin, type) and issubclass(origin, AggregateRoot):
                args = get_args(base)
                if args and isinstance(args[0], type):
                    cls._state_type = args[0]

    def __init__(self, aggregate_id: UUID) -> None:
        self._aggregate_id = aggregate_id
        self._version = 0
        self._pending: list[DomainEvent] = []
        self._state: TState = self._get_initial_state()

    @abstractmethod
    def _get_initial_state(self) -> TState: ...

    @property
    def aggregate_id(self) -> UUID:
        return self._aggregate_id

    @property
    def version(self) -> int:
        return self._version

    @property
    def is_new(self) -> bool:
        return self._version == 0

    @property
    def state(self) -> TState:
        return self._state

    @property
    def uncommitted_events(self) -> list[DomainEvent]:
        """Events recorded since the last publish, oldest first (a copy)."""
        return list(self._pending)

    @property
    def has_uncommitted_events(self) -> bool:
        return bool(self._pending)

    def _raise_event(self, event: DomainEvent) -> None:
        self._pending.append(event)

    def mark_events_as_committed(self) -> None:
        """Forget recorded events once the workflow has handed them to the bus."""
        self._pending.clear()

    def mark_persisted(self, version: int) -> None:
        if version < self._version:
            raise ValueError(
                f"{self.aggregate_type} {self._aggregate_id}: persisted version cannot go "
                f"backwards ({self._version} -> {version})"
            )
        self._version = version

    def to_snapshot(self) -> dict[str, Any]:
        """State as JSON-ready data: UUIDs, datetimes and Decimals become strings."""
        return self._state.model_dump(mode="json")

    @classmethod
    def from_snapshot(cls, aggregate_id: UUID, state: dict[str, Any], version: int) -> Self:
        """
        Rebuild an aggregate from ``to_snapshot()`` output and its stored version.

        Raises:
            pydantic.ValidationError: If the data does not fit the state model
        """
        if cls._state_type is None:
            raise TypeError(f"{cls.__name__} must subclass AggregateRoot[StateModel]")
        aggregate = cls(aggregate_id)
        aggregate._state = cls._state_type.model_validate(state)  # type: ignore[assignment]
        aggregate._version = version
        return aggregate

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(id={self._aggregate_id}, version={self._version}, "
            f"uncommitted={len(self._pending)})"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AggregateRoot):
            return NotImplemented
        return self._aggregate_id == other._aggregate_id

    def __hash__(self) -> int:
        return hash(self._aggregate_id)


__all__ = ["AggregateRoot"]
