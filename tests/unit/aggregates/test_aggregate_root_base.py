"""
Unit tests for AggregateRoot.

Uses a minimal counter aggregate so the base-class behavior is tested apart
from the Sale rules.
"""

from uuid import UUID, uuid4

import pytest
from pydantic import BaseModel, ValidationError

from saleflow.aggregates.base import AggregateRoot
from saleflow.events.base import DomainEvent


class CounterState(BaseModel):
    counter_id: UUID
    value: int = 0


class CounterIncremented(DomainEvent):
    aggregate_type: str = "Counter"
    increment: int = 1


class CounterAggregate(AggregateRoot[CounterState]):
    aggregate_type = "Counter"

    def _get_initial_state(self) -> CounterState:
        return CounterState(counter_id=self.aggregate_id)

    def increment(self, by: int = 1) -> None:
        self._state.value += by
        self._raise_event(CounterIncremented(aggregate_id=self.aggregate_id, increment=by))


class TestAggregateRootInit:
    def test_starts_new_with_initial_state(self) -> None:
        aggregate_id = uuid4()
        counter = CounterAggregate(aggregate_id)

        assert counter.aggregate_id == aggregate_id
        assert counter.version == 0
        assert counter.is_new
        assert counter.state.value == 0
        assert counter.uncommitted_events == []


class TestUncommittedEvents:
    def test_raise_event_records_it(self) -> None:
        counter = CounterAggregate(uuid4())

        counter.increment(3)

        assert counter.has_uncommitted_events
        assert len(counter.uncommitted_events) == 1
        assert counter.uncommitted_events[0].event_type == "CounterIncremented"

    def test_uncommitted_events_returns_copy(self) -> None:
        counter = CounterAggregate(uuid4())
        counter.increment()

        counter.uncommitted_events.clear()

        assert len(counter.uncommitted_events) == 1

    def test_mark_events_as_committed_forgets_them(self) -> None:
        counter = CounterAggregate(uuid4())
        counter.increment()
        counter.increment()

        counter.mark_events_as_committed()

        assert counter.uncommitted_events == []
        assert not counter.has_uncommitted_events


class TestMarkPersisted:
    def test_advances_version(self) -> None:
        counter = CounterAggregate(uuid4())

        counter.mark_persisted(1)

        assert counter.version == 1
        assert not counter.is_new

    def test_rejects_going_backwards(self) -> None:
        counter = CounterAggregate(uuid4())
        counter.mark_persisted(2)

        with pytest.raises(ValueError, match="backwards"):
            counter.mark_persisted(1)


class TestSnapshots:
    def test_round_trip(self) -> None:
        counter = CounterAggregate(uuid4())
        counter.increment(5)

        restored = CounterAggregate.from_snapshot(counter.aggregate_id, counter.to_snapshot(), 4)

        assert restored.state.value == 5
        assert restored.version == 4
        assert not restored.has_uncommitted_events

    def test_snapshot_is_json_compatible(self) -> None:
        counter = CounterAggregate(uuid4())

        snapshot = counter.to_snapshot()

        assert snapshot["counter_id"] == str(counter.aggregate_id)

    def test_invalid_snapshot_raises(self) -> None:
        with pytest.raises(ValidationError):
            CounterAggregate.from_snapshot(uuid4(), {"value": "not a number"}, 1)

    def test_subclass_keeps_the_state_model(self) -> None:
        class LoudCounter(CounterAggregate):
            pass

        restored = LoudCounter.from_snapshot(uuid4(), {"counter_id": str(uuid4()), "value": 2}, 1)

        assert restored.state.value == 2

    def test_unparameterized_subclass_cannot_restore(self) -> None:
        class Untyped(AggregateRoot):  # type: ignore[type-arg]
            def _get_initial_state(self) -> CounterState:
                return CounterState(counter_id=self.aggregate_id)

        with pytest.raises(TypeError, match="AggregateRoot\\[StateModel\\]"):
            Untyped.from_snapshot(uuid4(), {}, 1)


class TestIdentity:
    def test_equality_by_id(self) -> None:
        aggregate_id = uuid4()
        a = CounterAggregate(aggregate_id)
        b = CounterAggregate(aggregate_id)
        b.increment()

        assert a == b
        assert hash(a) == hash(b)
        assert a != CounterAggregate(uuid4())

    def test_repr_mentions_id_and_version(self) -> None:
        counter = CounterAggregate(uuid4())

        assert str(counter.aggregate_id) in repr(counter)
        assert "version=0" in repr(counter)
