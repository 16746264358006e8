"""Aggregate base class for the saleflow package."""

from saleflow.aggregates.base import AggregateRoot
from saleflow.types import TState

__all__ = [
    "AggregateRoot",
    "TState",
]
