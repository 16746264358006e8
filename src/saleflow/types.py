"""Common type definitions for the saleflow package."""

from typing import TypeVar

from pydantic import BaseModel

# Type variable for aggregate state
TState = TypeVar("TState", bound=BaseModel)
