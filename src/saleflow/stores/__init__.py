"""Sale persistence."""

from saleflow.stores._connection import execute_with_connection
from saleflow.stores.in_memory import InMemorySaleStore
from saleflow.stores.interface import SalePage, SaleStore
from saleflow.stores.schema import create_schema, drop_schema
from saleflow.stores.sql import SQLAlchemySaleStore

__all__ = [
    "InMemorySaleStore",
    "SQLAlchemySaleStore",
    "SalePage",
    "SaleStore",
    "create_schema",
    "drop_schema",
    "execute_with_connection",
]
