"""Event handler utilities for the saleflow package."""

from saleflow.handlers.adapter import HandlerAdapter, handler_name
from saleflow.handlers.sale_logger import SaleEventLogger

__all__ = [
    "HandlerAdapter",
    "SaleEventLogger",
    "handler_name",
]
