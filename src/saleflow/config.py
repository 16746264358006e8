"""
Configuration for sale workflows.

This module provides:
- SalesConfig: Validated, immutable settings shared by every workflow
- DEFAULT_CONFIG: The configuration used when none is supplied
"""

from __future__ import annotations

from dataclasses import dataclass

# Discount tiers are only defined up to this quantity
ABSOLUTE_MAX_QUANTITY = 20


@dataclass(frozen=True)
class SalesConfig:
    """
    Configuration for sale workflows.

    Attributes:
        max_quantity_per_product: Highest quantity a single line item may carry.
        restore_stock_on_item_cancel: Release a cancelled item's quantity back to
            product stock when a single item is cancelled. Whole-sale cancellation
            always restores stock.
        reject_duplicate_lines: When False, sale creation keeps the first line for a
            product and drops later duplicates. When True, duplicates fail validation.
        stock_conflict_retries: Compare-and-swap retries for a stock write that lost
            a race with another writer.
        stock_retry_delay: Initial delay in seconds between stock retries.
        stock_retry_max_delay: Upper bound for the exponential retry delay.
        default_page_size: Page size used by list queries when none is given.
        max_page_size: Upper clamp for list query page sizes.
        publish_in_background: Publish sale events as a fire-and-forget task
            instead of awaiting the handlers.
        max_name_length: Maximum length of customer, branch and product names.
        max_number_length: Maximum length of a sale's business number.

    Example:
        >>> config = SalesConfig(
        ...     restore_stock_on_item_cancel=False,
        ...     stock_conflict_retries=5,
        ... )
    """

    # Line item rules
    max_quantity_per_product: int = ABSOLUTE_MAX_QUANTITY

    # Workflow policies
    restore_stock_on_item_cancel: bool = True
    reject_duplicate_lines: bool = False

    # Stock compare-and-swap retries
    stock_conflict_retries: int = 3
    stock_retry_delay: float = 0.01
    stock_retry_max_delay: float = 0.5

    # Queries
    default_page_size: int = 10
    max_page_size: int = 100

    # Event publishing
    publish_in_background: bool = False

    # Header validation
    max_name_length: int = 100
    max_number_length: int = 50

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not 1 <= self.max_quantity_per_product <= ABSOLUTE_MAX_QUANTITY:
            raise ValueError(
                f"max_quantity_per_product must be between 1 and {ABSOLUTE_MAX_QUANTITY}, "
                f"got {self.max_quantity_per_product}."
            )

        if self.stock_conflict_retries < 0:
            raise ValueError(
                f"stock_conflict_retries must be >= 0, got {self.stock_conflict_retries}. "
                "Use 0 to fail on the first conflict."
            )

        if self.stock_retry_delay < 0:
            raise ValueError(f"stock_retry_delay must be >= 0, got {self.stock_retry_delay}.")

        if self.stock_retry_max_delay < self.stock_retry_delay:
            raise ValueError(
                f"stock_retry_max_delay ({self.stock_retry_max_delay}) must be >= "
                f"stock_retry_delay ({self.stock_retry_delay})."
            )

        if self.default_page_size < 1:
            raise ValueError(
                f"default_page_size must be positive, got {self.default_page_size}."
            )

        if self.max_page_size < self.default_page_size:
            raise ValueError(
                f"max_page_size ({self.max_page_size}) must be >= "
                f"default_page_size ({self.default_page_size})."
            )

        if self.max_name_length < 1:
            raise ValueError(f"max_name_length must be positive, got {self.max_name_length}.")

        if self.max_number_length < 1:
            raise ValueError(
                f"max_number_length must be positive, got {self.max_number_length}."
            )


DEFAULT_CONFIG = SalesConfig()


__all__ = [
    "ABSOLUTE_MAX_QUANTITY",
    "DEFAULT_CONFIG",
    "SalesConfig",
]
