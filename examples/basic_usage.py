"""
Basic Usage Example

This example walks a sale through its whole life:
- Setting up products, a customer and a branch
- Creating a sale with tiered quantity discounts
- Updating the sale and watching stock reconcile
- Cancelling one item, then the whole sale
- Handling a rejected request through WorkflowResult

Run with: python examples/basic_usage.py
"""

import asyncio
import logging
from datetime import UTC, datetime
from decimal import Decimal

from saleflow import (
    Branch,
    CreateSaleCommand,
    Customer,
    InMemoryBranchLookup,
    InMemoryCustomerLookup,
    InMemoryEventBus,
    InMemoryProductStockService,
    InMemorySaleStore,
    Product,
    SaleEventLogger,
    SaleLineRequest,
    SalesService,
    UpdateSaleCommand,
)

# =============================================================================
# Step 1: Set up the catalog
# =============================================================================
# Products carry the stock that sale workflows reserve and release.

BEER = Product(name="Beer", price=Decimal("10.00"), stock_quantity=100)
WINE = Product(name="Wine", price=Decimal("45.50"), stock_quantity=30)
CUSTOMER = Customer(name="Alice")
BRANCH = Branch(name="Downtown")


def line(product: Product, quantity: int) -> SaleLineRequest:
    return SaleLineRequest(
        product_id=product.id,
        product_name=product.name,
        quantity=quantity,
        unit_price=product.price,
    )


# =============================================================================
# Step 2: Wire the service
# =============================================================================


async def main():
    """Demonstrate the sale workflows."""
    logging.basicConfig(level=logging.INFO, format="   [log] %(message)s")

    print("=" * 60)
    print("Saleflow Basic Usage Example")
    print("=" * 60)

    products = InMemoryProductStockService(enable_tracing=False)
    products.add(BEER)
    products.add(WINE)

    bus = InMemoryEventBus(enable_tracing=False)
    bus.subscribe_all(SaleEventLogger())

    service = SalesService(
        store=InMemorySaleStore(enable_tracing=False),
        products=products,
        customers=InMemoryCustomerLookup([CUSTOMER]),
        branches=InMemoryBranchLookup([BRANCH]),
        event_bus=bus,
        enable_tracing=False,
    )

    def show_stock() -> None:
        print(f"   Stock: beer={products.stock_of(BEER.id)}, wine={products.stock_of(WINE.id)}")

    # Create a sale: 12 beers earn the 20% tier
    print("\n1. Creating sale S-0001")

    created = await service.create_sale(
        CreateSaleCommand(
            number="S-0001",
            sale_date=datetime.now(UTC),
            customer_id=CUSTOMER.id,
            customer_name=CUSTOMER.name,
            branch_id=BRANCH.id,
            branch_name=BRANCH.name,
            items=[line(BEER, 12), line(WINE, 2)],
        )
    )
    sale = created.value
    for item in sale.items:
        print(
            f"   {item.product_name}: {item.quantity} x ${item.unit_price}"
            f" - ${item.discount} = ${item.total}"
        )
    print(f"   Total: ${sale.total_amount}")
    show_stock()

    # Update: fewer beers, the wine line is removed
    print("\n2. Updating the sale to 5 beers")

    updated = await service.update_sale(
        UpdateSaleCommand(
            sale_id=sale.aggregate_id,
            sale_date=sale.state.sale_date,
            customer_id=CUSTOMER.id,
            customer_name=CUSTOMER.name,
            branch_id=BRANCH.id,
            branch_name=BRANCH.name,
            items=[line(BEER, 5)],
        )
    )
    print(f"   Total: ${updated.value.total_amount}")
    show_stock()

    # Rejected requests come back as failures, not exceptions
    print("\n3. Trying to sell 21 units of one product")

    rejected = await service.create_sale(
        CreateSaleCommand(
            number="S-0002",
            sale_date=datetime.now(UTC),
            customer_id=CUSTOMER.id,
            customer_name=CUSTOMER.name,
            branch_id=BRANCH.id,
            branch_name=BRANCH.name,
            items=[line(BEER, 21)],
        )
    )
    print(f"   Rejected ({rejected.failure.kind.value}): {rejected.message}")

    # Cancel one item, then the whole sale
    print("\n4. Cancelling the beer item")

    result = await service.cancel_item(sale.aggregate_id, BEER.id)
    print(f"   Total: ${result.value.total_amount}")
    show_stock()

    print("\n5. Cancelling the sale")

    result = await service.cancel_sale(sale.aggregate_id)
    print(f"   Cancelled: {result.success}")
    result = await service.cancel_sale(sale.aggregate_id)
    print(f"   Second cancel: {result.message}")

    # Queries
    print("\n6. Listing sales:")
    listing = await service.list_sales()
    for summary in listing.value.items:
        print(
            f"   {summary.number} {summary.status.value} ${summary.total_amount}"
            f" ({summary.item_count} items)"
        )

    print("\n" + "=" * 60)
    print("Example completed successfully!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
