"""Unit tests for OrderEmitter"""

from datetime import date, datetime
from decimal import Decimal

from src.app.services.cycle_pricing import CyclePrice, PricedLine
from src.app.services.order_emitter import OrderEmitter
from src.domain.order import OrderStatus, PaymentStatus, OrderType
from src.domain.subscription import Subscription, Frequency, SubscriptionStatus


def test_build_snapshots_priced_cycle():
    """
    Given: A billed cycle with one priced line
    When: The emitter builds the order
    Then: Order is Processing/Paid/subscription with frozen line prices
    """
    # Arrange
    subscription = Subscription(
        id=7,
        user_id="user_42",
        delivery_address_id=3,
        frequency=Frequency.WEEKLY,
        status=SubscriptionStatus.ACTIVE,
        next_delivery_date=date(2024, 1, 31),
    )
    cycle = CyclePrice(
        lines=[
            PricedLine(
                product_id=1,
                product_name="Basmati Rice",
                quantity=2,
                unit_price=Decimal("102.00"),
                weight="1kg",
                line_total=Decimal("204.00"),
            )
        ],
        total=Decimal("204.00"),
    )
    now = datetime(2024, 1, 31, 9, 0, 0)

    # Act
    order, items = OrderEmitter(delivery_slot="Daily by 9:00 AM").build(
        subscription, cycle, date(2024, 1, 31), now
    )

    # Assert
    assert order.user_id == "user_42"
    assert order.subscription_id == 7
    assert order.shipping_address_id == 3
    assert order.total_amount == Decimal("204.00")
    assert order.status == OrderStatus.PROCESSING
    assert order.payment_status == PaymentStatus.PAID
    assert order.order_type == OrderType.SUBSCRIPTION
    assert order.billing_date == date(2024, 1, 31)
    assert order.delivery_slot == "Daily by 9:00 AM"
    assert order.created_at == now

    assert len(items) == 1
    assert items[0].product_name == "Basmati Rice"
    assert items[0].unit_price == Decimal("102.00")
    assert items[0].quantity == 2
    assert items[0].weight == "1kg"
    assert items[0].line_total == Decimal("204.00")
