"""Order Emitter

Pure conversion of a billed subscription cycle into an order snapshot.
"""

from datetime import date, datetime
from typing import List, Optional, Tuple
from src.domain.order import Order, OrderItem, OrderStatus, PaymentStatus, OrderType
from src.domain.subscription import Subscription
from src.app.services.cycle_pricing import CyclePrice


class OrderEmitter:
    """
    Builds Order/OrderItem entities for a billed cycle

    Rules:
    - Prices are copied from the priced cycle, never referenced from the catalog
    - Quantities are the subscription's quantities at billing time
    - Orders start as Processing/Paid with order_type=subscription
    """

    def __init__(self, delivery_slot: Optional[str] = None):
        self.delivery_slot = delivery_slot

    def build(
        self,
        subscription: Subscription,
        cycle: CyclePrice,
        billing_date: date,
        now: Optional[datetime] = None,
    ) -> Tuple[Order, List[OrderItem]]:
        order = Order(
            user_id=subscription.user_id,
            subscription_id=subscription.id,
            shipping_address_id=subscription.delivery_address_id,
            total_amount=cycle.total,
            status=OrderStatus.PROCESSING,
            payment_status=PaymentStatus.PAID,
            payment_method="wallet",
            order_type=OrderType.SUBSCRIPTION,
            billing_date=billing_date,
            delivery_slot=self.delivery_slot,
            created_at=now or datetime.utcnow(),
        )
        # order_id is filled in by the repository once the order row exists
        items = [
            OrderItem(
                product_id=line.product_id,
                product_name=line.product_name,
                quantity=line.quantity,
                unit_price=line.unit_price,
                weight=line.weight,
                line_total=line.line_total,
            )
            for line in cycle.lines
        ]
        return order, items
