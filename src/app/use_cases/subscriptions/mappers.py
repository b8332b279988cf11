"""Entity -> DTO conversion shared by the subscription use cases"""

from typing import List
from src.domain.address import Address
from src.domain.order import Order, OrderItem
from src.domain.subscription import Subscription, SubscriptionItem
from .dtos import (
    AddressDTO,
    OrderItemDTO,
    OrderSummaryDTO,
    SubscriptionDTO,
    SubscriptionItemDTO,
)


def to_subscription_dto(subscription: Subscription, items: List[SubscriptionItem]) -> SubscriptionDTO:
    return SubscriptionDTO(
        id=subscription.id,
        user_id=subscription.user_id,
        delivery_address_id=subscription.delivery_address_id,
        frequency=subscription.frequency,
        status=subscription.status,
        next_delivery_date=subscription.next_delivery_date,
        last_delivery_date=subscription.last_delivery_date,
        payment_method=subscription.payment_method,
        payment_method_token=subscription.payment_method_token,
        consecutive_failures=subscription.consecutive_failures or 0,
        items=[
            SubscriptionItemDTO(
                product_id=item.product_id,
                quantity=item.quantity,
                variant_weight=item.variant_weight,
                variant_price=item.variant_price,
            )
            for item in items
        ],
        created_at=subscription.created_at,
        updated_at=subscription.updated_at,
    )


def to_order_summary_dto(order: Order, items: List[OrderItem]) -> OrderSummaryDTO:
    return OrderSummaryDTO(
        id=order.id,
        billing_date=order.billing_date,
        total_amount=order.total_amount,
        status=getattr(order.status, "value", order.status),
        payment_status=getattr(order.payment_status, "value", order.payment_status),
        created_at=order.created_at,
        items=[
            OrderItemDTO(
                product_id=item.product_id,
                product_name=item.product_name,
                quantity=item.quantity,
                unit_price=item.unit_price,
                weight=item.weight,
                line_total=item.line_total,
            )
            for item in items
        ],
    )


def to_address_dto(address: Address) -> AddressDTO:
    return AddressDTO(
        id=address.id,
        label=address.label,
        line1=address.line1,
        city=address.city,
        postal_code=address.postal_code,
    )
