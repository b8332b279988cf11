"""Order Domain Entity

Fulfillment order emitted once per successfully billed subscription cycle.
"""

from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import ForeignKey, Numeric, String, Date
from src.domain.base import BaseModel, IdType


class OrderStatus(str, Enum):
    """Fulfillment status (advanced by the fulfillment subsystem)"""
    PENDING = "Pending"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class PaymentStatus(str, Enum):
    PENDING = "Pending"
    PAID = "Paid"
    FAILED = "Failed"
    REFUNDED = "Refunded"


class OrderType(str, Enum):
    ONE_TIME = "one-time"
    SUBSCRIPTION = "subscription"


class Order(BaseModel, table=True):
    """
    Order - Snapshot of one billed subscription cycle

    Domain Rules:
    - Exactly one order per (subscription_id, billing_date)
    - Item prices are frozen copies taken at billing time
    - total_amount is the sum of order_items.line_total
    - Never mutated by the billing scheduler after creation
    """

    __tablename__ = "orders"
    __table_args__ = (
        Index('ix_orders_user_id', 'user_id'),
        Index('ix_orders_status_created_at', 'status', 'created_at'),
        Index('ix_orders_subscription_cycle', 'subscription_id', 'billing_date', unique=True),
        {'sqlite_autoincrement': True},
    )

    id: int = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Unique order identifier (auto-increment)"
    )

    user_id: str = Field(
        description="Ordering user"
    )

    subscription_id: Optional[int] = Field(
        default=None,
        description="Subscription that produced this order (lookup only)"
    )

    shipping_address_id: int = Field(
        description="Delivery address at billing time"
    )

    total_amount: Decimal = Field(
        sa_column=Column(Numeric(18, 6), nullable=False),
        description="Total charged for the cycle (precision: 18,6)"
    )

    status: OrderStatus = Field(
        default=OrderStatus.PROCESSING,
        description="Fulfillment status"
    )

    payment_status: PaymentStatus = Field(
        default=PaymentStatus.PAID,
        description="Payment status"
    )

    payment_method: str = Field(
        default="wallet",
        sa_column=Column(String(20), nullable=False),
    )

    order_type: OrderType = Field(
        default=OrderType.SUBSCRIPTION,
    )

    billing_date: Optional[date] = Field(
        default=None,
        sa_column=Column(Date, nullable=True),
        description="Subscription cycle date this order pays for"
    )

    delivery_slot: Optional[str] = Field(
        default=None,
        sa_column=Column(String(100), nullable=True),
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Order creation timestamp"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "id": 3,
                "user_id": "user_42",
                "subscription_id": 7,
                "shipping_address_id": 3,
                "total_amount": "102.000000",
                "status": "Processing",
                "payment_status": "Paid",
                "payment_method": "wallet",
                "order_type": "subscription",
                "billing_date": "2024-01-31",
                "delivery_slot": "Daily by 9:00 AM",
                "created_at": "2024-01-31T09:00:00Z"
            }
        }


class OrderItem(BaseModel, table=True):
    """
    Order Item - Frozen line of an order

    Domain Rules:
    - line_total = quantity * unit_price
    - Immutable once written
    """

    __tablename__ = "order_items"
    __table_args__ = (
        Index('ix_order_items_order_id', 'order_id'),
    )

    id: int = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
    )

    order_id: int = Field(
        sa_column=Column(IdType, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False),
    )

    product_id: int

    product_name: str = Field(
        sa_column=Column(String(255), nullable=False),
    )

    quantity: int

    unit_price: Decimal = Field(
        sa_column=Column(Numeric(18, 6), nullable=False),
        description="Discounted unit price at billing time"
    )

    weight: Optional[str] = Field(
        default=None,
        sa_column=Column(String(50), nullable=True),
    )

    line_total: Decimal = Field(
        sa_column=Column(Numeric(18, 6), nullable=False),
    )
