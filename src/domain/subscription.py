"""Subscription Domain Entity

Recurring delivery of a bundle of products billed from the user's wallet.
"""

from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import CheckConstraint, ForeignKey, Integer, Numeric, String, Date
from src.domain.base import BaseModel, IdType


class SubscriptionStatus(str, Enum):
    """Subscription status types"""
    PENDING = "Pending"      # Reserved for a pre-authorization step
    ACTIVE = "Active"        # Eligible for billing
    PAUSED = "Paused"        # Excluded from the sweep, resumable
    CANCELLED = "Cancelled"  # Terminal


class Frequency(str, Enum):
    """Billing cadence"""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


ALLOWED_TRANSITIONS = {
    SubscriptionStatus.PENDING: {SubscriptionStatus.ACTIVE, SubscriptionStatus.CANCELLED},
    SubscriptionStatus.ACTIVE: {SubscriptionStatus.PAUSED, SubscriptionStatus.CANCELLED},
    SubscriptionStatus.PAUSED: {SubscriptionStatus.ACTIVE, SubscriptionStatus.CANCELLED},
    SubscriptionStatus.CANCELLED: set(),
}


def can_transition(current: SubscriptionStatus, target: SubscriptionStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[SubscriptionStatus(current)]


class Subscription(BaseModel, table=True):
    """
    Subscription - A user's recurring order

    Domain Rules:
    - Created directly as ACTIVE once enrollment conflicts are resolved
    - Status transitions follow ALLOWED_TRANSITIONS; CANCELLED is terminal
    - An ACTIVE subscription always has a next_delivery_date
    - One ACTIVE subscription per (user, product, variant weight, frequency),
      enforced by the conflict resolver
    - Billing failures never change status unless the failure policy says so
    """

    __tablename__ = "subscriptions"
    __table_args__ = (
        Index('ix_subscriptions_user_id', 'user_id'),
        Index('ix_subscriptions_status_next_delivery', 'status', 'next_delivery_date'),
        # Purged ids must never be handed out again, billing keys embed them
        {'sqlite_autoincrement': True},
    )

    id: int = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Unique subscription identifier (auto-increment)"
    )

    user_id: str = Field(
        description="Owning user"
    )

    delivery_address_id: int = Field(
        description="Address the recurring orders ship to"
    )

    frequency: Frequency = Field(
        description="Billing cadence (daily, weekly, monthly)"
    )

    status: SubscriptionStatus = Field(
        default=SubscriptionStatus.ACTIVE,
        description="Subscription status (Pending, Active, Paused, Cancelled)"
    )

    next_delivery_date: Optional[date] = Field(
        default=None,
        sa_column=Column(Date, nullable=True),
        description="Next cycle date; due when <= the sweep's as-of date"
    )

    last_delivery_date: Optional[date] = Field(
        default=None,
        sa_column=Column(Date, nullable=True),
        description="Cycle date of the last successful billing"
    )

    payment_method: str = Field(
        default="wallet",
        sa_column=Column(String(20), nullable=False),
        description="Payment method label chosen at enrollment"
    )

    payment_method_token: Optional[str] = Field(
        default=None,
        sa_column=Column(String(64), nullable=True),
        description="Opaque token from the payment tokenizer"
    )

    consecutive_failures: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, default=0),
        description="Failed billing attempts since the last success"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Subscription creation timestamp"
    )

    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Last update timestamp"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "id": 7,
                "user_id": "user_42",
                "delivery_address_id": 3,
                "frequency": "weekly",
                "status": "Active",
                "next_delivery_date": "2024-01-31",
                "last_delivery_date": None,
                "payment_method": "wallet",
                "payment_method_token": "pm_mock_k3j9d0a1b",
                "consecutive_failures": 0,
                "created_at": "2024-01-24T10:00:00Z",
                "updated_at": "2024-01-24T10:00:00Z"
            }
        }


class SubscriptionItem(BaseModel, table=True):
    """
    Subscription Item - One product line of a subscription

    Domain Rules:
    - quantity >= 1
    - variant_weight/variant_price are both set for variant products,
      both empty otherwise
    - position keeps the lines in enrollment order
    """

    __tablename__ = "subscription_items"
    __table_args__ = (
        CheckConstraint('quantity >= 1', name='subscription_item_quantity_positive'),
        Index('ix_subscription_items_subscription_id', 'subscription_id'),
        Index('ix_subscription_items_product', 'product_id', 'variant_weight'),
        {'sqlite_autoincrement': True},
    )

    id: int = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Unique line identifier (auto-increment)"
    )

    subscription_id: int = Field(
        sa_column=Column(IdType, ForeignKey("subscriptions.id", ondelete="CASCADE"), nullable=False),
        description="Foreign key to Subscription"
    )

    position: int = Field(
        default=0,
        description="Order of the line within the subscription"
    )

    product_id: int = Field(
        description="Subscribed product"
    )

    quantity: int = Field(
        description="Units delivered per cycle (>= 1)"
    )

    variant_weight: Optional[str] = Field(
        default=None,
        sa_column=Column(String(50), nullable=True),
        description="Variant weight label (e.g., '1kg')"
    )

    variant_price: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(18, 6), nullable=True),
        description="Variant price captured at enrollment"
    )
