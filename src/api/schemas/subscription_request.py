"""Request schemas for Subscription API

Pydantic models for validating incoming HTTP requests.
"""

from datetime import date
from typing import List, Literal, Optional
from pydantic import BaseModel, Field, field_validator
from src.domain.subscription import Frequency


class EnrollItemSchema(BaseModel):
    product_id: int = Field(..., description="Product to subscribe to")

    quantity: int = Field(default=1, ge=1, description="Units per delivery (>= 1)")

    variant_weight: Optional[str] = Field(
        default=None,
        description="Variant weight label, e.g. '1kg'"
    )

    @field_validator('variant_weight')
    @classmethod
    def blank_weight_is_none(cls, v):
        if v is not None and not v.strip():
            return None
        return v


class EnrollRequestSchema(BaseModel):
    """
    Request schema for enrolling subscriptions

    Used for POST /subscriptions endpoint.
    """

    items: List[EnrollItemSchema] = Field(
        ...,
        min_length=1,
        description="Products to subscribe to (at least one)"
    )

    frequency: Frequency = Field(
        ...,
        description="Delivery cadence: daily, weekly or monthly"
    )

    delivery_address_id: int = Field(
        ...,
        description="One of the user's saved addresses"
    )

    start_date: Optional[date] = Field(
        default=None,
        description="First delivery date (defaults to today)"
    )

    force_merge: bool = Field(
        default=False,
        description="Add quantities to existing active subscriptions instead of returning 409"
    )

    payment_method: Literal["wallet", "card", "upi"] = Field(
        default="wallet",
        description="Payment method label"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "items": [
                    {"product_id": 1, "quantity": 2, "variant_weight": "1kg"}
                ],
                "frequency": "weekly",
                "delivery_address_id": 3,
                "start_date": "2024-01-31",
                "force_merge": False,
                "payment_method": "wallet"
            }
        }


class UpdateSubscriptionRequestSchema(BaseModel):
    """
    Request schema for editing a subscription

    Used for PATCH /subscriptions/{id}. Omitted fields are left unchanged.
    """

    quantity: Optional[int] = Field(default=None, ge=1)

    product_id: Optional[int] = Field(
        default=None,
        description="Line to change the quantity of (required for multi-line subscriptions)"
    )

    frequency: Optional[Frequency] = None

    delivery_address_id: Optional[int] = None

    next_delivery_date: Optional[date] = None


class SweepRequestSchema(BaseModel):
    """Request schema for POST /billing/sweep"""

    as_of_date: Optional[date] = Field(
        default=None,
        description="Bill everything due on or before this date (defaults to today)"
    )
