"""Data Transfer Objects for Subscription Use Cases

Pydantic models for command inputs and response outputs.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import List, Literal, Optional
from pydantic import BaseModel, Field
from src.domain.subscription import Frequency, SubscriptionStatus


class EnrollmentItemDTO(BaseModel):
    """One requested line of an enrollment"""

    product_id: int = Field(..., description="Product to subscribe to")

    quantity: int = Field(..., ge=1, description="Units per cycle (>= 1)")

    variant_weight: Optional[str] = Field(
        default=None,
        description="Variant weight label; omit for products without variants"
    )


class EnrollCommandDTO(BaseModel):
    """
    Command DTO for enrolling subscriptions

    Used as input to EnrollSubscription use case.
    """

    user_id: str = Field(..., description="Requesting user")

    items: List[EnrollmentItemDTO] = Field(..., min_length=1)

    frequency: Frequency = Field(..., description="daily, weekly or monthly")

    delivery_address_id: int = Field(..., description="Address owned by the user")

    start_date: Optional[date] = Field(
        default=None,
        description="First cycle date (defaults to today)"
    )

    force_merge: bool = Field(
        default=False,
        description="Merge into existing active subscriptions instead of reporting conflicts"
    )

    payment_method: str = Field(default="wallet")

    today: Optional[date] = Field(
        default=None,
        description="Current date override (defaults to date.today())"
    )


class SubscriptionItemDTO(BaseModel):
    product_id: int
    quantity: int
    variant_weight: Optional[str] = None
    variant_price: Optional[Decimal] = None


class SubscriptionDTO(BaseModel):
    """Subscription with its line items"""

    id: int
    user_id: str
    delivery_address_id: int
    frequency: Frequency
    status: SubscriptionStatus
    next_delivery_date: Optional[date] = None
    last_delivery_date: Optional[date] = None
    payment_method: str
    payment_method_token: Optional[str] = None
    consecutive_failures: int = 0
    items: List[SubscriptionItemDTO] = []
    created_at: datetime
    updated_at: datetime


class ConflictDTO(BaseModel):
    """An active subscription that already covers a requested item"""

    product: str = Field(..., description="Display name, e.g. 'Basmati Rice (1kg)'")
    product_id: int
    variant_weight: Optional[str] = None
    existing_subscription_id: int


class EnrollmentResultDTO(BaseModel):
    """
    Response DTO for enrollment

    status='created' carries the created/merged subscriptions;
    status='conflict' carries the conflicts and nothing was written.
    """

    status: Literal["created", "conflict"]
    message: str
    subscriptions: List[SubscriptionDTO] = []
    conflicts: List[ConflictDTO] = []


class UpdateSubscriptionCommandDTO(BaseModel):
    """
    Command DTO for editing a subscription

    Only the provided fields change. quantity applies to the line of
    product_id, or to the only line when product_id is omitted.
    """

    user_id: str
    subscription_id: int
    quantity: Optional[int] = Field(default=None, ge=1)
    product_id: Optional[int] = None
    frequency: Optional[Frequency] = None
    delivery_address_id: Optional[int] = None
    next_delivery_date: Optional[date] = None


class OrderItemDTO(BaseModel):
    product_id: int
    product_name: str
    quantity: int
    unit_price: Decimal
    weight: Optional[str] = None
    line_total: Decimal


class OrderSummaryDTO(BaseModel):
    id: int
    billing_date: Optional[date] = None
    total_amount: Decimal
    status: str
    payment_status: str
    created_at: datetime
    items: List[OrderItemDTO] = []


class AddressDTO(BaseModel):
    id: int
    label: Optional[str] = None
    line1: str
    city: str
    postal_code: str


class SubscriptionDetailDTO(SubscriptionDTO):
    """Subscription plus its billing history and the user's address options"""

    history: List[OrderSummaryDTO] = []
    address_list: List[AddressDTO] = []


class CycleOutcome(str, Enum):
    BILLED = "billed"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    SKIPPED = "skipped"                # Zero total or vanished product/address/wallet
    ALREADY_BILLED = "already_billed"  # Cycle debit already on the ledger
    NOT_DUE = "not_due"                # Changed since discovery (cancelled, paused, advanced)


class BillSubscriptionCommandDTO(BaseModel):
    subscription_id: int
    as_of_date: date
    now: datetime


class BillingCycleResultDTO(BaseModel):
    """Response DTO for one subscription's billing cycle"""

    subscription_id: int
    outcome: CycleOutcome
    amount: Decimal = Decimal("0")
    cycle_date: Optional[date] = None
    order_id: Optional[int] = None
    ledger_entry_id: Optional[int] = None
    next_delivery_date: Optional[date] = None
    paused_by_policy: bool = False
    reason: Optional[str] = None


class SweepResultDTO(BaseModel):
    """
    Result DTO for one billing sweep

    Returned by BillingSchedulerWorker.run_once and the manual sweep endpoint.
    """

    as_of_date: date
    total_due: int = Field(..., description="Subscriptions found due")
    billed: int = 0
    insufficient_funds: int = 0
    skipped: int = 0
    already_billed: int = 0
    errored: int = 0
    paused_by_policy: int = 0
    total_billed_amount: Decimal = Decimal("0")
    order_ids: List[int] = []
    execution_time_ms: int = 0

    class Config:
        json_schema_extra = {
            "example": {
                "as_of_date": "2024-01-31",
                "total_due": 3,
                "billed": 2,
                "insufficient_funds": 1,
                "skipped": 0,
                "already_billed": 0,
                "errored": 0,
                "paused_by_policy": 0,
                "total_billed_amount": "204.00",
                "order_ids": [11, 12],
                "execution_time_ms": 35
            }
        }
