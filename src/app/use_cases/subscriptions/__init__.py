"""Subscription domain use cases"""
from .enroll_subscription import EnrollSubscription
from .change_subscription_status import ChangeSubscriptionStatus
from .update_subscription import UpdateSubscription
from .delete_subscription import DeleteSubscription
from .list_subscriptions import ListSubscriptions
from .get_subscription import GetSubscription
from .bill_subscription_cycle import BillSubscriptionCycle, cycle_idempotency_key
from .conflict_resolver import ConflictResolver, combine_requested_items
from .dtos import (
    EnrollmentItemDTO,
    EnrollCommandDTO,
    SubscriptionItemDTO,
    SubscriptionDTO,
    ConflictDTO,
    EnrollmentResultDTO,
    UpdateSubscriptionCommandDTO,
    OrderItemDTO,
    OrderSummaryDTO,
    AddressDTO,
    SubscriptionDetailDTO,
    CycleOutcome,
    BillSubscriptionCommandDTO,
    BillingCycleResultDTO,
    SweepResultDTO,
)

__all__ = [
    "EnrollSubscription",
    "ChangeSubscriptionStatus",
    "UpdateSubscription",
    "DeleteSubscription",
    "ListSubscriptions",
    "GetSubscription",
    "BillSubscriptionCycle",
    "cycle_idempotency_key",
    "ConflictResolver",
    "combine_requested_items",
    "EnrollmentItemDTO",
    "EnrollCommandDTO",
    "SubscriptionItemDTO",
    "SubscriptionDTO",
    "ConflictDTO",
    "EnrollmentResultDTO",
    "UpdateSubscriptionCommandDTO",
    "OrderItemDTO",
    "OrderSummaryDTO",
    "AddressDTO",
    "SubscriptionDetailDTO",
    "CycleOutcome",
    "BillSubscriptionCommandDTO",
    "BillingCycleResultDTO",
    "SweepResultDTO",
]
