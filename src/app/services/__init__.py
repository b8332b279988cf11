from .unit_of_work import UnitOfWork
from .notification_service import NotificationService
from .payment_tokenizer import PaymentTokenizer
from .failure_policy import (
    FailureDecision,
    FailureEscalationPolicy,
    RetryForeverPolicy,
    PauseAfterFailuresPolicy,
    build_failure_policy,
)
from .order_emitter import OrderEmitter

__all__ = [
    "UnitOfWork",
    "NotificationService",
    "PaymentTokenizer",
    "FailureDecision",
    "FailureEscalationPolicy",
    "RetryForeverPolicy",
    "PauseAfterFailuresPolicy",
    "build_failure_policy",
    "OrderEmitter",
]
