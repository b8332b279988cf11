"""Billing Failure Escalation Policies

Decide what happens to a subscription after a failed billing attempt.
The subscription's consecutive_failures already includes the current failure
when the policy is consulted.
"""

from abc import ABC, abstractmethod
from enum import Enum
from src.domain.subscription import Subscription


class FailureDecision(str, Enum):
    KEEP_ACTIVE = "keep_active"  # Retry on the next tick
    PAUSE = "pause"


class FailureEscalationPolicy(ABC):

    @abstractmethod
    def on_failure(self, subscription: Subscription) -> FailureDecision:
        pass


class RetryForeverPolicy(FailureEscalationPolicy):
    """Never escalate; an underfunded subscription is retried every tick"""

    def on_failure(self, subscription: Subscription) -> FailureDecision:
        return FailureDecision.KEEP_ACTIVE


class PauseAfterFailuresPolicy(FailureEscalationPolicy):
    """Pause a subscription once it has failed max_failures times in a row"""

    def __init__(self, max_failures: int = 3):
        if max_failures < 1:
            raise ValueError("max_failures must be >= 1")
        self.max_failures = max_failures

    def on_failure(self, subscription: Subscription) -> FailureDecision:
        if subscription.consecutive_failures >= self.max_failures:
            return FailureDecision.PAUSE
        return FailureDecision.KEEP_ACTIVE


def build_failure_policy(name: str, max_failures: int = 3) -> FailureEscalationPolicy:
    """
    Build a policy from its configuration name

    Args:
        name: 'retry_forever' or 'pause_after_failures'
        max_failures: Threshold for pause_after_failures

    Raises:
        ValueError: Unknown policy name
    """
    if name == "retry_forever":
        return RetryForeverPolicy()
    if name == "pause_after_failures":
        return PauseAfterFailuresPolicy(max_failures=max_failures)
    raise ValueError(f"Unknown billing failure policy: {name}")
