"""Unit tests for the subscription status state machine"""

import pytest

from src.domain.subscription import SubscriptionStatus, can_transition


class TestCanTransition:

    @pytest.mark.parametrize(
        "current, target",
        [
            (SubscriptionStatus.PENDING, SubscriptionStatus.ACTIVE),
            (SubscriptionStatus.PENDING, SubscriptionStatus.CANCELLED),
            (SubscriptionStatus.ACTIVE, SubscriptionStatus.PAUSED),
            (SubscriptionStatus.ACTIVE, SubscriptionStatus.CANCELLED),
            (SubscriptionStatus.PAUSED, SubscriptionStatus.ACTIVE),
            (SubscriptionStatus.PAUSED, SubscriptionStatus.CANCELLED),
        ],
    )
    def test_allowed(self, current, target):
        assert can_transition(current, target)

    @pytest.mark.parametrize(
        "current, target",
        [
            (SubscriptionStatus.ACTIVE, SubscriptionStatus.ACTIVE),
            (SubscriptionStatus.PAUSED, SubscriptionStatus.PAUSED),
            (SubscriptionStatus.ACTIVE, SubscriptionStatus.PENDING),
            (SubscriptionStatus.PENDING, SubscriptionStatus.PAUSED),
        ],
    )
    def test_rejected(self, current, target):
        assert not can_transition(current, target)

    def test_cancelled_is_terminal(self):
        for target in SubscriptionStatus:
            assert not can_transition(SubscriptionStatus.CANCELLED, target)

    def test_accepts_stored_string_value(self):
        assert can_transition("Active", SubscriptionStatus.PAUSED)
