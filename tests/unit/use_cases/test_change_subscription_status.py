"""Unit tests for ChangeSubscriptionStatus use case"""

import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.app.use_cases.subscriptions.change_subscription_status import ChangeSubscriptionStatus
from src.domain.subscription import (
    Frequency,
    Subscription,
    SubscriptionItem,
    SubscriptionStatus,
)


def _subscription(status=SubscriptionStatus.ACTIVE, next_date=date(2024, 1, 31), failures=0):
    return Subscription(
        id=7,
        user_id="user_42",
        delivery_address_id=3,
        frequency=Frequency.WEEKLY,
        status=status,
        next_delivery_date=next_date,
        payment_method="wallet",
        consecutive_failures=failures,
    )


@pytest.fixture
def mock_subscription_repo():
    repo = MagicMock()
    repo.get_for_user = AsyncMock(return_value=_subscription())
    repo.get_items = AsyncMock(
        return_value=[
            SubscriptionItem(
                id=1,
                subscription_id=7,
                position=0,
                product_id=1,
                quantity=2,
                variant_weight="1kg",
                variant_price=Decimal("120"),
            )
        ]
    )
    repo.find_active_match = AsyncMock(return_value=None)
    repo.update = AsyncMock(side_effect=lambda s: s)
    return repo


@pytest.fixture
def use_case(mock_uow, mock_subscription_repo):
    return ChangeSubscriptionStatus(uow=mock_uow, subscription_repo=mock_subscription_repo)


@pytest.mark.asyncio
class TestPause:

    async def test_pause_active(self, use_case, mock_subscription_repo, mock_uow):
        result = await use_case.execute("user_42", 7, SubscriptionStatus.PAUSED)

        assert result.is_ok()
        assert result.value.status == SubscriptionStatus.PAUSED
        assert result.value.next_delivery_date == date(2024, 1, 31)
        mock_subscription_repo.update.assert_called_once()
        mock_uow.commit.assert_called_once()

    async def test_pause_does_not_check_conflicts(self, use_case, mock_subscription_repo):
        await use_case.execute("user_42", 7, SubscriptionStatus.PAUSED)

        mock_subscription_repo.find_active_match.assert_not_called()


@pytest.mark.asyncio
class TestResume:

    async def test_resume_rolls_due_date_forward(self, use_case, mock_subscription_repo):
        """
        Given: Weekly subscription paused with due date Jan 1 and 2 failures
        When: Resumed on Jan 17
        Then: Due date is Jan 22 (next weekly date on or after today), failures reset
        """
        # Arrange
        mock_subscription_repo.get_for_user = AsyncMock(
            return_value=_subscription(
                status=SubscriptionStatus.PAUSED, next_date=date(2024, 1, 1), failures=2
            )
        )

        # Act
        result = await use_case.execute(
            "user_42", 7, SubscriptionStatus.ACTIVE, today=date(2024, 1, 17)
        )

        # Assert
        assert result.is_ok()
        assert result.value.status == SubscriptionStatus.ACTIVE
        assert result.value.next_delivery_date == date(2024, 1, 22)
        assert result.value.consecutive_failures == 0

    async def test_resume_keeps_future_due_date(self, use_case, mock_subscription_repo):
        mock_subscription_repo.get_for_user = AsyncMock(
            return_value=_subscription(status=SubscriptionStatus.PAUSED, next_date=date(2024, 2, 5))
        )

        result = await use_case.execute(
            "user_42", 7, SubscriptionStatus.ACTIVE, today=date(2024, 1, 17)
        )

        assert result.value.next_delivery_date == date(2024, 2, 5)

    async def test_resume_blocked_by_active_duplicate(
        self, use_case, mock_subscription_repo, mock_uow
    ):
        mock_subscription_repo.get_for_user = AsyncMock(
            return_value=_subscription(status=SubscriptionStatus.PAUSED)
        )
        mock_subscription_repo.find_active_match = AsyncMock(return_value=MagicMock(id=9))

        result = await use_case.execute("user_42", 7, SubscriptionStatus.ACTIVE)

        assert result.is_err()
        assert result.error.code == "SUBSCRIPTION_CONFLICT"
        mock_subscription_repo.find_active_match.assert_called_once_with(
            user_id="user_42",
            product_id=1,
            variant_weight="1kg",
            frequency=Frequency.WEEKLY,
            exclude_subscription_id=7,
        )
        mock_subscription_repo.update.assert_not_called()
        mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
class TestInvalidTransitions:

    async def test_cancelled_is_terminal(self, use_case, mock_subscription_repo, mock_uow):
        mock_subscription_repo.get_for_user = AsyncMock(
            return_value=_subscription(status=SubscriptionStatus.CANCELLED)
        )

        result = await use_case.execute("user_42", 7, SubscriptionStatus.ACTIVE)

        assert result.is_err()
        assert result.error.code == "INVALID_STATUS_TRANSITION"
        mock_uow.commit.assert_not_called()

    async def test_pause_already_paused(self, use_case, mock_subscription_repo):
        mock_subscription_repo.get_for_user = AsyncMock(
            return_value=_subscription(status=SubscriptionStatus.PAUSED)
        )

        result = await use_case.execute("user_42", 7, SubscriptionStatus.PAUSED)

        assert result.error.code == "INVALID_STATUS_TRANSITION"

    async def test_cancel_from_paused(self, use_case, mock_subscription_repo):
        mock_subscription_repo.get_for_user = AsyncMock(
            return_value=_subscription(status=SubscriptionStatus.PAUSED)
        )

        result = await use_case.execute("user_42", 7, SubscriptionStatus.CANCELLED)

        assert result.value.status == SubscriptionStatus.CANCELLED

    async def test_not_found(self, use_case, mock_subscription_repo):
        mock_subscription_repo.get_for_user = AsyncMock(return_value=None)

        result = await use_case.execute("user_99", 7, SubscriptionStatus.PAUSED)

        assert result.error.code == "SUBSCRIPTION_NOT_FOUND"
