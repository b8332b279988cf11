"""ChangeSubscriptionStatus Use Case

Pause, resume and cancel transitions of the subscription state machine.
"""

import logging
from datetime import date, datetime
from typing import Optional
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.subscription_repository import SubscriptionRepository
from src.domain.cadence import roll_forward
from src.domain.subscription import SubscriptionStatus, can_transition
from .dtos import SubscriptionDTO
from .mappers import to_subscription_dto

logger = logging.getLogger(__name__)


class ChangeSubscriptionStatus:
    """
    Use Case: Move a subscription to another status

    Business Rules:
    1. Only the owner can change a subscription
    2. Transitions must be allowed by the state machine (Cancelled is terminal)
    3. Resuming re-checks that no other ACTIVE subscription covers the same
       product/variant/frequency
    4. Resuming with a due date in the past rolls it forward on its cadence
       to the first date on or after today (paused cycles are not billed)
    5. Resuming resets the consecutive failure counter
    """

    def __init__(self, uow: UnitOfWork, subscription_repo: SubscriptionRepository):
        self.uow = uow
        self.subscription_repo = subscription_repo

    async def execute(
        self,
        user_id: str,
        subscription_id: int,
        target: SubscriptionStatus,
        today: Optional[date] = None,
    ) -> Result[SubscriptionDTO]:
        try:
            subscription = await self.subscription_repo.get_for_user(user_id, subscription_id)
            if not subscription:
                return Return.err(
                    Error(
                        code="SUBSCRIPTION_NOT_FOUND",
                        message=f"Subscription not found: {subscription_id}",
                    )
                )

            current = SubscriptionStatus(subscription.status)
            if not can_transition(current, target):
                return Return.err(
                    Error(
                        code="INVALID_STATUS_TRANSITION",
                        message=f"Cannot change subscription from {current.value} to {target.value}",
                    )
                )

            items = await self.subscription_repo.get_items(subscription.id)

            if target == SubscriptionStatus.ACTIVE:
                for item in items:
                    clash = await self.subscription_repo.find_active_match(
                        user_id=user_id,
                        product_id=item.product_id,
                        variant_weight=item.variant_weight,
                        frequency=subscription.frequency,
                        exclude_subscription_id=subscription.id,
                    )
                    if clash:
                        return Return.err(
                            Error(
                                code="SUBSCRIPTION_CONFLICT",
                                message=(
                                    f"Subscription {clash.id} is already active for "
                                    f"product {item.product_id} at this frequency"
                                ),
                                details={"existing_subscription_id": clash.id},
                            )
                        )

                today = today or date.today()
                next_date = subscription.next_delivery_date or today
                subscription.next_delivery_date = roll_forward(
                    next_date, subscription.frequency, today
                )
                subscription.consecutive_failures = 0

            subscription.status = target
            subscription.updated_at = datetime.utcnow()
            await self.subscription_repo.update(subscription)
            await self.uow.commit()

            logger.info(
                f"Subscription {subscription.id} of user {user_id}: "
                f"{current.value} -> {target.value}"
            )
            return Return.ok(to_subscription_dto(subscription, items))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="CHANGE_SUBSCRIPTION_STATUS_FAILED",
                    message="Failed to change subscription status",
                    reason=str(e),
                )
            )
