"""DeleteSubscription Use Case

Physically removes a subscription at the owner's explicit request.
Orders that reference it are kept.
"""

import logging
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.subscription_repository import SubscriptionRepository

logger = logging.getLogger(__name__)


class DeleteSubscription:

    def __init__(self, uow: UnitOfWork, subscription_repo: SubscriptionRepository):
        self.uow = uow
        self.subscription_repo = subscription_repo

    async def execute(self, user_id: str, subscription_id: int) -> Result[int]:
        try:
            subscription = await self.subscription_repo.get_for_user(user_id, subscription_id)
            if not subscription:
                return Return.err(
                    Error(
                        code="SUBSCRIPTION_NOT_FOUND",
                        message=f"Subscription not found: {subscription_id}",
                    )
                )

            await self.subscription_repo.delete(subscription)
            await self.uow.commit()

            logger.info(f"Deleted subscription {subscription_id} of user {user_id}")
            return Return.ok(subscription_id)

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="DELETE_SUBSCRIPTION_FAILED",
                    message="Failed to delete subscription",
                    reason=str(e),
                )
            )
