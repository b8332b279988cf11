"""Get Subscription Use Case

Retrieves one subscription with its billing history and address options.
"""

from libs.result import Result, Return, Error
from src.app.repositories.subscription_repository import SubscriptionRepository
from src.app.repositories.order_repository import OrderRepository
from src.app.repositories.catalog_repository import AddressRepository
from .dtos import SubscriptionDetailDTO
from .mappers import to_subscription_dto, to_order_summary_dto, to_address_dto

HISTORY_LIMIT = 10


class GetSubscription:
    """
    Get Subscription Use Case

    Read-only. History lists the latest orders emitted for the subscription;
    address_list lets the caller offer other delivery addresses.
    """

    def __init__(
        self,
        subscription_repo: SubscriptionRepository,
        order_repo: OrderRepository,
        address_repo: AddressRepository,
    ):
        self.subscription_repo = subscription_repo
        self.order_repo = order_repo
        self.address_repo = address_repo

    async def execute(self, user_id: str, subscription_id: int) -> Result[SubscriptionDetailDTO]:
        """
        Execute get subscription

        Errors:
            SUBSCRIPTION_NOT_FOUND: Unknown id or owned by another user
        """
        subscription = await self.subscription_repo.get_for_user(user_id, subscription_id)
        if not subscription:
            return Return.err(
                Error(
                    code="SUBSCRIPTION_NOT_FOUND",
                    message=f"Subscription not found: {subscription_id}",
                )
            )

        items = await self.subscription_repo.get_items(subscription.id)
        orders = await self.order_repo.list_by_subscription(
            user_id, subscription.id, limit=HISTORY_LIMIT
        )
        history = [
            to_order_summary_dto(order, await self.order_repo.get_items(order.id))
            for order in orders
        ]
        addresses = await self.address_repo.list_by_user(user_id)

        base = to_subscription_dto(subscription, items)
        return Return.ok(
            SubscriptionDetailDTO(
                **base.model_dump(),
                history=history,
                address_list=[to_address_dto(a) for a in addresses],
            )
        )
