"""
List Subscriptions Use Case

Retrieves all of a user's subscriptions, newest first.
"""
from typing import List
from libs.result import Result, Return
from src.app.repositories.subscription_repository import SubscriptionRepository
from .dtos import SubscriptionDTO
from .mappers import to_subscription_dto


class ListSubscriptions:

    def __init__(self, subscription_repo: SubscriptionRepository):
        self.subscription_repo = subscription_repo

    async def execute(self, user_id: str) -> Result[List[SubscriptionDTO]]:
        subscriptions = await self.subscription_repo.list_by_user(user_id)

        dtos = []
        for subscription in subscriptions:
            items = await self.subscription_repo.get_items(subscription.id)
            dtos.append(to_subscription_dto(subscription, items))

        return Return.ok(dtos)
