"""SQLAlchemy Subscription Repository Implementation

Implements subscription persistence using SQLAlchemy async session.
"""

from datetime import date
from typing import Optional, List
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.subscription_repository import SubscriptionRepository
from src.domain.subscription import (
    Frequency,
    Subscription,
    SubscriptionItem,
    SubscriptionStatus,
)


class SqlAlchemySubscriptionRepository(SubscriptionRepository):
    """
    SQLAlchemy implementation of SubscriptionRepository

    Uses async session for database operations.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, subscription_id: int, for_update: bool = False) -> Optional[Subscription]:
        """
        Retrieve subscription by ID with optional row-level locking

        Args:
            subscription_id: Subscription ID
            for_update: If True, locks the row with SELECT FOR UPDATE

        Returns:
            Subscription if found, None otherwise
        """
        statement = select(Subscription).where(Subscription.id == subscription_id)

        if for_update:
            # Refresh an instance already loaded before the lock was taken
            statement = statement.with_for_update().execution_options(populate_existing=True)

        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def get_for_user(self, user_id: str, subscription_id: int) -> Optional[Subscription]:
        statement = select(Subscription).where(
            Subscription.id == subscription_id,
            Subscription.user_id == user_id,
        )
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def list_by_user(self, user_id: str) -> List[Subscription]:
        statement = (
            select(Subscription)
            .where(Subscription.user_id == user_id)
            .order_by(Subscription.created_at.desc(), Subscription.id.desc())
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def get_due(self, as_of_date: date) -> List[Subscription]:
        """
        Retrieve ACTIVE subscriptions due on or before as_of_date

        Returns:
            Due subscriptions ordered by next_delivery_date, id
        """
        statement = (
            select(Subscription)
            .where(
                Subscription.status == SubscriptionStatus.ACTIVE,
                Subscription.next_delivery_date <= as_of_date,
            )
            .order_by(Subscription.next_delivery_date, Subscription.id)
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def find_active_match(
        self,
        user_id: str,
        product_id: int,
        variant_weight: Optional[str],
        frequency: Frequency,
        exclude_subscription_id: Optional[int] = None,
    ) -> Optional[Subscription]:
        statement = (
            select(Subscription)
            .join(SubscriptionItem, SubscriptionItem.subscription_id == Subscription.id)
            .where(
                Subscription.user_id == user_id,
                Subscription.status == SubscriptionStatus.ACTIVE,
                Subscription.frequency == frequency,
                SubscriptionItem.product_id == product_id,
            )
            .order_by(Subscription.id)
        )

        if variant_weight is None:
            statement = statement.where(SubscriptionItem.variant_weight.is_(None))
        else:
            statement = statement.where(SubscriptionItem.variant_weight == variant_weight)

        if exclude_subscription_id is not None:
            statement = statement.where(Subscription.id != exclude_subscription_id)

        result = await self.session.execute(statement.limit(1))
        return result.scalars().first()

    async def get_items(self, subscription_id: int) -> List[SubscriptionItem]:
        statement = (
            select(SubscriptionItem)
            .where(SubscriptionItem.subscription_id == subscription_id)
            .order_by(SubscriptionItem.position, SubscriptionItem.id)
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def create(self, subscription: Subscription, items: List[SubscriptionItem]) -> Subscription:
        """
        Create a new subscription with its line items

        Args:
            subscription: Subscription entity to create
            items: Line items, subscription_id is assigned here

        Returns:
            Created subscription with ID
        """
        self.session.add(subscription)
        await self.session.flush()
        await self.session.refresh(subscription)

        for position, item in enumerate(items):
            item.subscription_id = subscription.id
            item.position = position
            self.session.add(item)
        await self.session.flush()

        return subscription

    async def update(self, subscription: Subscription) -> Subscription:
        """
        Update an existing subscription

        Args:
            subscription: Subscription entity with updated values

        Returns:
            Updated subscription
        """
        self.session.add(subscription)
        await self.session.flush()
        await self.session.refresh(subscription)
        return subscription

    async def update_item(self, item: SubscriptionItem) -> SubscriptionItem:
        self.session.add(item)
        await self.session.flush()
        return item

    async def delete(self, subscription: Subscription) -> None:
        for item in await self.get_items(subscription.id):
            await self.session.delete(item)
        await self.session.delete(subscription)
        await self.session.flush()
