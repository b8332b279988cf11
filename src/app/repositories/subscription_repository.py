"""Subscription Repository Interface

Defines the contract for subscription and line item persistence operations.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional
from src.domain.subscription import Subscription, SubscriptionItem, Frequency


class SubscriptionRepository(ABC):
    """
    Repository interface for Subscription persistence

    Line items live in their own table and are read/written through the
    same repository.
    """

    @abstractmethod
    async def get_by_id(self, subscription_id: int, for_update: bool = False) -> Optional[Subscription]:
        """
        Retrieve subscription by ID

        Args:
            subscription_id: Subscription ID
            for_update: If True, lock the row with SELECT FOR UPDATE

        Returns:
            Subscription if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_for_user(self, user_id: str, subscription_id: int) -> Optional[Subscription]:
        """Retrieve a subscription only if it belongs to user_id"""
        pass

    @abstractmethod
    async def list_by_user(self, user_id: str) -> List[Subscription]:
        """All of a user's subscriptions, newest first"""
        pass

    @abstractmethod
    async def get_due(self, as_of_date: date) -> List[Subscription]:
        """
        Retrieve ACTIVE subscriptions with next_delivery_date <= as_of_date

        Used by the billing sweep. Using <= lets a missed tick catch up.

        Args:
            as_of_date: Sweep date

        Returns:
            Due subscriptions ordered by next_delivery_date, id
        """
        pass

    @abstractmethod
    async def find_active_match(
        self,
        user_id: str,
        product_id: int,
        variant_weight: Optional[str],
        frequency: Frequency,
        exclude_subscription_id: Optional[int] = None,
    ) -> Optional[Subscription]:
        """
        Find the user's ACTIVE subscription covering a product/variant at a cadence

        A None variant_weight only matches lines without a variant.

        Args:
            user_id: User identifier
            product_id: Product ID
            variant_weight: Variant weight label or None
            frequency: Cadence to match
            exclude_subscription_id: Ignore this subscription (self-match on update)

        Returns:
            Matching Subscription if any, None otherwise
        """
        pass

    @abstractmethod
    async def get_items(self, subscription_id: int) -> List[SubscriptionItem]:
        """Line items of a subscription in position order"""
        pass

    @abstractmethod
    async def create(self, subscription: Subscription, items: List[SubscriptionItem]) -> Subscription:
        """
        Create a subscription with its line items

        Returns:
            Created Subscription with generated ID
        """
        pass

    @abstractmethod
    async def update(self, subscription: Subscription) -> Subscription:
        pass

    @abstractmethod
    async def update_item(self, item: SubscriptionItem) -> SubscriptionItem:
        pass

    @abstractmethod
    async def delete(self, subscription: Subscription) -> None:
        """Physically remove a subscription and its line items"""
        pass
