"""Order Repository Interface

Defines the contract for order snapshot persistence operations.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional
from src.domain.order import Order, OrderItem


class OrderRepository(ABC):
    """
    Repository interface for Order persistence

    Orders are written once per billed cycle and then only read here.
    """

    @abstractmethod
    async def create(self, order: Order, items: List[OrderItem]) -> Order:
        """
        Create an order with its items

        Raises:
            IntegrityError: If an order already exists for the subscription cycle
        """
        pass

    @abstractmethod
    async def get_by_subscription_cycle(
        self, subscription_id: int, billing_date: date
    ) -> Optional[Order]:
        pass

    @abstractmethod
    async def list_by_subscription(
        self, user_id: str, subscription_id: int, limit: int = 10
    ) -> List[Order]:
        """Latest orders emitted for a subscription, newest first"""
        pass

    @abstractmethod
    async def get_items(self, order_id: int) -> List[OrderItem]:
        pass
