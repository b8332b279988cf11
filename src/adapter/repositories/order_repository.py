"""SQLAlchemy implementation of OrderRepository"""

from datetime import date
from typing import List, Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.order_repository import OrderRepository
from src.domain.order import Order, OrderItem


class SqlAlchemyOrderRepository(OrderRepository):
    """
    SQLAlchemy implementation of OrderRepository

    The unique (subscription_id, billing_date) index rejects a second order
    for the same cycle with an IntegrityError.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, order: Order, items: List[OrderItem]) -> Order:
        self.session.add(order)
        await self.session.flush()
        await self.session.refresh(order)

        for item in items:
            item.order_id = order.id
            self.session.add(item)
        await self.session.flush()

        return order

    async def get_by_subscription_cycle(
        self, subscription_id: int, billing_date: date
    ) -> Optional[Order]:
        stmt = select(Order).where(
            Order.subscription_id == subscription_id,
            Order.billing_date == billing_date,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_by_subscription(
        self, user_id: str, subscription_id: int, limit: int = 10
    ) -> List[Order]:
        stmt = (
            select(Order)
            .where(Order.user_id == user_id, Order.subscription_id == subscription_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_items(self, order_id: int) -> List[OrderItem]:
        stmt = select(OrderItem).where(OrderItem.order_id == order_id).order_by(OrderItem.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
