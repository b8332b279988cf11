"""SQLAlchemy implementation of WalletRepository

Provides persistence for Wallet entities with pessimistic locking and
conditional balance updates.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from sqlalchemy import update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.wallet_repository import WalletRepository
from src.domain.wallet import Wallet


class SqlAlchemyWalletRepository(WalletRepository):
    """
    SQLAlchemy implementation of WalletRepository

    Features:
    - Pessimistic locking via SELECT FOR UPDATE
    - Debits as UPDATE ... WHERE balance >= amount (no read-then-write)
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_user_id(self, user_id: str, for_update: bool = False) -> Optional[Wallet]:
        """
        Retrieve wallet by user ID with optional row-level locking

        Args:
            user_id: User identifier
            for_update: If True, locks the row with SELECT FOR UPDATE

        Returns:
            Wallet if found, None otherwise
        """
        stmt = select(Wallet).where(Wallet.user_id == user_id)

        if for_update:
            stmt = stmt.with_for_update()

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_id(self, wallet_id: int, for_update: bool = False) -> Optional[Wallet]:
        stmt = select(Wallet).where(Wallet.id == wallet_id)

        if for_update:
            stmt = stmt.with_for_update()

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_all(self) -> List[Wallet]:
        result = await self.session.execute(select(Wallet).order_by(Wallet.id))
        return list(result.scalars().all())

    async def create(self, wallet: Wallet) -> Wallet:
        self.session.add(wallet)
        await self.session.flush()
        await self.session.refresh(wallet)
        return wallet

    async def debit_if_sufficient(
        self, wallet_id: int, amount: Decimal, now: Optional[datetime] = None
    ) -> Optional[Decimal]:
        """
        Conditionally subtract amount from the balance

        Returns:
            New balance, or None if no row matched (balance < amount)
        """
        stmt = (
            update(Wallet)
            .where(Wallet.id == wallet_id, Wallet.balance >= amount)
            .values(balance=Wallet.balance - amount, updated_at=now or datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount != 1:
            return None
        return await self._reload_balance(wallet_id)

    async def credit(
        self, wallet_id: int, amount: Decimal, now: Optional[datetime] = None
    ) -> Decimal:
        stmt = (
            update(Wallet)
            .where(Wallet.id == wallet_id)
            .values(balance=Wallet.balance + amount, updated_at=now or datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)
        return await self._reload_balance(wallet_id)

    async def _reload_balance(self, wallet_id: int) -> Decimal:
        # Refresh the identity map copy, the UPDATE bypassed it
        stmt = (
            select(Wallet)
            .where(Wallet.id == wallet_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one().balance
