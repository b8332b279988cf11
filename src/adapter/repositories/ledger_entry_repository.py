"""SQLAlchemy implementation of LedgerEntryRepository

Provides persistence for LedgerEntry entities with idempotency enforcement
via unique constraint on idempotency_key.
"""

from decimal import Decimal
from typing import List, Optional, Tuple
from sqlalchemy import case, func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.ledger_entry_repository import LedgerEntryRepository
from src.domain.ledger_entry import LedgerEntry, EntryDirection, EntryStatus

AMOUNT_SCALE = Decimal("0.000001")


class SqlAlchemyLedgerEntryRepository(LedgerEntryRepository):
    """
    SQLAlchemy implementation of LedgerEntryRepository

    Features:
    - Idempotency enforcement via unique idempotency_key constraint
    - Immutable append-only entries
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, entry: LedgerEntry) -> LedgerEntry:
        """
        Create a new ledger entry

        Raises:
            IntegrityError: If idempotency_key already exists
        """
        self.session.add(entry)
        await self.session.flush()
        await self.session.refresh(entry)
        return entry

    async def get_by_idempotency_key(self, idempotency_key: str) -> Optional[LedgerEntry]:
        stmt = select(LedgerEntry).where(LedgerEntry.idempotency_key == idempotency_key)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_user_id(
        self, user_id: str, limit: int = 20, offset: int = 0
    ) -> Tuple[List[LedgerEntry], int]:
        count_stmt = select(func.count()).select_from(LedgerEntry).where(
            LedgerEntry.user_id == user_id
        )
        total = (await self.session.execute(count_stmt)).scalar_one()

        stmt = (
            select(LedgerEntry)
            .where(LedgerEntry.user_id == user_id)
            .order_by(LedgerEntry.created_at.desc(), LedgerEntry.id.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def get_balance_sum_by_wallet(self, wallet_id: int) -> Decimal:
        """
        Sum of successful credits minus successful debits

        Args:
            wallet_id: Wallet ID

        Returns:
            Calculated balance (0 when the wallet has no entries)
        """
        signed_amount = case(
            (LedgerEntry.direction == EntryDirection.CREDIT, LedgerEntry.amount),
            else_=-LedgerEntry.amount,
        )
        stmt = select(func.coalesce(func.sum(signed_amount), 0)).where(
            LedgerEntry.wallet_id == wallet_id,
            LedgerEntry.status == EntryStatus.SUCCESS,
        )
        result = await self.session.execute(stmt)
        return Decimal(str(result.scalar_one())).quantize(AMOUNT_SCALE)
