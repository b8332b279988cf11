"""Ledger Entry Repository Interface

Defines the contract for ledger entry persistence operations.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import List, Optional, Tuple
from src.domain.ledger_entry import LedgerEntry


class LedgerEntryRepository(ABC):
    """
    Repository interface for LedgerEntry persistence

    Entries are immutable and append-only for audit trail.
    Idempotency is enforced via unique idempotency_key.
    """

    @abstractmethod
    async def create(self, entry: LedgerEntry) -> LedgerEntry:
        """
        Create a new ledger entry

        Args:
            entry: LedgerEntry entity to persist

        Returns:
            Created LedgerEntry with generated ID

        Raises:
            IntegrityError: If idempotency_key already exists (duplicate entry)
        """
        pass

    @abstractmethod
    async def get_by_idempotency_key(self, idempotency_key: str) -> Optional[LedgerEntry]:
        """
        Retrieve entry by idempotency key

        Used to check if an entry already exists (idempotency check).

        Args:
            idempotency_key: Unique idempotency key

        Returns:
            LedgerEntry if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_by_user_id(
        self, user_id: str, limit: int = 20, offset: int = 0
    ) -> Tuple[List[LedgerEntry], int]:
        """
        Retrieve a page of a user's entries, newest first

        Returns:
            Tuple of (entries, total count)
        """
        pass

    @abstractmethod
    async def get_balance_sum_by_wallet(self, wallet_id: int) -> Decimal:
        """
        Sum of successful credits minus successful debits for a wallet

        Failed and pending entries do not count.
        """
        pass
