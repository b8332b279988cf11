"""Wallet Repository Interface

Defines the contract for wallet persistence operations.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from src.domain.wallet import Wallet


class WalletRepository(ABC):
    """
    Repository interface for Wallet persistence

    Balance changes go through debit_if_sufficient/credit only. Callers lock
    the row first (for_update=True) so concurrent cycles for the same user
    serialize.
    """

    @abstractmethod
    async def get_by_user_id(self, user_id: str, for_update: bool = False) -> Optional[Wallet]:
        """
        Retrieve wallet by user ID

        Args:
            user_id: User identifier
            for_update: If True, lock the row with SELECT FOR UPDATE (pessimistic lock)

        Returns:
            Wallet if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_by_id(self, wallet_id: int, for_update: bool = False) -> Optional[Wallet]:
        pass

    @abstractmethod
    async def get_all(self) -> List[Wallet]:
        """Retrieve all wallets (used by reconciliation)"""
        pass

    @abstractmethod
    async def create(self, wallet: Wallet) -> Wallet:
        """
        Create a new wallet

        Args:
            wallet: Wallet entity to persist

        Returns:
            Created Wallet with generated ID
        """
        pass

    @abstractmethod
    async def debit_if_sufficient(
        self, wallet_id: int, amount: Decimal, now: Optional[datetime] = None
    ) -> Optional[Decimal]:
        """
        Atomically subtract amount if the balance covers it

        Implemented as a conditional update (compare-and-set on the balance),
        never as a read-then-write from application code.

        Args:
            wallet_id: Wallet ID
            amount: Positive amount to take
            now: Timestamp for updated_at

        Returns:
            New balance, or None when the balance was insufficient
        """
        pass

    @abstractmethod
    async def credit(
        self, wallet_id: int, amount: Decimal, now: Optional[datetime] = None
    ) -> Decimal:
        """
        Atomically add amount to the balance

        Returns:
            New balance
        """
        pass
