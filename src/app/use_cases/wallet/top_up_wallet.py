"""TopUpWallet Use Case

Credits a user's wallet and records the credit on the ledger.
"""

import logging
from datetime import datetime
from decimal import Decimal
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.wallet_repository import WalletRepository
from src.app.repositories.ledger_entry_repository import LedgerEntryRepository
from src.domain.base import generate_uuid
from src.domain.ledger_entry import LedgerEntry, EntryDirection, EntryStatus
from src.domain.wallet import Wallet
from .dtos import TopUpCommandDTO, TopUpResponseDTO

logger = logging.getLogger(__name__)


class TopUpWallet:
    """
    Use Case: Add funds to a user's wallet

    Business Rules:
    1. Idempotency: same idempotency_key returns the original entry
    2. Wallet creation: a user without a wallet gets one with balance 0
    3. Atomic updates: balance and ledger entry written in one transaction
    4. Pessimistic locking: SELECT FOR UPDATE on the wallet row

    Flow:
    1. Check idempotency (return existing if found)
    2. Get or create wallet with lock
    3. Credit wallet
    4. Create ledger entry with balance snapshots
    5. Commit
    """

    def __init__(
        self,
        uow: UnitOfWork,
        wallet_repo: WalletRepository,
        ledger_repo: LedgerEntryRepository,
    ):
        self.uow = uow
        self.wallet_repo = wallet_repo
        self.ledger_repo = ledger_repo

    async def execute(self, command: TopUpCommandDTO) -> Result[TopUpResponseDTO]:
        """
        Execute top-up

        Args:
            command: TopUpCommandDTO with user_id, amount, idempotency_key

        Returns:
            Result[TopUpResponseDTO]: Success with entry details or error
        """
        try:
            idempotency_key = command.idempotency_key or f"top_up:{generate_uuid()}"

            # Step 1: Idempotent replay
            existing = await self.ledger_repo.get_by_idempotency_key(idempotency_key)
            if existing:
                if existing.user_id != command.user_id:
                    return Return.err(
                        Error(
                            code="IDEMPOTENCY_KEY_CONFLICT",
                            message="Idempotency key already used by another request",
                        )
                    )
                return Return.ok(self._to_response_dto(existing))

            # Step 2: Get wallet with lock, create if missing
            wallet = await self.wallet_repo.get_by_user_id(command.user_id, for_update=True)
            if not wallet:
                await self.wallet_repo.create(
                    Wallet(user_id=command.user_id, balance=Decimal("0"))
                )
                wallet = await self.wallet_repo.get_by_user_id(command.user_id, for_update=True)

            # Step 3: Credit
            now = datetime.utcnow()
            balance_before = wallet.balance
            balance_after = await self.wallet_repo.credit(wallet.id, command.amount, now)

            # Step 4: Ledger entry
            entry = await self.ledger_repo.create(
                LedgerEntry(
                    user_id=command.user_id,
                    wallet_id=wallet.id,
                    direction=EntryDirection.CREDIT,
                    status=EntryStatus.SUCCESS,
                    amount=command.amount,
                    balance_before=balance_before,
                    balance_after=balance_after,
                    description="Wallet top-up",
                    reference_type=command.reference_type,
                    reference_id=command.reference_id,
                    idempotency_key=idempotency_key,
                    created_at=now,
                )
            )

            # Step 5: Commit
            await self.uow.commit()

            logger.info(
                f"Wallet top-up for user {command.user_id}: +{command.amount} "
                f"({balance_before} -> {balance_after})"
            )
            return Return.ok(self._to_response_dto(entry))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="TOP_UP_FAILED",
                    message="Failed to top up wallet",
                    reason=str(e),
                )
            )

    def _to_response_dto(self, entry: LedgerEntry) -> TopUpResponseDTO:
        return TopUpResponseDTO(
            entry_id=entry.id,
            user_id=entry.user_id,
            amount=entry.amount,
            balance_before=entry.balance_before,
            balance_after=entry.balance_after,
            idempotency_key=entry.idempotency_key,
            created_at=entry.created_at,
        )
