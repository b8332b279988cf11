"""Get Wallet Use Case

Retrieves a user's wallet balance and ledger history.
"""

from libs.result import Result, Return, Error
from src.app.repositories.wallet_repository import WalletRepository
from src.app.repositories.ledger_entry_repository import LedgerEntryRepository
from .dtos import LedgerEntryDTO, WalletResponseDTO


def _value(field):
    return field.value if hasattr(field, "value") else field


class GetWallet:
    """
    Get Wallet Use Case

    Read-only. Entries are ordered by created_at DESC (most recent first)
    and include failed billing attempts.
    """

    def __init__(self, wallet_repo: WalletRepository, ledger_repo: LedgerEntryRepository):
        self.wallet_repo = wallet_repo
        self.ledger_repo = ledger_repo

    async def execute(
        self, user_id: str, limit: int = 20, offset: int = 0
    ) -> Result[WalletResponseDTO]:
        """
        Execute get wallet

        Args:
            user_id: Wallet owner
            limit: Maximum number of entries to return (default 20)
            offset: Number of entries to skip (default 0)

        Errors:
            WALLET_NOT_FOUND: User has never topped up or enrolled
        """
        wallet = await self.wallet_repo.get_by_user_id(user_id)
        if not wallet:
            return Return.err(
                Error(
                    code="WALLET_NOT_FOUND",
                    message=f"No wallet found for user {user_id}",
                )
            )

        entries, total = await self.ledger_repo.get_by_user_id(
            user_id=user_id, limit=limit, offset=offset
        )

        return Return.ok(
            WalletResponseDTO(
                user_id=wallet.user_id,
                balance=wallet.balance,
                last_updated=wallet.updated_at,
                entries=[
                    LedgerEntryDTO(
                        id=entry.id,
                        direction=_value(entry.direction),
                        status=_value(entry.status),
                        amount=entry.amount,
                        balance_before=entry.balance_before,
                        balance_after=entry.balance_after,
                        description=entry.description,
                        reference_type=entry.reference_type,
                        reference_id=entry.reference_id,
                        idempotency_key=entry.idempotency_key,
                        created_at=entry.created_at,
                    )
                    for entry in entries
                ],
                total=total,
                limit=limit,
                offset=offset,
            )
        )
