"""ReconcileWallets Use Case

Reconciles wallet balances against ledger history to detect discrepancies.
"""

import logging
import time
from datetime import datetime
from libs.result import Result, Return, Error
from src.app.repositories.wallet_repository import WalletRepository
from src.app.repositories.ledger_entry_repository import LedgerEntryRepository
from .dtos import WalletDiscrepancyDTO, ReconciliationResultDTO

logger = logging.getLogger(__name__)


class ReconcileWallets:
    """
    Use Case: Reconcile wallets against ledger entries

    Business Rules:
    1. For each wallet, expected balance = successful credits - successful debits
    2. Failed and pending entries never count
    3. Mismatches are reported and logged
    4. Does NOT modify any data (read-only reconciliation)
    """

    def __init__(self, wallet_repo: WalletRepository, ledger_repo: LedgerEntryRepository):
        self.wallet_repo = wallet_repo
        self.ledger_repo = ledger_repo

    async def execute(self) -> Result[ReconciliationResultDTO]:
        start_time = time.time()
        reconciliation_time = datetime.utcnow()

        try:
            logger.info("Starting wallet reconciliation")

            wallets = await self.wallet_repo.get_all()
            discrepancies: list[WalletDiscrepancyDTO] = []

            for wallet in wallets:
                calculated = await self.ledger_repo.get_balance_sum_by_wallet(wallet.id)
                if wallet.balance != calculated:
                    discrepancy = WalletDiscrepancyDTO(
                        user_id=wallet.user_id,
                        wallet_id=wallet.id,
                        wallet_balance=wallet.balance,
                        calculated_balance=calculated,
                        discrepancy=wallet.balance - calculated,
                    )
                    discrepancies.append(discrepancy)
                    logger.warning(
                        f"Discrepancy found for user {wallet.user_id} "
                        f"(wallet_id={wallet.id}): "
                        f"wallet_balance={wallet.balance}, "
                        f"ledger_sum={calculated}, "
                        f"discrepancy={discrepancy.discrepancy}"
                    )

            execution_time_ms = int((time.time() - start_time) * 1000)

            if discrepancies:
                logger.warning(
                    f"Reconciliation complete. Found {len(discrepancies)} discrepancies "
                    f"out of {len(wallets)} wallets in {execution_time_ms}ms"
                )
            else:
                logger.info(
                    f"Reconciliation complete. All {len(wallets)} wallets balanced "
                    f"in {execution_time_ms}ms"
                )

            return Return.ok(
                ReconciliationResultDTO(
                    total_wallets_checked=len(wallets),
                    discrepancies_found=len(discrepancies),
                    discrepancies=discrepancies,
                    reconciliation_time=reconciliation_time,
                    execution_time_ms=execution_time_ms,
                )
            )

        except Exception as e:
            logger.error(f"Wallet reconciliation failed: {e}")
            return Return.err(
                Error(
                    code="RECONCILIATION_FAILED",
                    message="Failed to reconcile wallets",
                    reason=str(e),
                )
            )
