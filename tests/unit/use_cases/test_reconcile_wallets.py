"""Unit tests for ReconcileWallets and GetWallet use cases"""

import pytest
from datetime import datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.app.use_cases.wallet.reconcile_wallets import ReconcileWallets
from src.app.use_cases.wallet.get_wallet import GetWallet
from src.domain.ledger_entry import EntryDirection, EntryStatus, LedgerEntry
from src.domain.wallet import Wallet


@pytest.fixture
def mock_wallet_repo():
    repo = MagicMock()
    repo.get_all = AsyncMock(
        return_value=[
            Wallet(id=1, user_id="user_1", balance=Decimal("98")),
            Wallet(id=2, user_id="user_2", balance=Decimal("50")),
        ]
    )
    return repo


@pytest.fixture
def mock_ledger_repo():
    repo = MagicMock()
    repo.get_balance_sum_by_wallet = AsyncMock(side_effect=[Decimal("98"), Decimal("40")])
    return repo


@pytest.mark.asyncio
class TestReconcileWallets:

    async def test_reports_mismatched_wallets(self, mock_wallet_repo, mock_ledger_repo):
        """
        Given: Wallet 1 matches its ledger, wallet 2 holds 10 more than its ledger
        When: Reconciliation runs
        Then: Only wallet 2 is reported, with discrepancy +10
        """
        use_case = ReconcileWallets(mock_wallet_repo, mock_ledger_repo)

        result = await use_case.execute()

        assert result.is_ok()
        assert result.value.total_wallets_checked == 2
        assert result.value.discrepancies_found == 1
        discrepancy = result.value.discrepancies[0]
        assert discrepancy.user_id == "user_2"
        assert discrepancy.wallet_balance == Decimal("50")
        assert discrepancy.calculated_balance == Decimal("40")
        assert discrepancy.discrepancy == Decimal("10")

    async def test_all_balanced(self, mock_wallet_repo, mock_ledger_repo):
        mock_ledger_repo.get_balance_sum_by_wallet = AsyncMock(
            side_effect=[Decimal("98"), Decimal("50")]
        )

        result = await ReconcileWallets(mock_wallet_repo, mock_ledger_repo).execute()

        assert result.value.discrepancies_found == 0
        assert result.value.discrepancies == []

    async def test_repository_failure(self, mock_wallet_repo, mock_ledger_repo):
        mock_wallet_repo.get_all = AsyncMock(side_effect=Exception("connection lost"))

        result = await ReconcileWallets(mock_wallet_repo, mock_ledger_repo).execute()

        assert result.is_err()
        assert result.error.code == "RECONCILIATION_FAILED"


@pytest.mark.asyncio
class TestGetWallet:

    async def test_returns_balance_and_entries(self, mock_wallet_repo, mock_ledger_repo):
        mock_wallet_repo.get_by_user_id = AsyncMock(
            return_value=Wallet(id=1, user_id="user_1", balance=Decimal("98"))
        )
        entry = LedgerEntry(
            id=3,
            user_id="user_1",
            wallet_id=1,
            direction=EntryDirection.DEBIT,
            status=EntryStatus.FAILED,
            amount=Decimal("102"),
            balance_before=Decimal("98"),
            balance_after=Decimal("98"),
            description="Auto-Subscription #7 Failed: Insufficient Funds",
            reference_type="subscription",
            reference_id="7",
            idempotency_key="subscription:7:2024-02-07:failed:2024-02-07",
            created_at=datetime(2024, 2, 7, 9, 0, 0),
        )
        mock_ledger_repo.get_by_user_id = AsyncMock(return_value=([entry], 4))

        result = await GetWallet(mock_wallet_repo, mock_ledger_repo).execute(
            "user_1", limit=1, offset=0
        )

        assert result.is_ok()
        assert result.value.balance == Decimal("98")
        assert result.value.total == 4
        assert result.value.entries[0].status == "failed"
        assert result.value.entries[0].direction == "debit"
        mock_ledger_repo.get_by_user_id.assert_called_once_with(
            user_id="user_1", limit=1, offset=0
        )

    async def test_wallet_not_found(self, mock_wallet_repo, mock_ledger_repo):
        mock_wallet_repo.get_by_user_id = AsyncMock(return_value=None)

        result = await GetWallet(mock_wallet_repo, mock_ledger_repo).execute("user_9")

        assert result.error.code == "WALLET_NOT_FOUND"
