"""Wallet API Routes

FastAPI routes for the prepaid wallet that pays for subscriptions.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from src.api.auth import get_current_user_id
from src.api.error import ClientError
from src.api.schemas.wallet_request import TopUpRequestSchema
from src.app.use_cases.wallet import (
    TopUpWallet,
    GetWallet,
    ReconcileWallets,
    TopUpCommandDTO,
    TopUpResponseDTO,
    WalletResponseDTO,
    ReconciliationResultDTO,
)
from src.adapter.repositories import SqlAlchemyWalletRepository, SqlAlchemyLedgerEntryRepository
from src.adapter.services import SqlAlchemyUnitOfWork
from src.depends import get_session

router = APIRouter(prefix="/wallet", tags=["Wallet"])


@router.get("", response_model=WalletResponseDTO)
async def get_wallet(
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
):
    """
    Wallet balance with ledger entries, newest first.

    Failed billing attempts appear as debit entries with status `failed`
    and do not change the balance.

    **Returns:**
    - 200: Wallet found
    - 404: WALLET_NOT_FOUND
    """
    use_case = GetWallet(
        SqlAlchemyWalletRepository(session), SqlAlchemyLedgerEntryRepository(session)
    )
    result = await use_case.execute(user_id, limit=limit, offset=offset)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.post(
    "/top-up",
    response_model=TopUpResponseDTO,
    status_code=status.HTTP_200_OK,
)
async def top_up_wallet(
    request: TopUpRequestSchema,
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
):
    """
    Add funds to the wallet.

    Repeating a request with the same `idempotency_key` returns the original
    entry without crediting twice.
    """
    use_case = TopUpWallet(
        uow=SqlAlchemyUnitOfWork(session),
        wallet_repo=SqlAlchemyWalletRepository(session),
        ledger_repo=SqlAlchemyLedgerEntryRepository(session),
    )
    result = await use_case.execute(
        TopUpCommandDTO(
            user_id=user_id,
            amount=request.amount,
            idempotency_key=request.idempotency_key,
            reference_id=request.reference_id,
        )
    )

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.get("/reconciliation", response_model=ReconciliationResultDTO)
async def reconcile_wallets(
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
):
    """Compare every wallet balance with its ledger (read-only)."""
    use_case = ReconcileWallets(
        SqlAlchemyWalletRepository(session), SqlAlchemyLedgerEntryRepository(session)
    )
    result = await use_case.execute()

    if result.is_err():
        raise ClientError(result.error)

    return result.value
