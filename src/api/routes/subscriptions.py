"""Subscription API Routes

FastAPI routes for enrolling and managing recurring deliveries.
"""

from datetime import date
from decimal import Decimal
from typing import List
from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.api.auth import get_current_user_id
from src.api.error import ClientError
from src.api.schemas.subscription_request import (
    EnrollRequestSchema,
    UpdateSubscriptionRequestSchema,
)
from src.app.use_cases.subscriptions import (
    EnrollSubscription,
    ChangeSubscriptionStatus,
    UpdateSubscription,
    DeleteSubscription,
    ListSubscriptions,
    GetSubscription,
    EnrollCommandDTO,
    EnrollmentItemDTO,
    EnrollmentResultDTO,
    UpdateSubscriptionCommandDTO,
    SubscriptionDTO,
    SubscriptionDetailDTO,
)
from src.adapter.repositories import (
    SqlAlchemySubscriptionRepository,
    SqlAlchemyWalletRepository,
    SqlAlchemyOrderRepository,
    SqlAlchemyCatalogRepository,
    SqlAlchemyAddressRepository,
    SqlAlchemyCartRepository,
)
from src.adapter.services import SqlAlchemyUnitOfWork, MockPaymentTokenizer
from src.depends import get_session
from src.domain.subscription import SubscriptionStatus

router = APIRouter(prefix="/subscriptions", tags=["Subscriptions"])


@router.post(
    "",
    response_model=EnrollmentResultDTO,
    status_code=status.HTTP_201_CREATED,
    responses={
        409: {
            "description": "The user already has active subscriptions for some items",
            "content": {
                "application/json": {
                    "example": {
                        "status": "conflict",
                        "message": "You already have subscriptions for these items.",
                        "subscriptions": [],
                        "conflicts": [
                            {
                                "product": "Basmati Rice (1kg)",
                                "product_id": 1,
                                "variant_weight": "1kg",
                                "existing_subscription_id": 7
                            }
                        ]
                    }
                }
            }
        },
        400: {
            "description": "Business rule violation",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "INSUFFICIENT_WALLET_BALANCE",
                            "message": "Insufficient wallet balance"
                        }
                    }
                }
            }
        }
    }
)
async def enroll_subscription(
    request: EnrollRequestSchema,
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
):
    """
    Subscribe to one or more products at a delivery cadence.

    The wallet is not charged here; the first cycle is billed by the
    sweep on `start_date`. Items the user already receives at this
    cadence are reported with 409 unless `force_merge` is true, in which
    case their quantities are added to the existing subscription.

    **Returns:**
    - 201: Subscriptions created or merged
    - 409: Conflicts found, nothing written
    - 400/404: Validation failure (product, variant, address, start date, balance)
    """
    subscription_repo = SqlAlchemySubscriptionRepository(session)
    use_case = EnrollSubscription(
        uow=SqlAlchemyUnitOfWork(session),
        subscription_repo=subscription_repo,
        wallet_repo=SqlAlchemyWalletRepository(session),
        catalog_repo=SqlAlchemyCatalogRepository(session),
        address_repo=SqlAlchemyAddressRepository(session),
        cart_repo=SqlAlchemyCartRepository(session),
        tokenizer=MockPaymentTokenizer(),
        discount_rate=Decimal(ApplicationConfig.SUBSCRIPTION_DISCOUNT_RATE),
        require_wallet_balance=ApplicationConfig.ENROLLMENT_REQUIRE_WALLET_BALANCE,
    )

    command = EnrollCommandDTO(
        user_id=user_id,
        items=[
            EnrollmentItemDTO(
                product_id=item.product_id,
                quantity=item.quantity,
                variant_weight=item.variant_weight,
            )
            for item in request.items
        ],
        frequency=request.frequency,
        delivery_address_id=request.delivery_address_id,
        start_date=request.start_date,
        force_merge=request.force_merge,
        payment_method=request.payment_method,
    )

    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError(result.error)

    if result.value.status == "conflict":
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=result.value.model_dump(mode="json"),
        )

    return result.value


@router.get("", response_model=List[SubscriptionDTO])
async def list_subscriptions(
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
):
    """List the user's subscriptions, newest first."""
    use_case = ListSubscriptions(SqlAlchemySubscriptionRepository(session))
    result = await use_case.execute(user_id)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.get("/{subscription_id}", response_model=SubscriptionDetailDTO)
async def get_subscription(
    subscription_id: int,
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
):
    """
    Subscription detail with its latest orders and the user's addresses.

    **Returns:**
    - 200: Subscription found
    - 404: SUBSCRIPTION_NOT_FOUND (missing or owned by another user)
    """
    use_case = GetSubscription(
        subscription_repo=SqlAlchemySubscriptionRepository(session),
        order_repo=SqlAlchemyOrderRepository(session),
        address_repo=SqlAlchemyAddressRepository(session),
    )
    result = await use_case.execute(user_id, subscription_id)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.patch("/{subscription_id}", response_model=SubscriptionDTO)
async def update_subscription(
    subscription_id: int,
    request: UpdateSubscriptionRequestSchema,
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
):
    """
    Change quantity, frequency, delivery address or next delivery date.

    Changes apply from the next billed cycle.
    """
    use_case = UpdateSubscription(
        uow=SqlAlchemyUnitOfWork(session),
        subscription_repo=SqlAlchemySubscriptionRepository(session),
        address_repo=SqlAlchemyAddressRepository(session),
    )
    result = await use_case.execute(
        UpdateSubscriptionCommandDTO(
            user_id=user_id,
            subscription_id=subscription_id,
            **request.model_dump(exclude_unset=True),
        )
    )

    if result.is_err():
        raise ClientError(result.error)

    return result.value


async def _change_status(
    session: AsyncSession, user_id: str, subscription_id: int, target: SubscriptionStatus
) -> SubscriptionDTO:
    use_case = ChangeSubscriptionStatus(
        uow=SqlAlchemyUnitOfWork(session),
        subscription_repo=SqlAlchemySubscriptionRepository(session),
    )
    result = await use_case.execute(user_id, subscription_id, target, today=date.today())

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.post("/{subscription_id}/pause", response_model=SubscriptionDTO)
async def pause_subscription(
    subscription_id: int,
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
):
    """Pause an active subscription; the sweep skips it until resumed."""
    return await _change_status(session, user_id, subscription_id, SubscriptionStatus.PAUSED)


@router.post("/{subscription_id}/resume", response_model=SubscriptionDTO)
async def resume_subscription(
    subscription_id: int,
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
):
    """
    Resume a paused subscription.

    A due date in the past moves forward on the cadence to today or later.
    Returns 409 SUBSCRIPTION_CONFLICT when another active subscription
    already delivers the same item at this cadence.
    """
    return await _change_status(session, user_id, subscription_id, SubscriptionStatus.ACTIVE)


@router.delete("/{subscription_id}")
async def delete_subscription(
    subscription_id: int,
    purge: bool = Query(default=False, description="Physically delete instead of cancelling"),
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
):
    """
    Cancel a subscription (terminal), or remove it entirely with `purge=true`.

    Orders already emitted keep their subscription_id for lookup.
    """
    if not purge:
        return await _change_status(
            session, user_id, subscription_id, SubscriptionStatus.CANCELLED
        )

    use_case = DeleteSubscription(
        uow=SqlAlchemyUnitOfWork(session),
        subscription_repo=SqlAlchemySubscriptionRepository(session),
    )
    result = await use_case.execute(user_id, subscription_id)

    if result.is_err():
        raise ClientError(result.error)

    return {"id": result.value, "deleted": True}
