"""Billing API Routes

Manual trigger for the subscription billing sweep.
"""

from typing import Optional
from fastapi import APIRouter, Depends, status

from src.api.auth import get_current_user_id
from src.api.schemas.subscription_request import SweepRequestSchema
from src.app.use_cases.subscriptions import SweepResultDTO
from src.depends import get_session_factory
from src.worker.billing_scheduler import BillingSchedulerWorker

router = APIRouter(prefix="/billing", tags=["Billing"])


@router.post(
    "/sweep",
    response_model=SweepResultDTO,
    status_code=status.HTTP_200_OK,
)
async def run_billing_sweep(
    request: Optional[SweepRequestSchema] = None,
    user_id: str = Depends(get_current_user_id),
    session_factory=Depends(get_session_factory),
):
    """
    Run the billing sweep synchronously.

    Same work as the scheduled daily tick: every ACTIVE subscription due on
    or before `as_of_date` is billed once. Safe to repeat; already billed
    cycles are not charged again.

    **Request body (optional):**
    - `as_of_date`: Sweep date (defaults to today)

    **Returns:**
    - 200: SweepResult with per-outcome counts
    """
    as_of_date = request.as_of_date if request else None

    worker = BillingSchedulerWorker(session_factory=session_factory)
    try:
        return await worker.run_once(as_of_date=as_of_date)
    finally:
        await worker.shutdown()
