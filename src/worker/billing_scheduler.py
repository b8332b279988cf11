"""Subscription Billing Scheduler Background Worker

Bills every due subscription once per day: debits the wallet, emits the
order and advances the due date, one transaction per subscription.
Can be run as a standalone script or integrated with a scheduler.
"""

import asyncio
import logging
import time
from collections import defaultdict
from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.repositories import (
    SqlAlchemyWalletRepository,
    SqlAlchemyLedgerEntryRepository,
    SqlAlchemySubscriptionRepository,
    SqlAlchemyOrderRepository,
    SqlAlchemyCatalogRepository,
    SqlAlchemyAddressRepository,
)
from src.adapter.services.notification_service import create_notification_service
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.failure_policy import FailureEscalationPolicy, build_failure_policy
from src.app.services.notification_service import NotificationService
from src.app.services.order_emitter import OrderEmitter
from src.app.use_cases.subscriptions import (
    BillSubscriptionCycle,
    BillSubscriptionCommandDTO,
    BillingCycleResultDTO,
    CycleOutcome,
    SweepResultDTO,
)

logger = logging.getLogger(__name__)


class BillingSchedulerWorker:
    """
    Background worker for the subscription billing sweep

    Features:
    - Discovers ACTIVE subscriptions due on or before the as-of date
    - Bills each one in its own session and transaction
    - Idempotent: re-running a sweep for the same date bills nothing twice
    - Cycles of one user never run concurrently; other users run up to
      `concurrency` at a time
    - Can run once or continuously (daily at BILLING_SWEEP_HOUR)

    Usage:
        # Run once for today
        worker = BillingSchedulerWorker()
        result = await worker.run_once()

        # Catch up a specific date
        result = await worker.run_once(as_of_date=date(2024, 1, 31))

        # Run continuously
        worker = BillingSchedulerWorker()
        await worker.run_forever()
    """

    def __init__(
        self,
        db_uri: Optional[str] = None,
        session_factory=None,
        failure_policy: Optional[FailureEscalationPolicy] = None,
        notification_service: Optional[NotificationService] = None,
        discount_rate: Optional[Decimal] = None,
        concurrency: Optional[int] = None,
        delivery_slot: Optional[str] = None,
    ):
        """
        Initialize the worker

        Args:
            db_uri: Database URI (defaults to ApplicationConfig.DB_URI)
            session_factory: Existing session factory to share (the API passes
                its own); when given, no engine is created or disposed here
            failure_policy: What to do after a failed debit (defaults to config)
            notification_service: Alert channel for policy pauses (defaults to config)
            discount_rate: Subscription discount (defaults to config)
            concurrency: Max subscriptions billed at once (defaults to config)
            delivery_slot: Slot label copied onto orders (defaults to config)
        """
        if session_factory is not None:
            self.engine = None
            self.async_session_factory = session_factory
        else:
            self.db_uri = db_uri or ApplicationConfig.DB_URI
            self.engine = create_async_engine(self.db_uri, echo=False, future=True)
            self.async_session_factory = sessionmaker(
                self.engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
            )

        self.failure_policy = failure_policy or build_failure_policy(
            ApplicationConfig.BILLING_FAILURE_POLICY,
            ApplicationConfig.BILLING_MAX_CONSECUTIVE_FAILURES,
        )
        self.notification_service = notification_service or create_notification_service(
            ApplicationConfig.BILLING_NOTIFICATION_WEBHOOK
        )
        self.discount_rate = Decimal(
            str(discount_rate if discount_rate is not None else ApplicationConfig.SUBSCRIPTION_DISCOUNT_RATE)
        )
        self.concurrency = max(1, concurrency or ApplicationConfig.BILLING_SWEEP_CONCURRENCY)
        self.order_emitter = OrderEmitter(
            delivery_slot if delivery_slot is not None else ApplicationConfig.ORDER_DELIVERY_SLOT
        )

        logger.info(
            f"BillingSchedulerWorker initialized "
            f"(policy={type(self.failure_policy).__name__}, concurrency={self.concurrency})"
        )

    async def run_once(
        self,
        as_of_date: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> SweepResultDTO:
        """
        Run one billing sweep

        Args:
            as_of_date: Bill everything due on or before this date (default: today)
            now: Timestamp written on entries and orders (default: utcnow)

        Returns:
            SweepResultDTO with per-outcome counts
        """
        start_time = time.time()
        now = now or datetime.utcnow()
        as_of_date = as_of_date or date.today()

        logger.info(f"Starting billing sweep as of {as_of_date.isoformat()}")

        # Discovery session is closed before any cycle runs
        async with self.async_session_factory() as session:
            subscription_repo = SqlAlchemySubscriptionRepository(session)
            due = [(s.id, s.user_id) for s in await subscription_repo.get_due(as_of_date)]

        logger.info(f"Found {len(due)} due subscriptions")

        user_locks = defaultdict(asyncio.Lock)
        semaphore = asyncio.Semaphore(self.concurrency)

        async def process(subscription_id: int, user_id: str) -> Optional[BillingCycleResultDTO]:
            async with user_locks[user_id]:
                async with semaphore:
                    return await self._bill_one(subscription_id, as_of_date, now)

        outcomes = await asyncio.gather(
            *(process(subscription_id, user_id) for subscription_id, user_id in due)
        )

        result = SweepResultDTO(as_of_date=as_of_date, total_due=len(due))
        for outcome in outcomes:
            if outcome is None:
                result.errored += 1
            elif outcome.outcome == CycleOutcome.BILLED:
                result.billed += 1
                result.total_billed_amount += outcome.amount
                result.order_ids.append(outcome.order_id)
            elif outcome.outcome == CycleOutcome.INSUFFICIENT_FUNDS:
                result.insufficient_funds += 1
                if outcome.paused_by_policy:
                    result.paused_by_policy += 1
            elif outcome.outcome == CycleOutcome.ALREADY_BILLED:
                result.already_billed += 1
            else:
                result.skipped += 1

        result.execution_time_ms = int((time.time() - start_time) * 1000)

        logger.info(
            f"Billing sweep complete: "
            f"{result.billed}/{result.total_due} billed ({result.total_billed_amount}), "
            f"{result.insufficient_funds} insufficient funds, "
            f"{result.skipped} skipped, {result.errored} errored, "
            f"{result.execution_time_ms}ms"
        )

        return result

    async def _bill_one(
        self, subscription_id: int, as_of_date: date, now: datetime
    ) -> Optional[BillingCycleResultDTO]:
        try:
            # Create a new session for each subscription to isolate transactions
            async with self.async_session_factory() as session:
                use_case = BillSubscriptionCycle(
                    uow=SqlAlchemyUnitOfWork(session),
                    subscription_repo=SqlAlchemySubscriptionRepository(session),
                    wallet_repo=SqlAlchemyWalletRepository(session),
                    ledger_repo=SqlAlchemyLedgerEntryRepository(session),
                    order_repo=SqlAlchemyOrderRepository(session),
                    catalog_repo=SqlAlchemyCatalogRepository(session),
                    address_repo=SqlAlchemyAddressRepository(session),
                    order_emitter=self.order_emitter,
                    failure_policy=self.failure_policy,
                    notification_service=self.notification_service,
                    discount_rate=self.discount_rate,
                )
                result = await use_case.execute(
                    BillSubscriptionCommandDTO(
                        subscription_id=subscription_id, as_of_date=as_of_date, now=now
                    )
                )

            if result.is_err():
                logger.error(
                    f"Failed to bill subscription {subscription_id}: "
                    f"{result.error.message} ({result.error.reason})"
                )
                return None
            return result.value

        except Exception as e:
            logger.error(f"Unexpected error billing subscription {subscription_id}: {e}")
            return None

    async def run_forever(
        self,
        sweep_hour: Optional[int] = None,
        check_interval_seconds: Optional[int] = None,
    ):
        """
        Sweep once a day, at the first check after sweep_hour

        Args:
            sweep_hour: Local hour to sweep at (default: BILLING_SWEEP_HOUR)
            check_interval_seconds: Seconds between clock checks
        """
        sweep_hour = ApplicationConfig.BILLING_SWEEP_HOUR if sweep_hour is None else sweep_hour
        check_interval_seconds = (
            check_interval_seconds or ApplicationConfig.BILLING_SWEEP_INTERVAL_SECONDS
        )
        logger.info(
            f"Starting continuous billing sweep at {sweep_hour:02d}:00, "
            f"checking every {check_interval_seconds}s"
        )

        last_swept: Optional[date] = None

        while True:
            try:
                local_now = datetime.now()
                if local_now.hour >= sweep_hour and last_swept != local_now.date():
                    result = await self.run_once(as_of_date=local_now.date())
                    last_swept = local_now.date()
                    logger.info(
                        f"Swept {local_now.date().isoformat()}: {result.billed} billed"
                    )
                else:
                    logger.debug("Skipping sweep - before sweep hour or already swept today")

            except Exception as e:
                logger.error(f"Billing sweep failed: {e}")

            await asyncio.sleep(check_interval_seconds)

    async def shutdown(self):
        """Cleanup resources"""
        if self.engine is not None:
            await self.engine.dispose()
        logger.info("BillingSchedulerWorker shutdown complete")


async def main():
    """
    Entry point for running the worker as a standalone script

    Usage:
        # Sweep today
        python -m src.worker.billing_scheduler

        # Sweep a specific date
        python -m src.worker.billing_scheduler --as-of 2024-01-31

        # Run continuously
        python -m src.worker.billing_scheduler --continuous
    """
    import argparse

    logging.basicConfig(
        level=ApplicationConfig.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Subscription Billing Scheduler")
    parser.add_argument(
        "--as-of", type=date.fromisoformat, help="Sweep date (YYYY-MM-DD, default: today)"
    )
    parser.add_argument(
        "--continuous", action="store_true", help="Run continuously"
    )
    args = parser.parse_args()

    if not ApplicationConfig.BILLING_SWEEP_ENABLED:
        logger.warning("Billing sweep disabled (BILLING_SWEEP_ENABLED=false)")
        return

    worker = BillingSchedulerWorker()

    try:
        if args.continuous:
            await worker.run_forever()
        else:
            result = await worker.run_once(as_of_date=args.as_of)
            print(f"Billing sweep complete ({result.as_of_date.isoformat()}):")
            print(f"  Due: {result.total_due}")
            print(f"  Billed: {result.billed} ({result.total_billed_amount})")
            print(f"  Insufficient funds: {result.insufficient_funds}")
            print(f"  Paused by policy: {result.paused_by_policy}")
            print(f"  Skipped: {result.skipped}")
            print(f"  Errored: {result.errored}")
            print(f"  Execution time: {result.execution_time_ms}ms")
    except KeyboardInterrupt:
        logger.info("Received shutdown signal")
    finally:
        await worker.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
