"""Unit tests for BillingSchedulerWorker

Tests cover:
- Worker initialization with configuration
- run_once aggregation of cycle outcomes
- Errors and exceptions of single cycles counted, sweep continues
- Cycles of one user never overlap
- run_forever daily tick
- Shutdown and cleanup
"""

import asyncio
import pytest
from collections import defaultdict
from datetime import date, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

from libs.result import Return, Error
from src.worker.billing_scheduler import BillingSchedulerWorker
from src.app.services.failure_policy import RetryForeverPolicy
from src.app.use_cases.subscriptions.dtos import BillingCycleResultDTO, CycleOutcome

AS_OF = date(2024, 1, 31)
NOW = datetime(2024, 1, 31, 9, 0, 0)


def _session():
    session = MagicMock()
    session.__aenter__ = AsyncMock(return_value=session)
    session.__aexit__ = AsyncMock(return_value=False)
    return session


@pytest.fixture
def session_factory():
    return MagicMock(side_effect=lambda: _session())


def _worker(session_factory, concurrency=1):
    return BillingSchedulerWorker(
        session_factory=session_factory,
        failure_policy=RetryForeverPolicy(),
        notification_service=MagicMock(),
        discount_rate=Decimal("0.15"),
        concurrency=concurrency,
        delivery_slot="Daily by 9:00 AM",
    )


def _due(*pairs):
    return [MagicMock(id=subscription_id, user_id=user_id) for subscription_id, user_id in pairs]


def _outcome(subscription_id, outcome, **kwargs):
    return Return.ok(
        BillingCycleResultDTO(subscription_id=subscription_id, outcome=outcome, **kwargs)
    )


class TestBillingSchedulerWorkerInit:

    @patch("src.worker.billing_scheduler.ApplicationConfig")
    @patch("src.worker.billing_scheduler.sessionmaker")
    @patch("src.worker.billing_scheduler.create_async_engine")
    def test_initializes_with_default_config(
        self, mock_create_engine, mock_sessionmaker, mock_app_config
    ):
        """
        Given: No custom configuration provided
        When: Worker is initialized
        Then: Engine, policy and discount come from ApplicationConfig
        """
        # Arrange
        mock_app_config.DB_URI = "sqlite+aiosqlite:///./default.db"
        mock_app_config.BILLING_FAILURE_POLICY = "pause_after_failures"
        mock_app_config.BILLING_MAX_CONSECUTIVE_FAILURES = 3
        mock_app_config.BILLING_NOTIFICATION_WEBHOOK = None
        mock_app_config.SUBSCRIPTION_DISCOUNT_RATE = "0.15"
        mock_app_config.BILLING_SWEEP_CONCURRENCY = 2
        mock_app_config.ORDER_DELIVERY_SLOT = "Daily by 9:00 AM"
        mock_create_engine.return_value = MagicMock()

        # Act
        worker = BillingSchedulerWorker()

        # Assert
        assert worker.db_uri == "sqlite+aiosqlite:///./default.db"
        assert worker.discount_rate == Decimal("0.15")
        assert worker.concurrency == 2
        assert type(worker.failure_policy).__name__ == "PauseAfterFailuresPolicy"
        mock_create_engine.assert_called_once()

    def test_shared_session_factory_creates_no_engine(self, session_factory):
        worker = _worker(session_factory)

        assert worker.engine is None
        assert worker.async_session_factory is session_factory


@pytest.mark.asyncio
class TestBillingSchedulerWorkerRunOnce:

    @patch("src.worker.billing_scheduler.BillSubscriptionCycle")
    @patch("src.worker.billing_scheduler.SqlAlchemySubscriptionRepository")
    async def test_aggregates_cycle_outcomes(
        self, mock_repo_class, mock_use_case_class, session_factory
    ):
        """
        Given: Five due subscriptions with different outcomes
        When: run_once is called
        Then: Each outcome is counted once and billed amounts are summed
        """
        # Arrange
        mock_repo_class.return_value.get_due = AsyncMock(
            return_value=_due((1, "u1"), (2, "u2"), (3, "u3"), (4, "u4"), (5, "u5"))
        )
        results = {
            1: _outcome(1, CycleOutcome.BILLED, amount=Decimal("102.00"), order_id=11),
            2: _outcome(2, CycleOutcome.BILLED, amount=Decimal("8.49"), order_id=12),
            3: _outcome(3, CycleOutcome.INSUFFICIENT_FUNDS, paused_by_policy=True),
            4: _outcome(4, CycleOutcome.ALREADY_BILLED),
            5: _outcome(5, CycleOutcome.SKIPPED),
        }
        mock_use_case_class.return_value.execute = AsyncMock(
            side_effect=lambda command: results[command.subscription_id]
        )

        # Act
        worker = _worker(session_factory)
        result = await worker.run_once(as_of_date=AS_OF, now=NOW)

        # Assert
        mock_repo_class.return_value.get_due.assert_called_once_with(AS_OF)
        assert result.as_of_date == AS_OF
        assert result.total_due == 5
        assert result.billed == 2
        assert result.total_billed_amount == Decimal("110.49")
        assert result.order_ids == [11, 12]
        assert result.insufficient_funds == 1
        assert result.paused_by_policy == 1
        assert result.already_billed == 1
        assert result.skipped == 1
        assert result.errored == 0

        commands = [c.args[0] for c in mock_use_case_class.return_value.execute.call_args_list]
        assert all(c.as_of_date == AS_OF and c.now == NOW for c in commands)

    @patch("src.worker.billing_scheduler.BillSubscriptionCycle")
    @patch("src.worker.billing_scheduler.SqlAlchemySubscriptionRepository")
    async def test_failed_cycles_do_not_stop_the_sweep(
        self, mock_repo_class, mock_use_case_class, session_factory
    ):
        """
        Given: One cycle returns an error and one raises
        When: run_once is called
        Then: Both count as errored and the third is still billed
        """
        mock_repo_class.return_value.get_due = AsyncMock(
            return_value=_due((1, "u1"), (2, "u2"), (3, "u3"))
        )

        async def execute(command):
            if command.subscription_id == 1:
                return Return.err(
                    Error(code="BILLING_CYCLE_FAILED", message="Failed", reason="boom")
                )
            if command.subscription_id == 2:
                raise RuntimeError("connection reset")
            return _outcome(3, CycleOutcome.BILLED, amount=Decimal("10"), order_id=30)

        mock_use_case_class.return_value.execute = AsyncMock(side_effect=execute)

        result = await _worker(session_factory).run_once(as_of_date=AS_OF, now=NOW)

        assert result.errored == 2
        assert result.billed == 1
        assert result.order_ids == [30]

    @patch("src.worker.billing_scheduler.BillSubscriptionCycle")
    @patch("src.worker.billing_scheduler.SqlAlchemySubscriptionRepository")
    async def test_nothing_due(self, mock_repo_class, mock_use_case_class, session_factory):
        mock_repo_class.return_value.get_due = AsyncMock(return_value=[])

        result = await _worker(session_factory).run_once(as_of_date=AS_OF, now=NOW)

        assert result.total_due == 0
        assert result.billed == 0
        mock_use_case_class.return_value.execute.assert_not_called()

    @patch("src.worker.billing_scheduler.BillSubscriptionCycle")
    @patch("src.worker.billing_scheduler.SqlAlchemySubscriptionRepository")
    async def test_one_user_is_billed_serially(
        self, mock_repo_class, mock_use_case_class, session_factory
    ):
        """
        Given: Three subscriptions of one user and two of another, concurrency 4
        When: run_once is called
        Then: Cycles of the same user never run at the same time
        """
        owners = {1: "u1", 2: "u1", 3: "u1", 4: "u2", 5: "u2"}
        mock_repo_class.return_value.get_due = AsyncMock(
            return_value=_due(*owners.items())
        )

        running = defaultdict(int)
        peak = defaultdict(int)

        async def execute(command):
            user_id = owners[command.subscription_id]
            running[user_id] += 1
            peak[user_id] = max(peak[user_id], running[user_id])
            await asyncio.sleep(0.01)
            running[user_id] -= 1
            return _outcome(command.subscription_id, CycleOutcome.SKIPPED)

        mock_use_case_class.return_value.execute = AsyncMock(side_effect=execute)

        result = await _worker(session_factory, concurrency=4).run_once(as_of_date=AS_OF, now=NOW)

        assert result.skipped == 5
        assert peak["u1"] == 1
        assert peak["u2"] == 1

    @patch("src.worker.billing_scheduler.BillSubscriptionCycle")
    @patch("src.worker.billing_scheduler.SqlAlchemySubscriptionRepository")
    async def test_each_cycle_gets_own_session(
        self, mock_repo_class, mock_use_case_class, session_factory
    ):
        mock_repo_class.return_value.get_due = AsyncMock(return_value=_due((1, "u1"), (2, "u2")))
        mock_use_case_class.return_value.execute = AsyncMock(
            side_effect=lambda command: _outcome(command.subscription_id, CycleOutcome.SKIPPED)
        )

        await _worker(session_factory).run_once(as_of_date=AS_OF, now=NOW)

        # One discovery session plus one per subscription
        assert session_factory.call_count == 3


@pytest.mark.asyncio
class TestBillingSchedulerWorkerRunForever:

    @patch("src.worker.billing_scheduler.asyncio.sleep")
    @patch("src.worker.billing_scheduler.datetime")
    async def test_sweeps_once_per_day_after_sweep_hour(
        self, mock_datetime, mock_sleep, session_factory
    ):
        """
        Given: Local time is past the sweep hour
        When: run_forever checks the clock twice on the same day
        Then: Only one sweep runs
        """
        mock_datetime.now.return_value = datetime(2024, 1, 31, 10, 0, 0)

        call_count = 0

        async def limited_sleep(seconds):
            nonlocal call_count
            call_count += 1
            if call_count >= 2:
                raise KeyboardInterrupt("Test termination")

        mock_sleep.side_effect = limited_sleep

        worker = _worker(session_factory)
        worker.run_once = AsyncMock(return_value=MagicMock(billed=1))

        with pytest.raises(KeyboardInterrupt):
            await worker.run_forever(sweep_hour=9, check_interval_seconds=60)

        worker.run_once.assert_called_once_with(as_of_date=date(2024, 1, 31))

    @patch("src.worker.billing_scheduler.asyncio.sleep")
    @patch("src.worker.billing_scheduler.datetime")
    async def test_waits_for_sweep_hour(self, mock_datetime, mock_sleep, session_factory):
        mock_datetime.now.return_value = datetime(2024, 1, 31, 7, 30, 0)
        mock_sleep.side_effect = KeyboardInterrupt("Test termination")

        worker = _worker(session_factory)
        worker.run_once = AsyncMock()

        with pytest.raises(KeyboardInterrupt):
            await worker.run_forever(sweep_hour=9, check_interval_seconds=60)

        worker.run_once.assert_not_called()

    @patch("src.worker.billing_scheduler.asyncio.sleep")
    @patch("src.worker.billing_scheduler.datetime")
    async def test_sweep_exception_is_logged_and_loop_continues(
        self, mock_datetime, mock_sleep, session_factory
    ):
        mock_datetime.now.return_value = datetime(2024, 1, 31, 10, 0, 0)

        call_count = 0

        async def limited_sleep(seconds):
            nonlocal call_count
            call_count += 1
            if call_count >= 2:
                raise KeyboardInterrupt("Test termination")

        mock_sleep.side_effect = limited_sleep

        worker = _worker(session_factory)
        worker.run_once = AsyncMock(side_effect=Exception("database unavailable"))

        with pytest.raises(KeyboardInterrupt):
            await worker.run_forever(sweep_hour=9, check_interval_seconds=60)

        # Failed sweep is retried on the next check
        assert worker.run_once.call_count == 2


@pytest.mark.asyncio
class TestBillingSchedulerWorkerShutdown:

    @patch("src.worker.billing_scheduler.ApplicationConfig")
    @patch("src.worker.billing_scheduler.sessionmaker")
    @patch("src.worker.billing_scheduler.create_async_engine")
    async def test_shutdown_disposes_engine(
        self, mock_create_engine, mock_sessionmaker, mock_app_config
    ):
        mock_engine = MagicMock()
        mock_engine.dispose = AsyncMock()
        mock_create_engine.return_value = mock_engine

        worker = BillingSchedulerWorker(
            db_uri="sqlite+aiosqlite:///./test.db",
            failure_policy=RetryForeverPolicy(),
            notification_service=MagicMock(),
            discount_rate=Decimal("0.15"),
            concurrency=1,
            delivery_slot="Daily by 9:00 AM",
        )
        await worker.shutdown()

        mock_engine.dispose.assert_called_once()

    async def test_shutdown_keeps_shared_factory(self, session_factory):
        worker = _worker(session_factory)

        await worker.shutdown()

        session_factory.assert_not_called()
