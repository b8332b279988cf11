"""BillSubscriptionCycle Use Case

Bills one due subscription cycle against the user's wallet. The debit,
the ledger entry, the order and the due-date advance are one unit of work.
"""

import logging
from decimal import Decimal
from typing import Optional
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.notification_service import NotificationService
from src.app.services.failure_policy import (
    FailureDecision,
    FailureEscalationPolicy,
    RetryForeverPolicy,
)
from src.app.services.order_emitter import OrderEmitter
from src.app.services.cycle_pricing import price_cycle, DEFAULT_DISCOUNT_RATE
from src.app.repositories.subscription_repository import SubscriptionRepository
from src.app.repositories.wallet_repository import WalletRepository
from src.app.repositories.ledger_entry_repository import LedgerEntryRepository
from src.app.repositories.order_repository import OrderRepository
from src.app.repositories.catalog_repository import CatalogRepository, AddressRepository
from src.domain.cadence import advance
from src.domain.ledger_entry import LedgerEntry, EntryDirection, EntryStatus
from src.domain.line_item import from_subscription_item
from src.domain.subscription import Subscription, SubscriptionStatus
from .dtos import BillSubscriptionCommandDTO, BillingCycleResultDTO, CycleOutcome

logger = logging.getLogger(__name__)


def cycle_idempotency_key(subscription_id: int, cycle_date) -> str:
    return f"subscription:{subscription_id}:{cycle_date.isoformat()}"


class BillSubscriptionCycle:
    """
    Use Case: Bill one subscription cycle

    Business Rules:
    1. Only ACTIVE subscriptions with next_delivery_date <= as_of_date are
       billed (re-checked under lock, the row may have changed since discovery)
    2. Cycle total = sum(discounted unit price * quantity); lines whose
       product vanished are dropped, a zero total skips the cycle
    3. Missing delivery address or wallet skips the cycle
    4. Sufficient balance: debit-if-sufficient, success debit entry, order
       snapshot, due date advanced one cadence unit from its current value
    5. Insufficient balance: failed debit entry only; status and due date are
       left to the failure policy (default: unchanged, retried next tick)
    6. The success entry's idempotency key is subscription:<id>:<cycle date>,
       so a cycle is never debited twice

    7. Locks are taken wallet first, then subscription, the same order
       enrollment uses

    Flow:
    1. Lock the owner's wallet, then the subscription, re-check due
    2. Guard against an already-debited cycle
    3. Price the cycle
    4. Debit if sufficient
    5a. Success: order + ledger entry + advance, commit
    5b. Failure: failed entry + policy, commit, notify if paused
    """

    def __init__(
        self,
        uow: UnitOfWork,
        subscription_repo: SubscriptionRepository,
        wallet_repo: WalletRepository,
        ledger_repo: LedgerEntryRepository,
        order_repo: OrderRepository,
        catalog_repo: CatalogRepository,
        address_repo: AddressRepository,
        order_emitter: Optional[OrderEmitter] = None,
        failure_policy: Optional[FailureEscalationPolicy] = None,
        notification_service: Optional[NotificationService] = None,
        discount_rate: Decimal = DEFAULT_DISCOUNT_RATE,
    ):
        self.uow = uow
        self.subscription_repo = subscription_repo
        self.wallet_repo = wallet_repo
        self.ledger_repo = ledger_repo
        self.order_repo = order_repo
        self.catalog_repo = catalog_repo
        self.address_repo = address_repo
        self.order_emitter = order_emitter or OrderEmitter()
        self.failure_policy = failure_policy or RetryForeverPolicy()
        self.notification_service = notification_service
        self.discount_rate = Decimal(discount_rate)

    async def execute(self, command: BillSubscriptionCommandDTO) -> Result[BillingCycleResultDTO]:
        """
        Execute one billing cycle

        Args:
            command: subscription_id, as_of_date and the sweep timestamp

        Returns:
            Result[BillingCycleResultDTO]: outcome of the cycle, or an Error
            when the cycle crashed and was rolled back
        """
        try:
            # Step 1: Lock wallet, then subscription, and re-check
            owner = await self.subscription_repo.get_by_id(command.subscription_id)
            wallet = None
            subscription = None
            if owner:
                wallet = await self.wallet_repo.get_by_user_id(owner.user_id, for_update=True)
                subscription = await self.subscription_repo.get_by_id(
                    command.subscription_id, for_update=True
                )
            if (
                not subscription
                or subscription.status != SubscriptionStatus.ACTIVE
                or subscription.next_delivery_date is None
                or subscription.next_delivery_date > command.as_of_date
            ):
                await self.uow.rollback()
                return Return.ok(
                    BillingCycleResultDTO(
                        subscription_id=command.subscription_id,
                        outcome=CycleOutcome.NOT_DUE,
                    )
                )

            cycle_date = subscription.next_delivery_date
            success_key = cycle_idempotency_key(subscription.id, cycle_date)

            # Step 2: A debit for this cycle already exists (due date was moved back)
            existing_entry = await self.ledger_repo.get_by_idempotency_key(success_key)
            if existing_entry:
                return await self._advance_already_billed(subscription, command, existing_entry)

            # Step 3: Price the cycle against the current catalog
            address = await self.address_repo.get_for_user(
                subscription.user_id, subscription.delivery_address_id
            )
            if not address:
                return await self._skip(subscription, "delivery address not found")

            items = [
                from_subscription_item(item)
                for item in await self.subscription_repo.get_items(subscription.id)
            ]
            products = await self.catalog_repo.get_products([item.product_id for item in items])
            cycle = price_cycle(items, products, self.discount_rate)

            if cycle.missing_product_ids:
                logger.warning(
                    f"Subscription {subscription.id}: products "
                    f"{cycle.missing_product_ids} no longer exist, billing remaining lines"
                )
            if cycle.total <= 0:
                return await self._skip(subscription, "cycle total is zero")

            # Step 4: Try to debit
            if not wallet:
                return await self._skip(subscription, "wallet not found")

            balance_before = wallet.balance
            balance_after = await self.wallet_repo.debit_if_sufficient(
                wallet.id, cycle.total, command.now
            )

            if balance_after is None:
                return await self._record_failure(
                    subscription, wallet.id, balance_before, cycle.total, command
                )

            # Step 5a: Order + ledger entry + advance
            order, order_items = self.order_emitter.build(
                subscription, cycle, cycle_date, command.now
            )
            order = await self.order_repo.create(order, order_items)

            entry = await self.ledger_repo.create(
                LedgerEntry(
                    user_id=subscription.user_id,
                    wallet_id=wallet.id,
                    direction=EntryDirection.DEBIT,
                    status=EntryStatus.SUCCESS,
                    amount=cycle.total,
                    balance_before=balance_before,
                    balance_after=balance_after,
                    description=f"Auto-Subscription #{subscription.id} (Order #{order.id})",
                    reference_type="subscription",
                    reference_id=str(subscription.id),
                    idempotency_key=success_key,
                    created_at=command.now,
                )
            )

            subscription.last_delivery_date = cycle_date
            subscription.next_delivery_date = advance(cycle_date, subscription.frequency)
            subscription.consecutive_failures = 0
            subscription.updated_at = command.now
            await self.subscription_repo.update(subscription)

            await self.uow.commit()

            logger.info(
                f"Billed subscription {subscription.id} for {cycle_date.isoformat()}: "
                f"{cycle.total} (order {order.id}), next {subscription.next_delivery_date.isoformat()}"
            )

            return Return.ok(
                BillingCycleResultDTO(
                    subscription_id=subscription.id,
                    outcome=CycleOutcome.BILLED,
                    amount=cycle.total,
                    cycle_date=cycle_date,
                    order_id=order.id,
                    ledger_entry_id=entry.id,
                    next_delivery_date=subscription.next_delivery_date,
                )
            )

        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Billing cycle for subscription {command.subscription_id} failed: {e}")
            return Return.err(
                Error(
                    code="BILLING_CYCLE_FAILED",
                    message=f"Failed to bill subscription {command.subscription_id}",
                    reason=str(e),
                )
            )

    async def _record_failure(
        self,
        subscription: Subscription,
        wallet_id: int,
        balance: Decimal,
        amount: Decimal,
        command: BillSubscriptionCommandDTO,
    ) -> Result[BillingCycleResultDTO]:
        cycle_date = subscription.next_delivery_date
        failed_key = (
            f"{cycle_idempotency_key(subscription.id, cycle_date)}"
            f":failed:{command.as_of_date.isoformat()}"
        )
        result = BillingCycleResultDTO(
            subscription_id=subscription.id,
            outcome=CycleOutcome.INSUFFICIENT_FUNDS,
            amount=amount,
            cycle_date=cycle_date,
            next_delivery_date=cycle_date,
            reason=f"balance={balance}, required={amount}",
        )

        # Replaying the same as-of date records the attempt only once
        existing = await self.ledger_repo.get_by_idempotency_key(failed_key)
        if existing:
            result.ledger_entry_id = existing.id
            await self.uow.rollback()
            return Return.ok(result)

        entry = await self.ledger_repo.create(
            LedgerEntry(
                user_id=subscription.user_id,
                wallet_id=wallet_id,
                direction=EntryDirection.DEBIT,
                status=EntryStatus.FAILED,
                amount=amount,
                balance_before=balance,
                balance_after=balance,
                description=f"Auto-Subscription #{subscription.id} Failed: Insufficient Funds",
                reference_type="subscription",
                reference_id=str(subscription.id),
                idempotency_key=failed_key,
                created_at=command.now,
            )
        )

        subscription.consecutive_failures = (subscription.consecutive_failures or 0) + 1
        decision = self.failure_policy.on_failure(subscription)
        if decision == FailureDecision.PAUSE:
            subscription.status = SubscriptionStatus.PAUSED
        subscription.updated_at = command.now
        await self.subscription_repo.update(subscription)

        await self.uow.commit()

        result.ledger_entry_id = entry.id
        logger.warning(
            f"Subscription {subscription.id}: insufficient funds for {cycle_date.isoformat()} "
            f"({result.reason}), failure #{subscription.consecutive_failures}"
        )

        if decision == FailureDecision.PAUSE:
            result.paused_by_policy = True
            reason = (
                f"{subscription.consecutive_failures} consecutive failed billing attempts"
            )
            logger.warning(f"Subscription {subscription.id} paused: {reason}")
            if self.notification_service:
                await self.notification_service.send_subscription_paused_alert(
                    subscription, reason
                )

        return Return.ok(result)

    async def _skip(self, subscription: Subscription, reason: str) -> Result[BillingCycleResultDTO]:
        # Rollback expires the instance, read it first
        result = BillingCycleResultDTO(
            subscription_id=subscription.id,
            outcome=CycleOutcome.SKIPPED,
            reason=reason,
        )
        await self.uow.rollback()
        logger.warning(f"Skipping subscription {result.subscription_id}: {reason}")
        return Return.ok(result)

    async def _advance_already_billed(
        self,
        subscription: Subscription,
        command: BillSubscriptionCommandDTO,
        existing_entry: LedgerEntry,
    ) -> Result[BillingCycleResultDTO]:
        cycle_date = subscription.next_delivery_date
        subscription.next_delivery_date = advance(cycle_date, subscription.frequency)
        subscription.updated_at = command.now
        await self.subscription_repo.update(subscription)
        await self.uow.commit()

        logger.warning(
            f"Subscription {subscription.id}: cycle {cycle_date.isoformat()} already debited "
            f"(entry {existing_entry.id}), moved to {subscription.next_delivery_date.isoformat()}"
        )
        return Return.ok(
            BillingCycleResultDTO(
                subscription_id=subscription.id,
                outcome=CycleOutcome.ALREADY_BILLED,
                cycle_date=cycle_date,
                ledger_entry_id=existing_entry.id,
                next_delivery_date=subscription.next_delivery_date,
            )
        )
