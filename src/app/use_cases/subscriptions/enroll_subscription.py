"""EnrollSubscription Use Case

Creates or merges subscriptions for a batch of products at one cadence,
with a conflict confirmation round-trip when the user already has them.
"""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import List, Tuple, Union
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.payment_tokenizer import PaymentTokenizer
from src.app.services.cycle_pricing import price_cycle, DEFAULT_DISCOUNT_RATE
from src.app.repositories.subscription_repository import SubscriptionRepository
from src.app.repositories.wallet_repository import WalletRepository
from src.app.repositories.catalog_repository import (
    CatalogRepository,
    AddressRepository,
    CartRepository,
)
from src.domain.line_item import StandardItem, VariantItem
from src.domain.product import CatalogProduct
from src.domain.subscription import Subscription, SubscriptionItem, SubscriptionStatus
from src.domain.wallet import Wallet
from .conflict_resolver import ConflictResolver, ItemResolution, combine_requested_items
from .dtos import EnrollCommandDTO, EnrollmentResultDTO
from .mappers import to_subscription_dto

logger = logging.getLogger(__name__)


class EnrollSubscription:
    """
    Use Case: Enroll a user's products into recurring delivery

    Business Rules:
    1. Every product, requested variant and the delivery address must exist
    2. Start date defaults to today and cannot be in the past
    3. Conflicts without force_merge: report them, write nothing
    4. force_merge: add quantities to matching active subscriptions,
       create a new ACTIVE subscription for every other line
    5. Wallet payments need a balance covering the first cycle; the wallet
       is not charged here, only by the billing sweep
    6. The user's wallet row is locked for the whole enrollment, so
       concurrent enrollments of one user serialize
    7. A successful enrollment clears the user's cart

    Flow:
    1. Validate address, products and variants
    2. Lock (or open) the user's wallet
    3. Resolve conflicts
    4. Check wallet balance for the first cycle
    5. Tokenize payment method
    6. Merge / create subscriptions
    7. Clear cart and commit
    """

    def __init__(
        self,
        uow: UnitOfWork,
        subscription_repo: SubscriptionRepository,
        wallet_repo: WalletRepository,
        catalog_repo: CatalogRepository,
        address_repo: AddressRepository,
        cart_repo: CartRepository,
        tokenizer: PaymentTokenizer,
        discount_rate: Decimal = DEFAULT_DISCOUNT_RATE,
        require_wallet_balance: bool = True,
    ):
        self.uow = uow
        self.subscription_repo = subscription_repo
        self.wallet_repo = wallet_repo
        self.catalog_repo = catalog_repo
        self.address_repo = address_repo
        self.cart_repo = cart_repo
        self.tokenizer = tokenizer
        self.discount_rate = Decimal(discount_rate)
        self.require_wallet_balance = require_wallet_balance
        self.conflict_resolver = ConflictResolver(subscription_repo)

    async def execute(self, command: EnrollCommandDTO) -> Result[EnrollmentResultDTO]:
        """
        Execute enrollment

        Args:
            command: EnrollCommandDTO with items, frequency, address and flags

        Returns:
            Result[EnrollmentResultDTO]: created/merged subscriptions, or the
            conflicts when force_merge is off; Error on validation failures
        """
        try:
            today = command.today or date.today()
            start_date = command.start_date or today
            if start_date < today:
                return Return.err(
                    Error(
                        code="INVALID_START_DATE",
                        message=f"Start date {start_date.isoformat()} is in the past",
                    )
                )

            # Step 1: Validate address and catalog references
            address = await self.address_repo.get_for_user(
                command.user_id, command.delivery_address_id
            )
            if not address:
                return Return.err(
                    Error(
                        code="ADDRESS_NOT_FOUND",
                        message=f"Address not found: {command.delivery_address_id}",
                    )
                )

            requested = combine_requested_items(command.items)
            products = await self.catalog_repo.get_products(
                [item.product_id for item in requested]
            )

            line_items: List[Tuple[Union[StandardItem, VariantItem], CatalogProduct]] = []
            for item in requested:
                product = products.get(item.product_id)
                if product is None:
                    return Return.err(
                        Error(
                            code="PRODUCT_NOT_FOUND",
                            message=f"Product not found: {item.product_id}",
                        )
                    )
                if item.variant_weight:
                    variant_price = product.variant_price(item.variant_weight)
                    if variant_price is None:
                        return Return.err(
                            Error(
                                code="VARIANT_NOT_FOUND",
                                message=f"Variant {item.variant_weight} not found for product {product.name}",
                            )
                        )
                    line = VariantItem(
                        product_id=product.id,
                        quantity=item.quantity,
                        weight=item.variant_weight,
                        price=variant_price,
                    )
                else:
                    line = StandardItem(product_id=product.id, quantity=item.quantity)
                line_items.append((line, product))

            # Step 2: Lock the wallet row to serialize this user's enrollments
            wallet = await self.wallet_repo.get_by_user_id(command.user_id, for_update=True)
            if not wallet:
                wallet = await self.wallet_repo.create(
                    Wallet(user_id=command.user_id, balance=Decimal("0"))
                )

            # Step 3: Conflict detection
            resolutions = await self.conflict_resolver.resolve(
                command.user_id, line_items, command.frequency
            )
            conflicts = [r.to_conflict_dto() for r in resolutions if r.is_conflict]
            if conflicts and not command.force_merge:
                await self.uow.rollback()
                return Return.ok(
                    EnrollmentResultDTO(
                        status="conflict",
                        message="You already have subscriptions for these items.",
                        conflicts=conflicts,
                    )
                )

            # Step 4: First-cycle affordability for wallet payments
            if self.require_wallet_balance and command.payment_method == "wallet":
                first_cycle = price_cycle(
                    [line for line, _ in line_items], products, self.discount_rate
                )
                if wallet.balance < first_cycle.total:
                    error = Error(
                        code="INSUFFICIENT_WALLET_BALANCE",
                        message="Insufficient wallet balance",
                        reason=f"balance={wallet.balance}, first_cycle={first_cycle.total}",
                    )
                    await self.uow.rollback()
                    return Return.err(error)

            # Step 5: Tokenize payment method
            token = await self.tokenizer.tokenize(command.payment_method)

            # Step 6: Merge or create
            now = datetime.utcnow()
            affected = []
            for resolution in resolutions:
                if resolution.is_conflict and resolution.existing_item is not None:
                    affected.append(await self._merge(resolution, now))
                else:
                    affected.append(
                        await self._create(command, resolution, start_date, token, now)
                    )

            # Step 7: Clear cart and commit
            await self.cart_repo.clear(command.user_id)
            await self.uow.commit()

            logger.info(
                f"Enrolled user {command.user_id}: {len(affected)} subscription(s) "
                f"({len(conflicts)} merged), first delivery {start_date.isoformat()}"
            )

            return Return.ok(
                EnrollmentResultDTO(
                    status="created",
                    message=(
                        "Subscription active. First delivery scheduled for "
                        f"{start_date.isoformat()}"
                    ),
                    subscriptions=affected,
                )
            )

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="ENROLL_SUBSCRIPTION_FAILED",
                    message="Failed to enroll subscription",
                    reason=str(e),
                )
            )

    async def _merge(self, resolution: ItemResolution, now: datetime):
        line = resolution.existing_item
        line.quantity = line.quantity + resolution.item.quantity
        await self.subscription_repo.update_item(line)

        subscription = resolution.existing
        subscription.updated_at = now
        await self.subscription_repo.update(subscription)

        items = await self.subscription_repo.get_items(subscription.id)
        return to_subscription_dto(subscription, items)

    async def _create(
        self,
        command: EnrollCommandDTO,
        resolution: ItemResolution,
        start_date: date,
        token: str,
        now: datetime,
    ):
        item = resolution.item
        subscription = Subscription(
            user_id=command.user_id,
            delivery_address_id=command.delivery_address_id,
            frequency=command.frequency,
            status=SubscriptionStatus.ACTIVE,
            next_delivery_date=start_date,
            payment_method=command.payment_method,
            payment_method_token=token,
            consecutive_failures=0,
            created_at=now,
            updated_at=now,
        )
        line = SubscriptionItem(
            position=0,
            product_id=item.product_id,
            quantity=item.quantity,
            variant_weight=item.variant_weight,
            variant_price=item.price if isinstance(item, VariantItem) else None,
        )
        created = await self.subscription_repo.create(subscription, [line])
        return to_subscription_dto(created, [line])
