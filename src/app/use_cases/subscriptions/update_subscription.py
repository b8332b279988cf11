"""UpdateSubscription Use Case

Edits quantity, cadence, delivery address or due date of a subscription.
"""

from datetime import datetime
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.subscription_repository import SubscriptionRepository
from src.app.repositories.catalog_repository import AddressRepository
from src.domain.subscription import SubscriptionStatus
from .dtos import SubscriptionDTO, UpdateSubscriptionCommandDTO
from .mappers import to_subscription_dto


class UpdateSubscription:
    """
    Use Case: Edit a subscription between cycles

    Business Rules:
    1. Cancelled subscriptions cannot be edited
    2. Quantity edits target one line and apply from the next billed cycle
    3. A new frequency keeps the current due date unless next_delivery_date
       is given as well
    4. An ACTIVE subscription cannot take a frequency another ACTIVE
       subscription already covers for the same product/variant
    5. The delivery address must belong to the user
    """

    def __init__(
        self,
        uow: UnitOfWork,
        subscription_repo: SubscriptionRepository,
        address_repo: AddressRepository,
    ):
        self.uow = uow
        self.subscription_repo = subscription_repo
        self.address_repo = address_repo

    async def execute(self, command: UpdateSubscriptionCommandDTO) -> Result[SubscriptionDTO]:
        try:
            subscription = await self.subscription_repo.get_for_user(
                command.user_id, command.subscription_id
            )
            if not subscription:
                return Return.err(
                    Error(
                        code="SUBSCRIPTION_NOT_FOUND",
                        message=f"Subscription not found: {command.subscription_id}",
                    )
                )

            if subscription.status == SubscriptionStatus.CANCELLED:
                return Return.err(
                    Error(
                        code="INVALID_STATUS_TRANSITION",
                        message="Cancelled subscriptions cannot be changed",
                    )
                )

            items = await self.subscription_repo.get_items(subscription.id)

            if command.quantity is not None:
                if command.product_id is not None:
                    targets = [i for i in items if i.product_id == command.product_id]
                else:
                    targets = items if len(items) == 1 else []
                if len(targets) != 1:
                    return Return.err(
                        Error(
                            code="ITEM_NOT_FOUND",
                            message="Specify the product_id of exactly one subscription line",
                        )
                    )
                targets[0].quantity = command.quantity
                await self.subscription_repo.update_item(targets[0])

            if command.frequency is not None and command.frequency != subscription.frequency:
                if subscription.status == SubscriptionStatus.ACTIVE:
                    for item in items:
                        clash = await self.subscription_repo.find_active_match(
                            user_id=command.user_id,
                            product_id=item.product_id,
                            variant_weight=item.variant_weight,
                            frequency=command.frequency,
                            exclude_subscription_id=subscription.id,
                        )
                        if clash:
                            error = Error(
                                code="SUBSCRIPTION_CONFLICT",
                                message=(
                                    f"Subscription {clash.id} already delivers product "
                                    f"{item.product_id} {command.frequency.value}"
                                ),
                                details={"existing_subscription_id": clash.id},
                            )
                            await self.uow.rollback()
                            return Return.err(error)
                subscription.frequency = command.frequency

            if command.delivery_address_id is not None:
                address = await self.address_repo.get_for_user(
                    command.user_id, command.delivery_address_id
                )
                if not address:
                    await self.uow.rollback()
                    return Return.err(
                        Error(
                            code="ADDRESS_NOT_FOUND",
                            message=f"Address not found: {command.delivery_address_id}",
                        )
                    )
                subscription.delivery_address_id = command.delivery_address_id

            if command.next_delivery_date is not None:
                subscription.next_delivery_date = command.next_delivery_date

            subscription.updated_at = datetime.utcnow()
            await self.subscription_repo.update(subscription)
            await self.uow.commit()

            return Return.ok(to_subscription_dto(subscription, items))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="UPDATE_SUBSCRIPTION_FAILED",
                    message="Failed to update subscription",
                    reason=str(e),
                )
            )
