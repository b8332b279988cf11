"""Conflict Resolver

Decides, per requested line, whether the user already has an ACTIVE
subscription for the same (product, variant weight, frequency).
"""

from typing import Dict, List, Optional, Sequence, Tuple, Union
from src.app.repositories.subscription_repository import SubscriptionRepository
from src.domain.line_item import StandardItem, VariantItem
from src.domain.product import CatalogProduct
from src.domain.subscription import Frequency, Subscription, SubscriptionItem
from .dtos import ConflictDTO, EnrollmentItemDTO


class ItemResolution:
    """A requested line and the active subscription it collides with, if any"""

    def __init__(
        self,
        item: Union[StandardItem, VariantItem],
        product: CatalogProduct,
        existing: Optional[Subscription] = None,
        existing_item: Optional[SubscriptionItem] = None,
    ):
        self.item = item
        self.product = product
        self.existing = existing
        self.existing_item = existing_item

    @property
    def is_conflict(self) -> bool:
        return self.existing is not None

    def to_conflict_dto(self) -> ConflictDTO:
        weight = self.item.variant_weight
        name = f"{self.product.name} ({weight})" if weight else self.product.name
        return ConflictDTO(
            product=name,
            product_id=self.product.id,
            variant_weight=weight,
            existing_subscription_id=self.existing.id,
        )


def combine_requested_items(items: Sequence[EnrollmentItemDTO]) -> List[EnrollmentItemDTO]:
    """Sum quantities of lines repeated in one request, keeping first-seen order"""
    combined: Dict[Tuple[int, Optional[str]], EnrollmentItemDTO] = {}
    for item in items:
        key = (item.product_id, item.variant_weight or None)
        if key in combined:
            combined[key] = combined[key].model_copy(
                update={"quantity": combined[key].quantity + item.quantity}
            )
        else:
            combined[key] = item.model_copy(update={"variant_weight": item.variant_weight or None})
    return list(combined.values())


class ConflictResolver:
    """
    Matches requested lines against the user's active subscriptions

    Rules:
    - Match key is (user, product, variant weight, frequency)
    - The same product at another frequency is not a conflict
    - A line without a variant only matches lines without a variant
    """

    def __init__(self, subscription_repo: SubscriptionRepository):
        self.subscription_repo = subscription_repo

    async def resolve(
        self,
        user_id: str,
        items: Sequence[Tuple[Union[StandardItem, VariantItem], CatalogProduct]],
        frequency: Frequency,
    ) -> List[ItemResolution]:
        resolutions: List[ItemResolution] = []
        for item, product in items:
            existing = await self.subscription_repo.find_active_match(
                user_id=user_id,
                product_id=item.product_id,
                variant_weight=item.variant_weight,
                frequency=frequency,
            )
            existing_item = None
            if existing is not None:
                existing_item = await self._matching_line(existing, item)
            resolutions.append(
                ItemResolution(
                    item=item,
                    product=product,
                    existing=existing,
                    existing_item=existing_item,
                )
            )
        return resolutions

    async def _matching_line(
        self, subscription: Subscription, item: Union[StandardItem, VariantItem]
    ) -> Optional[SubscriptionItem]:
        for line in await self.subscription_repo.get_items(subscription.id):
            if line.product_id == item.product_id and (line.variant_weight or None) == item.variant_weight:
                return line
        return None
