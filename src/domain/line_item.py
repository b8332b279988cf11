"""Subscription line items

A line is either a plain product or a weight variant of a product.
Callers resolve a line to a concrete unit price with unit_price() instead
of branching on which variant fields happen to be set.
"""

from decimal import Decimal
from typing import Annotated, Literal, Optional, Union
from pydantic import BaseModel, Field
from src.domain.product import CatalogProduct
from src.domain.subscription import SubscriptionItem


class StandardItem(BaseModel):
    kind: Literal["standard"] = "standard"
    product_id: int
    quantity: int = Field(ge=1)

    @property
    def variant_weight(self) -> Optional[str]:
        return None

    def unit_price(self, product: CatalogProduct) -> Decimal:
        return product.price


class VariantItem(BaseModel):
    kind: Literal["variant"] = "variant"
    product_id: int
    quantity: int = Field(ge=1)
    weight: str
    price: Decimal

    @property
    def variant_weight(self) -> Optional[str]:
        return self.weight

    def unit_price(self, product: CatalogProduct) -> Decimal:
        # Live catalog price wins; the enrollment-time price covers delisted variants
        live_price = product.variant_price(self.weight)
        return live_price if live_price is not None else self.price


LineItem = Annotated[Union[StandardItem, VariantItem], Field(discriminator="kind")]


def from_subscription_item(item: SubscriptionItem) -> Union[StandardItem, VariantItem]:
    if item.variant_weight:
        return VariantItem(
            product_id=item.product_id,
            quantity=item.quantity,
            weight=item.variant_weight,
            price=item.variant_price if item.variant_price is not None else Decimal("0"),
        )
    return StandardItem(product_id=item.product_id, quantity=item.quantity)
