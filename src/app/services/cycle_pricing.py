"""Cycle Pricing

Prices one billing cycle of a subscription: resolves each line to a unit
price, applies the subscription discount and sums the cycle total.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional, Sequence, Union
from pydantic import BaseModel
from src.domain.line_item import StandardItem, VariantItem
from src.domain.product import CatalogProduct

CENT = Decimal("0.01")
DEFAULT_DISCOUNT_RATE = Decimal("0.15")


class PricedLine(BaseModel):
    product_id: int
    product_name: str
    quantity: int
    unit_price: Decimal
    weight: Optional[str] = None
    line_total: Decimal


class CyclePrice(BaseModel):
    lines: List[PricedLine]
    total: Decimal
    missing_product_ids: List[int] = []


def discounted(price: Decimal, discount_rate: Decimal) -> Decimal:
    """Apply the discount and round to cents (half up)"""
    return (Decimal(price) * (Decimal("1") - Decimal(discount_rate))).quantize(
        CENT, rounding=ROUND_HALF_UP
    )


def price_cycle(
    items: Sequence[Union[StandardItem, VariantItem]],
    products: Dict[int, CatalogProduct],
    discount_rate: Decimal = DEFAULT_DISCOUNT_RATE,
) -> CyclePrice:
    """
    Price a cycle against the current catalog

    Lines whose product no longer exists are left out and reported in
    missing_product_ids; if nothing is left the total is zero.

    Args:
        items: Subscription line items
        products: Catalog products keyed by id
        discount_rate: Fraction taken off every unit price (0.15 = 15%)

    Returns:
        CyclePrice with priced lines and total
    """
    lines: List[PricedLine] = []
    missing: List[int] = []
    total = Decimal("0")

    for item in items:
        product = products.get(item.product_id)
        if product is None:
            missing.append(item.product_id)
            continue

        unit_price = discounted(item.unit_price(product), discount_rate)
        line_total = unit_price * item.quantity
        total += line_total
        lines.append(
            PricedLine(
                product_id=product.id,
                product_name=product.name,
                quantity=item.quantity,
                unit_price=unit_price,
                weight=item.variant_weight,
                line_total=line_total,
            )
        )

    return CyclePrice(lines=lines, total=total, missing_product_ids=missing)
