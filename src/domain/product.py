"""Product Read Model

Catalog rows owned by the catalog subsystem. This service only reads them
to validate enrollments and price billing cycles.
"""

from decimal import Decimal
from typing import Dict, Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import ForeignKey, Numeric, String
from src.domain.base import BaseModel, IdType


class Product(BaseModel, table=True):
    """Product with a base (display) price"""

    __tablename__ = "products"

    id: int = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
    )

    name: str = Field(
        sa_column=Column(String(255), nullable=False),
    )

    price: Decimal = Field(
        sa_column=Column(Numeric(18, 6), nullable=False),
        description="Base price used when no variant is chosen"
    )


class ProductVariant(BaseModel, table=True):
    """Weight-based variant of a product with its own price"""

    __tablename__ = "product_variants"
    __table_args__ = (
        Index('ix_product_variants_product_weight', 'product_id', 'weight', unique=True),
    )

    id: int = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
    )

    product_id: int = Field(
        sa_column=Column(IdType, ForeignKey("products.id", ondelete="CASCADE"), nullable=False),
    )

    weight: str = Field(
        sa_column=Column(String(50), nullable=False),
    )

    price: Decimal = Field(
        sa_column=Column(Numeric(18, 6), nullable=False),
    )


class CatalogProduct(BaseModel):
    """Product with its variant prices, as read by this service"""

    id: int
    name: str
    price: Decimal
    variants: Dict[str, Decimal] = {}

    def variant_price(self, weight: str) -> Optional[Decimal]:
        return self.variants.get(weight)
