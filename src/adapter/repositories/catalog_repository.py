"""SQLAlchemy implementations of the catalog, address and cart repositories

Read-only views of data owned by other parts of the shop, except for
clearing the cart after enrollment.
"""

from typing import Dict, Iterable, List, Optional
from sqlalchemy import delete
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.catalog_repository import (
    CatalogRepository,
    AddressRepository,
    CartRepository,
)
from src.domain.address import Address
from src.domain.cart import CartItem
from src.domain.product import CatalogProduct, Product, ProductVariant


class SqlAlchemyCatalogRepository(CatalogRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_product(self, product_id: int) -> Optional[CatalogProduct]:
        products = await self.get_products([product_id])
        return products.get(product_id)

    async def get_products(self, product_ids: Iterable[int]) -> Dict[int, CatalogProduct]:
        """
        Load products with their variant price table

        Args:
            product_ids: Product IDs (duplicates allowed)

        Returns:
            CatalogProduct by ID; missing IDs are absent from the dict
        """
        ids = set(product_ids)
        if not ids:
            return {}

        result = await self.session.execute(select(Product).where(Product.id.in_(ids)))
        products = {
            p.id: CatalogProduct(id=p.id, name=p.name, price=p.price)
            for p in result.scalars().all()
        }

        variants = await self.session.execute(
            select(ProductVariant).where(ProductVariant.product_id.in_(products.keys()))
        )
        for variant in variants.scalars().all():
            products[variant.product_id].variants[variant.weight] = variant.price

        return products


class SqlAlchemyAddressRepository(AddressRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_for_user(self, user_id: str, address_id: int) -> Optional[Address]:
        stmt = select(Address).where(Address.id == address_id, Address.user_id == user_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_by_user(self, user_id: str) -> List[Address]:
        stmt = select(Address).where(Address.user_id == user_id).order_by(Address.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())


class SqlAlchemyCartRepository(CartRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def clear(self, user_id: str) -> int:
        result = await self.session.execute(
            delete(CartItem).where(CartItem.user_id == user_id)
        )
        return result.rowcount
