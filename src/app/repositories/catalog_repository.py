"""Catalog Repository Interface

Read-only access to products, addresses and carts owned by other
subsystems.
"""

from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional
from src.domain.address import Address
from src.domain.product import CatalogProduct


class CatalogRepository(ABC):
    """Product lookups with variant prices"""

    @abstractmethod
    async def get_product(self, product_id: int) -> Optional[CatalogProduct]:
        pass

    @abstractmethod
    async def get_products(self, product_ids: Iterable[int]) -> Dict[int, CatalogProduct]:
        """
        Retrieve several products at once

        Returns:
            Mapping of product id to product; missing products are absent
        """
        pass


class AddressRepository(ABC):
    """Ownership checks and listing of delivery addresses"""

    @abstractmethod
    async def get_for_user(self, user_id: str, address_id: int) -> Optional[Address]:
        pass

    @abstractmethod
    async def list_by_user(self, user_id: str) -> List[Address]:
        pass


class CartRepository(ABC):

    @abstractmethod
    async def clear(self, user_id: str) -> int:
        """
        Empty the user's cart

        Returns:
            Number of removed cart lines
        """
        pass
