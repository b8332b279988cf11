from .base import BaseModel, generate_uuid
from .wallet import Wallet
from .ledger_entry import LedgerEntry, EntryDirection, EntryStatus
from .subscription import Subscription, SubscriptionItem, SubscriptionStatus, Frequency
from .order import Order, OrderItem, OrderStatus, PaymentStatus, OrderType
from .product import Product, ProductVariant, CatalogProduct
from .address import Address
from .cart import CartItem

__all__ = [
    "BaseModel",
    "generate_uuid",
    "Wallet",
    "LedgerEntry",
    "EntryDirection",
    "EntryStatus",
    "Subscription",
    "SubscriptionItem",
    "SubscriptionStatus",
    "Frequency",
    "Order",
    "OrderItem",
    "OrderStatus",
    "PaymentStatus",
    "OrderType",
    "Product",
    "ProductVariant",
    "CatalogProduct",
    "Address",
    "CartItem",
]
