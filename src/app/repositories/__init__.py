from .wallet_repository import WalletRepository
from .ledger_entry_repository import LedgerEntryRepository
from .subscription_repository import SubscriptionRepository
from .order_repository import OrderRepository
from .catalog_repository import CatalogRepository, AddressRepository, CartRepository

__all__ = [
    "WalletRepository",
    "LedgerEntryRepository",
    "SubscriptionRepository",
    "OrderRepository",
    "CatalogRepository",
    "AddressRepository",
    "CartRepository",
]
