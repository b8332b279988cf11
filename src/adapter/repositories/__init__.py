from .wallet_repository import SqlAlchemyWalletRepository
from .ledger_entry_repository import SqlAlchemyLedgerEntryRepository
from .subscription_repository import SqlAlchemySubscriptionRepository
from .order_repository import SqlAlchemyOrderRepository
from .catalog_repository import (
    SqlAlchemyCatalogRepository,
    SqlAlchemyAddressRepository,
    SqlAlchemyCartRepository,
)

__all__ = [
    "SqlAlchemyWalletRepository",
    "SqlAlchemyLedgerEntryRepository",
    "SqlAlchemySubscriptionRepository",
    "SqlAlchemyOrderRepository",
    "SqlAlchemyCatalogRepository",
    "SqlAlchemyAddressRepository",
    "SqlAlchemyCartRepository",
]
