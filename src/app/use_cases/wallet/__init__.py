"""Wallet use cases"""
from .top_up_wallet import TopUpWallet
from .get_wallet import GetWallet
from .reconcile_wallets import ReconcileWallets
from .dtos import (
    TopUpCommandDTO,
    TopUpResponseDTO,
    LedgerEntryDTO,
    WalletResponseDTO,
    WalletDiscrepancyDTO,
    ReconciliationResultDTO,
)

__all__ = [
    "TopUpWallet",
    "GetWallet",
    "ReconcileWallets",
    "TopUpCommandDTO",
    "TopUpResponseDTO",
    "LedgerEntryDTO",
    "WalletResponseDTO",
    "WalletDiscrepancyDTO",
    "ReconciliationResultDTO",
]
