"""Data Transfer Objects for Wallet Use Cases

Pydantic models for command inputs and response outputs.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field


class TopUpCommandDTO(BaseModel):
    """
    Command DTO for crediting a wallet

    Used as input to TopUpWallet use case.
    """

    user_id: str = Field(
        ...,
        description="Wallet owner"
    )

    amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount to add (must be positive)"
    )

    idempotency_key: Optional[str] = Field(
        default=None,
        description="Repeating a key returns the original entry (generated when omitted)"
    )

    reference_type: Optional[str] = Field(
        default="top_up",
        description="Type of reference (e.g. 'top_up', 'refund')"
    )

    reference_id: Optional[str] = Field(
        default=None,
        description="External payment reference"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "user_id": "user_42",
                "amount": "200.00",
                "idempotency_key": "topup_9f1c",
                "reference_type": "top_up",
                "reference_id": "pay_123"
            }
        }


class LedgerEntryDTO(BaseModel):
    """One wallet ledger entry"""

    id: int
    direction: str
    status: str
    amount: Decimal
    balance_before: Decimal
    balance_after: Decimal
    description: str
    reference_type: Optional[str] = None
    reference_id: Optional[str] = None
    idempotency_key: str
    created_at: datetime


class TopUpResponseDTO(BaseModel):
    """
    Response DTO for top-up

    Balance snapshots come from the ledger entry, so a replayed request
    returns the same numbers.
    """

    entry_id: int = Field(..., description="Ledger entry ID")

    user_id: str

    amount: Decimal

    balance_before: Decimal

    balance_after: Decimal

    idempotency_key: str

    created_at: datetime

    class Config:
        json_schema_extra = {
            "example": {
                "entry_id": 17,
                "user_id": "user_42",
                "amount": "200.000000",
                "balance_before": "0.000000",
                "balance_after": "200.000000",
                "idempotency_key": "topup_9f1c",
                "created_at": "2024-01-01T00:00:00Z"
            }
        }


class WalletResponseDTO(BaseModel):
    """
    Response DTO for get wallet

    Balance plus one page of ledger entries, newest first.
    """

    user_id: str
    balance: Decimal
    last_updated: datetime
    entries: List[LedgerEntryDTO] = []
    total: int = Field(0, description="Total entries for the user")
    limit: int = 20
    offset: int = 0


class WalletDiscrepancyDTO(BaseModel):
    user_id: str
    wallet_id: int
    wallet_balance: Decimal
    calculated_balance: Decimal
    discrepancy: Decimal


class ReconciliationResultDTO(BaseModel):
    """Result DTO for wallet reconciliation (read-only)"""

    total_wallets_checked: int
    discrepancies_found: int
    discrepancies: List[WalletDiscrepancyDTO] = []
    reconciliation_time: datetime
    execution_time_ms: int

    class Config:
        json_schema_extra = {
            "example": {
                "total_wallets_checked": 120,
                "discrepancies_found": 0,
                "discrepancies": [],
                "reconciliation_time": "2024-01-31T09:05:00Z",
                "execution_time_ms": 42
            }
        }
