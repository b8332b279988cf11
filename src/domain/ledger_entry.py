"""Ledger Entry Domain Entity

Immutable append-only record of every wallet credit and debit attempt,
including failed billing attempts that did not move the balance.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import ForeignKey, Numeric, String
from src.domain.base import BaseModel, IdType


class EntryDirection(str, Enum):
    """Direction of money relative to the wallet"""
    CREDIT = "credit"   # Money added (top-up)
    DEBIT = "debit"     # Money taken (subscription billing)


class EntryStatus(str, Enum):
    """Outcome of the ledger operation"""
    SUCCESS = "success"
    FAILED = "failed"     # Attempt recorded, balance untouched
    PENDING = "pending"


class LedgerEntry(BaseModel, table=True):
    """
    Ledger Entry - Immutable audit trail of wallet mutations

    Domain Rules:
    - Entries are immutable (append-only)
    - amount is always positive; direction says which way it moved
    - idempotency_key must be unique (prevents double-billing a cycle)
    - FAILED entries keep balance_before == balance_after
    - Only SUCCESS entries count towards the wallet balance
    """

    __tablename__ = "ledger_entries"
    __table_args__ = (
        Index('ix_ledger_entries_created_at', 'created_at'),
        Index('ix_ledger_entries_reference', 'reference_type', 'reference_id'),
    )

    id: int = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Unique entry identifier (auto-increment)"
    )

    user_id: str = Field(
        index=True,
        description="Owning user"
    )

    wallet_id: int = Field(
        sa_column=Column(IdType, ForeignKey("wallets.id", ondelete="CASCADE"), nullable=False),
        description="Foreign key to Wallet"
    )

    direction: EntryDirection = Field(
        description="credit or debit"
    )

    status: EntryStatus = Field(
        default=EntryStatus.SUCCESS,
        description="success, failed or pending"
    )

    amount: Decimal = Field(
        sa_column=Column(Numeric(18, 6), nullable=False),
        description="Positive amount (precision: 18,6)"
    )

    balance_before: Decimal = Field(
        sa_column=Column(Numeric(18, 6), nullable=False),
        description="Wallet balance before the entry"
    )

    balance_after: Decimal = Field(
        sa_column=Column(Numeric(18, 6), nullable=False),
        description="Wallet balance after the entry"
    )

    description: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="Human-readable description shown in the wallet history"
    )

    reference_type: Optional[str] = Field(
        default=None,
        sa_column=Column(String(50), nullable=True),
        description="Type of reference (e.g., 'subscription', 'top_up')"
    )

    reference_id: Optional[str] = Field(
        default=None,
        sa_column=Column(String(255), nullable=True),
        description="ID of referenced entity (e.g., subscription id)"
    )

    idempotency_key: str = Field(
        unique=True,
        index=True,
        description="Unique key for idempotent operations (e.g., subscription:12:2024-01-31)"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Entry timestamp (immutable)"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "id": 1,
                "user_id": "user_42",
                "wallet_id": 1,
                "direction": "debit",
                "status": "success",
                "amount": "102.000000",
                "balance_before": "200.000000",
                "balance_after": "98.000000",
                "description": "Auto-Subscription #7 (Order #3)",
                "reference_type": "subscription",
                "reference_id": "7",
                "idempotency_key": "subscription:7:2024-01-31",
                "created_at": "2024-01-31T09:00:00Z"
            }
        }
