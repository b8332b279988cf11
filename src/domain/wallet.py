"""Wallet Domain Entity

Prepaid wallet balance per user. Each user has at most one wallet.
Balance is always >= 0 and only changes together with a LedgerEntry.
"""

from datetime import datetime
from decimal import Decimal
from sqlmodel import Field, Column
from sqlalchemy import CheckConstraint, Numeric
from src.domain.base import BaseModel, IdType


class Wallet(BaseModel, table=True):
    """
    Wallet - Denormalized running balance of a user's ledger

    Domain Rules:
    - One wallet per user (user_id is unique)
    - Balance must be non-negative
    - Balance updates only through LedgerEntries (debit-if-sufficient / credit)
    - balance == sum(successful credits) - sum(successful debits)
    """

    __tablename__ = "wallets"
    __table_args__ = (
        CheckConstraint('balance >= 0', name='wallet_balance_non_negative'),
    )

    id: int = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Unique wallet identifier (auto-increment)"
    )

    user_id: str = Field(
        index=True,
        unique=True,
        description="Owning user (unique - one wallet per user)"
    )

    balance: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 6), nullable=False, default=0),
        description="Spendable balance (must be >= 0, precision: 18,6)"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Wallet creation timestamp"
    )

    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Last balance update timestamp"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "id": 1,
                "user_id": "user_42",
                "balance": "200.000000",
                "created_at": "2024-01-01T00:00:00Z",
                "updated_at": "2024-01-01T00:00:00Z"
            }
        }
