"""Request schemas for Wallet API"""

from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field, field_validator


class TopUpRequestSchema(BaseModel):
    """
    Request schema for topping up the wallet

    Used for POST /wallet/top-up endpoint.
    """

    amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount to add (must be > 0)"
    )

    idempotency_key: Optional[str] = Field(
        default=None,
        min_length=1,
        description="Unique key; a retried request with the same key is applied once"
    )

    reference_id: Optional[str] = Field(
        default=None,
        description="External payment reference"
    )

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v):
        """Amounts are stored with 6 decimal places"""
        if v.as_tuple().exponent < -6:
            raise ValueError("Amount supports at most 6 decimal places")
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "amount": "200.00",
                "idempotency_key": "topup_9f1c",
                "reference_id": "pay_123"
            }
        }
