"""Address Read Model

Delivery addresses are managed by the profile subsystem; this service only
checks ownership and lists them as delivery options.
"""

from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import String
from src.domain.base import BaseModel, IdType


class Address(BaseModel, table=True):
    __tablename__ = "addresses"

    id: int = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
    )

    user_id: str = Field(index=True)

    label: Optional[str] = Field(
        default=None,
        sa_column=Column(String(50), nullable=True),
    )

    line1: str = Field(sa_column=Column(String(255), nullable=False))

    city: str = Field(sa_column=Column(String(100), nullable=False))

    postal_code: str = Field(sa_column=Column(String(20), nullable=False))
