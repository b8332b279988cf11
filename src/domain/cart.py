"""Cart Item Read Model

Cart lines are owned by the cart subsystem. A successful enrollment
empties the user's cart.
"""

from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import String
from src.domain.base import BaseModel, IdType


class CartItem(BaseModel, table=True):
    __tablename__ = "cart_items"

    id: int = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
    )

    user_id: str = Field(index=True)

    product_id: int

    quantity: int = Field(default=1)

    variant_weight: Optional[str] = Field(
        default=None,
        sa_column=Column(String(50), nullable=True),
    )
