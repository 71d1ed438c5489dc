# storefront/schemas/cart.py
import uuid
from datetime import datetime

from sqlmodel import SQLModel


class CartItemCreate(SQLModel):
    """
    Payload for adding to cart.

    quantity must be an integer (pydantic answers 422 otherwise); its range
    is left to the cart rules, which reject values below 1 with
    InvalidQuantity.
    """

    product_id: uuid.UUID
    quantity: int = 1


class CartItemUpdate(SQLModel):
    """
    Payload for replacing the quantity of a cart item.
    """

    quantity: int


class CartItemRead(SQLModel):
    """
    Read model for a single cart line, priced from the live catalog.
    """

    product_id: uuid.UUID
    product_name: str
    quantity: int
    unit_price: float
    line_total: float
    stock_on_hand: int
    added_at: datetime


class CartSummary(SQLModel):
    """
    Full cart response model with totals.
    """

    id: uuid.UUID | None = None
    items: list[CartItemRead]
    total_quantity: int
    items_price: float
    tax_price: float
    total_price: float
