# storefront/schemas/wishlist.py
import uuid
from datetime import datetime

from sqlmodel import SQLModel


class WishlistAdd(SQLModel):
    product_id: uuid.UUID


class WishlistItemRead(SQLModel):
    """A saved product, read from the live catalog."""

    product_id: uuid.UUID
    product_name: str
    price: float
    stock_on_hand: int
    average_rating: float
    added_at: datetime
