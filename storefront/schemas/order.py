# storefront/schemas/order.py
import uuid
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

OrderStatus = Literal["pending", "processing", "shipped", "delivered", "cancelled"]


class OrderCreate(SQLModel):
    """
    Payload for creating an order from the current cart.

    User provides:
      - shipping address
      - payment method
      - delivery option (optional; none => free shipping)

    Backend derives:
      - user_id from token
      - status = 'pending'
      - items and prices snapshotted from the catalog
      - items/tax/shipping/total prices
    """

    model_config = ConfigDict(extra="forbid")

    address: str
    city: str
    postal_code: str
    country: str
    payment_method: str = Field(max_length=50)
    delivery_option_id: uuid.UUID | None = None

    @field_validator("address", "city", "postal_code", "country", "payment_method")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class OrderRead(SQLModel):
    """
    Lightweight representation of an order (without items).
    """

    id: uuid.UUID
    user_id: uuid.UUID
    status: OrderStatus
    address: str
    city: str
    postal_code: str
    country: str
    payment_method: str
    delivery_option_id: uuid.UUID | None
    delivery_option_name: str | None
    items_price: float
    tax_rate: float
    tax_price: float
    shipping_price: float
    total_price: float
    is_paid: bool
    paid_at: datetime | None
    payment_reference: str | None
    is_delivered: bool
    delivered_at: datetime | None
    created_at: datetime


class OrderItemRead(SQLModel):
    """
    Representation of a single order line item.
    """

    id: uuid.UUID
    order_id: uuid.UUID
    product_id: uuid.UUID
    product_name: str
    quantity: int
    unit_price: float
    line_total: float


class OrderWithItemsRead(OrderRead):
    """
    Full order view including items.
    """

    items: list[OrderItemRead]


class OrderStatusUpdate(SQLModel):
    """
    Admin payload to change order status.
    """

    model_config = ConfigDict(extra="forbid")

    status: OrderStatus


class OrderPayment(SQLModel):
    """
    Payment confirmation recorded against an order.
    The gateway itself lives outside this service.
    """

    model_config = ConfigDict(extra="forbid")

    reference: str = Field(min_length=1, max_length=255)
