# storefront/models/order.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Order(SQLModel, table=True):
    """
    Customer order created from a cart at checkout.

    Money fields always reconcile:
      total_price = items_price + tax_price + shipping_price
    """

    __tablename__ = "orders"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    user_id: uuid.UUID = Field(
        foreign_key="users.id",
        index=True,
    )

    # pending | processing | shipped | delivered | cancelled
    status: str = Field(
        default="pending",
        index=True,
        description="Order status lifecycle",
    )

    # Shipping address
    address: str
    city: str
    postal_code: str
    country: str

    payment_method: str = Field(
        description="Payment method chosen at checkout",
    )

    delivery_option_id: uuid.UUID | None = None
    delivery_option_name: str | None = None

    items_price: float = Field(description="Sum of line totals")
    tax_rate: float = Field(description="Tax rate applied at checkout")
    tax_price: float
    shipping_price: float
    total_price: float

    is_paid: bool = Field(default=False)
    paid_at: datetime | None = None
    payment_reference: str | None = None

    is_delivered: bool = Field(default=False)
    delivered_at: datetime | None = None

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )


class OrderItem(SQLModel, table=True):
    """
    Line item inside an order.

    Name and unit price are snapshotted from the product when the order is
    created, so later catalog edits never change historical orders.
    """

    __tablename__ = "order_items"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    order_id: uuid.UUID = Field(
        foreign_key="orders.id",
        index=True,
    )

    product_id: uuid.UUID = Field(
        index=True,
        description="Catalog id at the time of order (not a FK: products may be deleted)",
    )

    product_name: str

    quantity: int = Field(
        gt=0,
        description="Quantity ordered (>=1)",
    )

    unit_price: float = Field(
        description="Unit price at time of order (pre-tax)",
    )
