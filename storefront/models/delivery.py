# storefront/models/delivery.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class DeliveryOption(SQLModel, table=True):
    """
    Shipping method offered at checkout.

    `price` becomes the order's shipping_price; 0 means free shipping.
    """

    __tablename__ = "delivery_options"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    name: str = Field(max_length=100)
    description: str
    provider: str = Field(max_length=100)

    price: float = Field(ge=0)

    min_days: int = Field(ge=0, description="Estimated delivery, lower bound")
    max_days: int = Field(ge=0, description="Estimated delivery, upper bound")

    is_available: bool = Field(default=True, index=True)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
