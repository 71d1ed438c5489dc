# storefront/schemas/stats.py
import uuid
from datetime import datetime

from sqlmodel import SQLModel

from storefront.schemas.order import OrderStatus


class TopProduct(SQLModel):
    """Best seller by units sold (cancelled orders excluded)."""

    product_id: uuid.UUID
    name: str
    total_quantity: int
    total_revenue: float


class LatestOrderSummary(SQLModel):
    id: uuid.UUID
    created_at: datetime
    user_id: uuid.UUID
    status: OrderStatus
    is_paid: bool
    total_price: float


class DashboardStats(SQLModel):
    """
    Analytics dashboard payload.

    total_orders counts every order; total_revenue and average_order_value
    only non-cancelled ones.
    """

    total_customers: int
    total_orders: int
    orders_by_status: dict[str, int]
    total_revenue: float
    average_order_value: float
    top_products: list[TopProduct]
    latest_orders: list[LatestOrderSummary]
