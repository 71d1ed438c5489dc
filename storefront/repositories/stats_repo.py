# storefront/repositories/stats_repo.py
from sqlalchemy import func
from sqlmodel import Session, select

from storefront.models.order import Order, OrderItem
from storefront.models.user import User


class StatsRepository:
    """
    Read-only aggregates behind the analytics dashboard.

    Cancelled orders count towards the order total and the status breakdown,
    never towards revenue or best sellers.
    """

    def customer_count(self, session: Session) -> int:
        stmt = select(func.count()).select_from(User).where(User.role == "client")
        return int(session.exec(stmt).one() or 0)

    def orders_by_status(self, session: Session) -> dict[str, int]:
        stmt = select(Order.status, func.count()).group_by(Order.status)
        return {status: int(n) for status, n in session.exec(stmt).all()}

    def revenue(self, session: Session) -> tuple[int, float]:
        """(number of billable orders, sum of their total_price)"""
        stmt = select(
            func.count(),
            func.coalesce(func.sum(Order.total_price), 0.0),
        ).where(Order.status != "cancelled")
        count, total = session.exec(stmt).one()
        return int(count or 0), float(total or 0.0)

    def best_sellers(self, session: Session, limit: int = 5) -> list[tuple]:
        """
        (product_id, name, units, revenue) rows, most units first.

        Names come from the order snapshots, so deleted products still show.
        """
        units = func.sum(OrderItem.quantity)
        stmt = (
            select(
                OrderItem.product_id,
                func.max(OrderItem.product_name),
                units,
                func.sum(OrderItem.quantity * OrderItem.unit_price),
            )
            .join(Order, Order.id == OrderItem.order_id)
            .where(Order.status != "cancelled")
            .group_by(OrderItem.product_id)
            .order_by(units.desc())
            .limit(limit)
        )
        return list(session.exec(stmt).all())

    def recent_orders(self, session: Session, limit: int = 5) -> list[Order]:
        stmt = select(Order).order_by(Order.created_at.desc()).limit(limit)
        return list(session.exec(stmt).all())
