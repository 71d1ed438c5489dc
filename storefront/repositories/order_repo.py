# storefront/repositories/order_repo.py
import uuid

from sqlmodel import Session, select

from storefront.models.order import Order, OrderItem


class OrderRepository:
    """
    Orders and their line snapshots.

    Nothing here commits: checkout, cancellation and status changes each
    touch orders, stock and carts in one transaction owned by the service.
    """

    def get(
        self,
        session: Session,
        order_id: uuid.UUID,
        lock: bool = False,
    ) -> Order | None:
        """
        Load one order. With `lock=True` the row stays locked until the
        transaction ends, so two status changes cannot both restore stock.
        """
        stmt = select(Order).where(Order.id == order_id)
        if lock:
            stmt = stmt.with_for_update()
        return session.exec(stmt).first()

    def find(
        self,
        session: Session,
        user_id: uuid.UUID | None = None,
        status: str | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Order]:
        """Newest first; `user_id` / `status` narrow the result."""
        stmt = select(Order)
        if user_id is not None:
            stmt = stmt.where(Order.user_id == user_id)
        if status is not None:
            stmt = stmt.where(Order.status == status)
        stmt = stmt.order_by(Order.created_at.desc()).offset(skip).limit(limit)
        return list(session.exec(stmt).all())

    def add(self, session: Session, order: Order) -> Order:
        """Stage an order (new or changed) and flush so its id/defaults load."""
        session.add(order)
        session.flush()
        session.refresh(order)
        return order

    # ---- Line snapshots ----

    def items(self, session: Session, order_id: uuid.UUID) -> list[OrderItem]:
        stmt = select(OrderItem).where(OrderItem.order_id == order_id)
        return list(session.exec(stmt).all())

    def add_items(self, session: Session, items: list[OrderItem]) -> list[OrderItem]:
        session.add_all(items)
        session.flush()
        return items
