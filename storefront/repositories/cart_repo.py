# storefront/repositories/cart_repo.py
import uuid
from datetime import datetime, timezone

from sqlmodel import Session, select

from storefront.models.cart import Cart, CartItem


class CartRepository:
    """
    Data access layer for carts and their items.

    NOTE:
      - No commits here. Cart mutations are read-modify-write; the service
        locks the cart row (`lock=True`) and commits once per request so
        concurrent writers on the same cart are serialised.
    """

    # ---- Carts ----

    def get_for_user(
        self,
        session: Session,
        user_id: uuid.UUID,
        lock: bool = False,
    ) -> Cart | None:
        stmt = select(Cart).where(Cart.user_id == user_id)
        if lock:
            stmt = stmt.with_for_update()
        return session.exec(stmt).first()

    def get_for_session(
        self,
        session: Session,
        session_id: str,
        lock: bool = False,
    ) -> Cart | None:
        stmt = select(Cart).where(Cart.session_id == session_id)
        if lock:
            stmt = stmt.with_for_update()
        return session.exec(stmt).first()

    def create(self, session: Session, cart: Cart) -> Cart:
        session.add(cart)
        session.flush()
        session.refresh(cart)
        return cart

    def touch(self, session: Session, cart: Cart) -> None:
        cart.updated_at = datetime.now(timezone.utc)
        session.add(cart)

    # ---- Items ----

    def list_items(self, session: Session, cart_id: uuid.UUID) -> list[CartItem]:
        stmt = (
            select(CartItem)
            .where(CartItem.cart_id == cart_id)
            .order_by(CartItem.added_at)
        )
        return session.exec(stmt).all()

    def add_item(self, session: Session, item: CartItem) -> CartItem:
        session.add(item)
        return item

    def delete_item(self, session: Session, item: CartItem) -> None:
        session.delete(item)

    def clear_items(self, session: Session, cart_id: uuid.UUID) -> None:
        for row in self.list_items(session, cart_id):
            session.delete(row)

    def delete_items_for_product(
        self,
        session: Session,
        product_id: uuid.UUID,
    ) -> None:
        stmt = select(CartItem).where(CartItem.product_id == product_id)
        for row in session.exec(stmt).all():
            session.delete(row)
        session.flush()
