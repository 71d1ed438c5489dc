# storefront/services/cart_service.py
import logging
import uuid
from dataclasses import dataclass

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from storefront.core import cart_rules
from storefront.core.errors import InsufficientStock, ProductNotFound
from storefront.core.pricing import Line, aggregate, line_total, round_money
from storefront.models.cart import Cart, CartItem
from storefront.models.product import Product
from storefront.repositories.cart_repo import CartRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.cart import (
    CartItemCreate,
    CartItemUpdate,
    CartItemRead,
    CartSummary,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CartOwner:
    """Who a cart belongs to: a user, or a guest session."""

    user_id: uuid.UUID | None = None
    session_id: str | None = None

    def __post_init__(self):
        if (self.user_id is None) == (self.session_id is None):
            raise ValueError("a cart owner is either a user or a guest session")


class CartService:
    """
    Business logic for cart operations.

    Responsibilities:
      - validate product existence
      - apply the cart line rules (merge on add, replace on update)
      - enforce resulting quantity <= stock_on_hand
      - price lines from the live catalog and compute totals

    Every mutation locks the cart row for the duration of the request
    transaction, so two concurrent adds to the same cart are applied one
    after the other instead of the last write winning.
    """

    def __init__(
        self,
        cart_repo: CartRepository,
        product_repo: ProductRepository,
        tax_rate: float | None = None,
    ):
        self.cart_repo = cart_repo
        self.product_repo = product_repo
        self.tax_rate = tax_rate

    # ---- internal helpers ----

    def _get_product(self, session: Session, product_id: uuid.UUID) -> Product:
        product = self.product_repo.get_by_id(session, product_id)
        if not product:
            raise ProductNotFound()
        return product

    def _get_cart(
        self,
        session: Session,
        owner: CartOwner,
        lock: bool = False,
        create: bool = False,
    ) -> Cart | None:
        if owner.user_id is not None:
            cart = self.cart_repo.get_for_user(session, owner.user_id, lock=lock)
        else:
            cart = self.cart_repo.get_for_session(session, owner.session_id, lock=lock)

        if cart is None and create:
            try:
                cart = self.cart_repo.create(
                    session,
                    Cart(user_id=owner.user_id, session_id=owner.session_id),
                )
            except IntegrityError:
                # a concurrent request created the owner's cart first
                session.rollback()
                logger.info("Cart for %s already exists; reloading it", owner)
                return self._get_cart(session, owner, lock=lock)
            logger.debug("Created cart %s", cart.id)
        return cart

    @staticmethod
    def _lines(items: list[CartItem]) -> dict[uuid.UUID, int]:
        return {it.product_id: it.quantity for it in items}

    @staticmethod
    def _check_stock(product: Product, quantity: int) -> None:
        if quantity > product.stock_on_hand:
            raise InsufficientStock(
                f"Sorry, only {product.stock_on_hand} items of "
                f"{product.name} available in stock"
            )

    def _apply(
        self,
        session: Session,
        cart: Cart,
        items: list[CartItem],
        lines: dict[uuid.UUID, int],
    ) -> None:
        """Write a computed line mapping back onto the cart's item rows."""
        existing = {it.product_id: it for it in items}

        for product_id, item in existing.items():
            if product_id not in lines:
                self.cart_repo.delete_item(session, item)
            elif item.quantity != lines[product_id]:
                item.quantity = lines[product_id]
                session.add(item)

        for product_id, quantity in lines.items():
            if product_id not in existing:
                self.cart_repo.add_item(
                    session,
                    CartItem(cart_id=cart.id, product_id=product_id, quantity=quantity),
                )

        self.cart_repo.touch(session, cart)

    def _summarize(self, session: Session, cart: Cart | None) -> CartSummary:
        if cart is None:
            return CartSummary(
                items=[],
                total_quantity=0,
                items_price=0.0,
                tax_price=0.0,
                total_price=0.0,
            )

        items = self.cart_repo.list_items(session, cart.id)
        products = self.product_repo.get_many(session, [it.product_id for it in items])

        item_reads: list[CartItemRead] = []
        priced: list[Line] = []
        for it in items:
            product = products.get(it.product_id)
            if product is None:
                raise ProductNotFound(f"Product not found: {it.product_id}")

            priced.append(Line(unit_price=product.price, quantity=it.quantity))
            subtotal = round_money(line_total(product.price, it.quantity))
            item_reads.append(
                CartItemRead(
                    product_id=it.product_id,
                    product_name=product.name,
                    quantity=it.quantity,
                    unit_price=product.price,
                    line_total=float(subtotal),
                    stock_on_hand=product.stock_on_hand,
                    added_at=it.added_at,
                )
            )

        totals = aggregate(priced, tax_rate=self.tax_rate)
        return CartSummary(
            id=cart.id,
            items=item_reads,
            total_quantity=sum(it.quantity for it in items),
            items_price=float(totals.items_price),
            tax_price=float(totals.tax_price),
            total_price=float(totals.total_price),
        )

    # ---- public operations ----

    def get_cart_summary(self, session: Session, owner: CartOwner) -> CartSummary:
        """
        Return full cart summary (lines, quantities, items/tax/total price).
        A caller without a cart yet gets an empty summary.
        """
        return self._summarize(session, self._get_cart(session, owner))

    def add_to_cart(
        self,
        session: Session,
        owner: CartOwner,
        payload: CartItemCreate,
    ) -> CartSummary:
        """
        Add a product to the cart.

        Rules:
          - product must exist
          - an existing line accumulates: existing + quantity
          - resulting quantity <= stock_on_hand
        """
        cart_rules.validate_quantity(payload.quantity)
        product = self._get_product(session, payload.product_id)

        cart = self._get_cart(session, owner, lock=True, create=True)
        items = self.cart_repo.list_items(session, cart.id)

        lines = cart_rules.add_line(self._lines(items), product.id, payload.quantity)
        self._check_stock(product, lines[product.id])

        self._apply(session, cart, items, lines)
        session.commit()
        return self._summarize(session, cart)

    def update_quantity(
        self,
        session: Session,
        owner: CartOwner,
        product_id: uuid.UUID,
        payload: CartItemUpdate,
    ) -> CartSummary:
        """
        Replace the quantity of a cart line.
        """
        cart_rules.validate_quantity(payload.quantity)
        product = self._get_product(session, product_id)

        cart = self._get_cart(session, owner, lock=True)
        items = self.cart_repo.list_items(session, cart.id) if cart else []

        try:
            lines = cart_rules.set_line_quantity(
                self._lines(items), product_id, payload.quantity
            )
        except KeyError:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Item not in cart",
            )
        self._check_stock(product, lines[product_id])

        self._apply(session, cart, items, lines)
        session.commit()
        return self._summarize(session, cart)

    def remove_item(
        self,
        session: Session,
        owner: CartOwner,
        product_id: uuid.UUID,
    ) -> CartSummary:
        """
        Remove a product line from the cart, whatever its quantity.
        """
        cart = self._get_cart(session, owner, lock=True)
        items = self.cart_repo.list_items(session, cart.id) if cart else []

        try:
            lines = cart_rules.remove_line(self._lines(items), product_id)
        except KeyError:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Item not found in cart",
            )

        self._apply(session, cart, items, lines)
        session.commit()
        return self._summarize(session, cart)

    def clear_cart(self, session: Session, owner: CartOwner) -> CartSummary:
        """
        Empty the cart. The cart itself (owner, created_at) is kept.
        """
        cart = self._get_cart(session, owner, lock=True)
        if cart is not None:
            items = self.cart_repo.list_items(session, cart.id)
            self._apply(session, cart, items, cart_rules.clear_lines(self._lines(items)))
            session.commit()
        return self._summarize(session, cart)

    def merge_guest_cart(
        self,
        session: Session,
        user_id: uuid.UUID,
        session_id: str,
    ) -> CartSummary:
        """
        Fold a guest cart into the user's cart (add semantics), then empty
        the guest cart.

        The user cart is acquired (or created) before the guest cart is
        locked: creating it may roll the transaction back.
        """
        user_owner = CartOwner(user_id=user_id)
        guest_owner = CartOwner(session_id=session_id)
        guest = self._get_cart(session, guest_owner)
        if guest is None or not self.cart_repo.list_items(session, guest.id):
            return self.get_cart_summary(session, user_owner)

        cart = self._get_cart(session, user_owner, lock=True, create=True)
        items = self.cart_repo.list_items(session, cart.id)

        guest = self._get_cart(session, guest_owner, lock=True)
        guest_items = self.cart_repo.list_items(session, guest.id) if guest else []
        if not guest_items:
            session.commit()
            return self._summarize(session, cart)

        lines = cart_rules.merge_lines(self._lines(items), self._lines(guest_items))
        products = self.product_repo.get_many(session, list(lines))
        for product_id, quantity in lines.items():
            product = products.get(product_id)
            if product is None:
                raise ProductNotFound(f"Product not found: {product_id}")
            self._check_stock(product, quantity)

        self._apply(session, cart, items, lines)
        self._apply(session, guest, guest_items, {})
        session.commit()
        logger.info("Merged guest cart %s into cart %s", guest.id, cart.id)
        return self._summarize(session, cart)
