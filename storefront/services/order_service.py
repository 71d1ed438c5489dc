# storefront/services/order_service.py
import logging
import uuid
from datetime import datetime, timezone

from fastapi import HTTPException, status
from sqlmodel import Session

from storefront.core.errors import InsufficientStock, ProductNotFound
from storefront.core.pricing import Line, aggregate, line_total, round_money
from storefront.models.cart import CartItem
from storefront.models.order import Order, OrderItem
from storefront.models.product import Product
from storefront.models.user import User
from storefront.repositories.cart_repo import CartRepository
from storefront.repositories.order_repo import OrderRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.repositories.user_repo import UserRepository
from storefront.schemas.order import (
    OrderCreate,
    OrderItemRead,
    OrderPayment,
    OrderRead,
    OrderStatusUpdate,
    OrderWithItemsRead,
)
from storefront.services.delivery_service import DeliveryOptionService
from storefront.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

# Admin status state machine. delivered and cancelled are terminal.
ALLOWED_TRANSITIONS: dict[str, set[str]] = {
    "pending": {"processing", "cancelled"},
    "processing": {"shipped", "cancelled"},
    "shipped": {"delivered"},
    "delivered": set(),
    "cancelled": set(),
}

# Statuses in which the customer may still cancel.
CANCELLABLE = {"pending", "processing"}


class OrderService:
    """
    Business logic for orders.

    Responsibilities:
      - Create order from cart, snapshotting product name/price
      - Validate cart items against products (existence, stock)
      - Compute items/tax/shipping/total prices
      - Deduct stock_on_hand, restore it on cancellation
      - Clear cart after success
      - Enforce status transitions (admin)
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        cart_repo: CartRepository,
        product_repo: ProductRepository,
        user_repo: UserRepository,
        delivery_service: DeliveryOptionService,
        tax_rate: float,
        notifier: NotificationService | None = None,
    ):
        self.order_repo = order_repo
        self.cart_repo = cart_repo
        self.product_repo = product_repo
        self.user_repo = user_repo
        self.delivery_service = delivery_service
        self.tax_rate = tax_rate
        self.notifier = notifier or NotificationService()

    # -------- User-facing operations --------

    def create_order_from_cart(
        self,
        session: Session,
        user: User,
        payload: OrderCreate,
    ) -> OrderWithItemsRead:
        """
        Convert the user's cart into an Order.

        Steps:
          1. Lock and load the cart; error if empty.
          2. Resolve every product; check stock.
          3. Resolve the delivery option (none => free shipping).
          4. Compute totals from live prices.
          5. Create Order + OrderItem rows (name/price snapshot).
          6. Deduct stock_on_hand.
          7. Clear cart items (the cart row stays).
          8. Commit, then send the confirmation email.
        """
        # 1) Load cart
        cart = self.cart_repo.get_for_user(session, user.id, lock=True)
        cart_items: list[CartItem] = (
            self.cart_repo.list_items(session, cart.id) if cart else []
        )
        if not cart_items:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cart is empty",
            )

        # 2) Resolve products
        product_map: dict[uuid.UUID, Product] = self.product_repo.get_many(
            session, [ci.product_id for ci in cart_items], lock=True
        )
        for ci in cart_items:
            product = product_map.get(ci.product_id)
            if product is None:
                raise ProductNotFound(f"Product not found: {ci.product_id}")
            if ci.quantity > product.stock_on_hand:
                raise InsufficientStock(
                    f"Insufficient stock for product: {product.name} "
                    f"(have {product.stock_on_hand}, requested {ci.quantity})"
                )

        # 3) Delivery option
        shipping_cost = 0.0
        option = None
        if payload.delivery_option_id is not None:
            option = self.delivery_service.get_available_option(
                session, payload.delivery_option_id
            )
            shipping_cost = option.price

        # 4) Totals
        totals = aggregate(
            [
                Line(unit_price=product_map[ci.product_id].price, quantity=ci.quantity)
                for ci in cart_items
            ],
            tax_rate=self.tax_rate,
            shipping_cost=shipping_cost,
        )

        # 5) Order + snapshot items
        order = Order(
            user_id=user.id,
            status="pending",
            address=payload.address,
            city=payload.city,
            postal_code=payload.postal_code,
            country=payload.country,
            payment_method=payload.payment_method,
            delivery_option_id=option.id if option else None,
            delivery_option_name=option.name if option else None,
            items_price=float(totals.items_price),
            tax_rate=self.tax_rate,
            tax_price=float(totals.tax_price),
            shipping_price=float(totals.shipping_price),
            total_price=float(totals.total_price),
        )
        order = self.order_repo.add(session, order)

        order_items = self.order_repo.add_items(
            session,
            [
                OrderItem(
                    order_id=order.id,
                    product_id=ci.product_id,
                    product_name=product_map[ci.product_id].name,
                    quantity=ci.quantity,
                    unit_price=product_map[ci.product_id].price,
                )
                for ci in cart_items
            ],
        )

        # 6) Deduct stock
        for ci in cart_items:
            product = product_map[ci.product_id]
            product.stock_on_hand -= ci.quantity
            session.add(product)

        # 7) Clear cart
        self.cart_repo.clear_items(session, cart.id)
        self.cart_repo.touch(session, cart)

        # 8) Commit transaction
        session.commit()
        session.refresh(order)
        logger.info(
            "Order %s created for user %s: total %.2f",
            order.id,
            user.id,
            order.total_price,
        )

        self.notifier.order_confirmation(user.email, order, order_items)
        return self._build_order_with_items_dto(order, order_items)

    def list_user_orders(
        self,
        session: Session,
        user_id: uuid.UUID,
        skip: int = 0,
        limit: int = 50,
    ) -> list[OrderRead]:
        """
        List orders for the given user (without items).
        """
        orders = self.order_repo.find(session, user_id=user_id, skip=skip, limit=limit)
        return orders  # type: ignore[return-value]

    def get_user_order(
        self,
        session: Session,
        user_id: uuid.UUID,
        order_id: uuid.UUID,
    ) -> OrderWithItemsRead:
        """
        Get a single order for the user, including items.

        - 404 if order not found or does not belong to this user.
        """
        order = self._get_owned_order(session, user_id, order_id)
        items = self.order_repo.items(session, order.id)
        return self._build_order_with_items_dto(order, items)

    def pay_order(
        self,
        session: Session,
        user_id: uuid.UUID,
        order_id: uuid.UUID,
        payload: OrderPayment,
    ) -> OrderRead:
        """
        Record a payment confirmation for the user's order. Once paid, an
        order only changes through status transitions.
        """
        order = self._get_owned_order(session, user_id, order_id, lock=True)

        if order.status == "cancelled":
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot pay a cancelled order",
            )
        if order.is_paid:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Order is already paid",
            )

        order.is_paid = True
        order.paid_at = datetime.now(timezone.utc)
        order.payment_reference = payload.reference
        self.order_repo.add(session, order)
        session.commit()
        session.refresh(order)
        logger.info("Order %s paid (ref %s)", order.id, payload.reference)
        return order  # type: ignore[return-value]

    def cancel_order(
        self,
        session: Session,
        user: User,
        order_id: uuid.UUID,
    ) -> OrderRead:
        """
        Customer cancellation; allowed while pending or processing.
        Stock is returned to the catalog.
        """
        order = self._get_owned_order(session, user.id, order_id, lock=True)

        if order.status not in CANCELLABLE:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Cannot cancel an order that is {order.status}",
            )

        self._restore_stock(session, order)
        order.status = "cancelled"
        self.order_repo.add(session, order)
        session.commit()
        session.refresh(order)
        logger.info("Order %s cancelled by its owner", order.id)

        self.notifier.order_status_update(user.email, order)
        return order  # type: ignore[return-value]

    # -------- Admin operations --------

    def list_all_orders(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        order_status: str | None = None,
    ) -> list[OrderRead]:
        """
        List all orders (admin only).
        """
        orders = self.order_repo.find(
            session, status=order_status, skip=skip, limit=limit
        )
        return orders  # type: ignore[return-value]

    def get_order_admin(
        self,
        session: Session,
        order_id: uuid.UUID,
    ) -> OrderWithItemsRead:
        """
        Get any order with items (admin only).
        """
        order = self.order_repo.get(session, order_id)
        if not order:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )
        items = self.order_repo.items(session, order.id)
        return self._build_order_with_items_dto(order, items)

    def update_status(
        self,
        session: Session,
        order_id: uuid.UUID,
        payload: OrderStatusUpdate,
    ) -> OrderRead:
        """
        Admin-only status update with simple state machine:

          pending    -> processing, cancelled
          processing -> shipped, cancelled
          shipped    -> delivered
          delivered  -> (no change)
          cancelled  -> (no change)

        Any invalid transition raises 400.
        """
        order = self.order_repo.get(session, order_id, lock=True)
        if not order:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )

        current = order.status
        new = payload.status

        if current == new:
            return order  # type: ignore[return-value]

        if new not in ALLOWED_TRANSITIONS.get(current, set()):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid status transition: {current} -> {new}",
            )

        if new == "delivered":
            order.is_delivered = True
            order.delivered_at = datetime.now(timezone.utc)
        elif new == "cancelled":
            self._restore_stock(session, order)

        order.status = new
        self.order_repo.add(session, order)
        session.commit()
        session.refresh(order)
        logger.info("Order %s: %s -> %s", order.id, current, new)

        owner = self.user_repo.get_by_id(session, order.user_id)
        if owner is not None:
            self.notifier.order_status_update(owner.email, order)
        return order  # type: ignore[return-value]

    # -------- Helpers --------

    def _get_owned_order(
        self,
        session: Session,
        user_id: uuid.UUID,
        order_id: uuid.UUID,
        lock: bool = False,
    ) -> Order:
        order = self.order_repo.get(session, order_id, lock=lock)
        if not order or order.user_id != user_id:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )
        return order

    def _restore_stock(self, session: Session, order: Order) -> None:
        """Put ordered quantities back; products deleted since are skipped."""
        items = self.order_repo.items(session, order.id)
        products = self.product_repo.get_many(
            session, [it.product_id for it in items], lock=True
        )
        for it in items:
            product = products.get(it.product_id)
            if product is not None:
                product.stock_on_hand += it.quantity
                session.add(product)

    def _build_order_with_items_dto(
        self,
        order: Order,
        items: list[OrderItem],
    ) -> OrderWithItemsRead:
        """
        Compose OrderWithItemsRead from ORM models. Money fields come from
        the stored order, never recomputed from the catalog.
        """
        item_dtos = [
            OrderItemRead(
                id=it.id,
                order_id=it.order_id,
                product_id=it.product_id,
                product_name=it.product_name,
                quantity=it.quantity,
                unit_price=it.unit_price,
                line_total=float(round_money(line_total(it.unit_price, it.quantity))),
            )
            for it in items
        ]

        return OrderWithItemsRead(
            **OrderRead.model_validate(order, from_attributes=True).model_dump(),
            items=item_dtos,
        )
