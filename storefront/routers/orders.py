# storefront/routers/orders.py
import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from storefront.core.auth import require_permission
from storefront.core.config import get_settings
from storefront.database import get_session
from storefront.models.user import User
from storefront.repositories.cart_repo import CartRepository
from storefront.repositories.delivery_repo import DeliveryOptionRepository
from storefront.repositories.order_repo import OrderRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.repositories.user_repo import UserRepository
from storefront.schemas.order import (
    OrderCreate,
    OrderPayment,
    OrderRead,
    OrderStatus,
    OrderStatusUpdate,
    OrderWithItemsRead,
)
from storefront.services.delivery_service import DeliveryOptionService
from storefront.services.order_service import OrderService

settings = get_settings()

router = APIRouter(prefix="/orders", tags=["Orders"])

service = OrderService(
    OrderRepository(),
    CartRepository(),
    ProductRepository(),
    UserRepository(),
    DeliveryOptionService(DeliveryOptionRepository()),
    tax_rate=settings.TAX_RATE,
)


# -------- User-facing endpoints --------


@router.post(
    "/checkout",
    response_model=OrderWithItemsRead,
    status_code=status.HTTP_201_CREATED,
)
def checkout(
    payload: OrderCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_permission("place_orders")),
):
    """
    Create an order from the current user's cart.

    Guests must log in (and merge their cart) before checking out.
    """
    return service.create_order_from_cart(session, current_user, payload)


@router.get(
    "/me",
    response_model=list[OrderRead],
)
def list_my_orders(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_permission("view_own_orders")),
    skip: int = 0,
    limit: int = 50,
):
    """
    List the authenticated user's orders (without items).
    """
    return service.list_user_orders(session, current_user.id, skip, limit)


@router.get(
    "/me/{order_id}",
    response_model=OrderWithItemsRead,
)
def get_my_order(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_permission("view_own_orders")),
):
    """
    Get a single order (with items) belonging to the current user.
    """
    return service.get_user_order(session, current_user.id, order_id)


@router.post(
    "/me/{order_id}/pay",
    response_model=OrderRead,
)
def pay_my_order(
    order_id: uuid.UUID,
    payload: OrderPayment,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_permission("place_orders")),
):
    """
    Record the payment provider's confirmation for an order.
    """
    return service.pay_order(session, current_user.id, order_id, payload)


@router.post(
    "/me/{order_id}/cancel",
    response_model=OrderRead,
)
def cancel_my_order(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_permission("place_orders")),
):
    """
    Cancel an order that has not shipped yet.
    """
    return service.cancel_order(session, current_user, order_id)


# -------- Admin endpoints --------


@router.get(
    "",
    response_model=list[OrderRead],
    dependencies=[Depends(require_permission("view_all_orders"))],
)
def list_all_orders(
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 50,
    order_status: OrderStatus | None = None,
):
    """
    List all orders (admin only), optionally filtered by status.
    """
    return service.list_all_orders(session, skip, limit, order_status=order_status)


@router.get(
    "/{order_id}",
    response_model=OrderWithItemsRead,
    dependencies=[Depends(require_permission("view_all_orders"))],
)
def get_order_admin(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Get any order by id (admin only).
    """
    return service.get_order_admin(session, order_id)


@router.patch(
    "/{order_id}/status",
    response_model=OrderRead,
    dependencies=[Depends(require_permission("update_order_status"))],
)
def update_order_status(
    order_id: uuid.UUID,
    payload: OrderStatusUpdate,
    session: Session = Depends(get_session),
):
    """
    Move an order along pending -> processing -> shipped -> delivered,
    or cancel it before it ships (admin only).
    """
    return service.update_status(session, order_id, payload)
