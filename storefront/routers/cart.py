# storefront/routers/cart.py
import uuid

from fastapi import APIRouter, Depends, Request, Response
from sqlmodel import Session

from storefront.core.auth import get_current_user, require_permission
from storefront.core.config import get_settings
from storefront.core.permissions import ensure_access
from storefront.database import get_session
from storefront.models.user import User
from storefront.repositories.cart_repo import CartRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.cart import CartSummary, CartItemCreate, CartItemUpdate
from storefront.services.cart_service import CartOwner, CartService

settings = get_settings()

router = APIRouter(prefix="/cart", tags=["Cart"])

cart_repo = CartRepository()
product_repo = ProductRepository()
service = CartService(cart_repo, product_repo, tax_rate=settings.TAX_RATE)

SESSION_MAX_AGE = 60 * 60 * 24 * 30
SESSION_ID_MAX_LENGTH = 64


def _read_session_id(request: Request) -> str | None:
    session_id = request.headers.get(settings.CART_SESSION_HEADER) or request.cookies.get(
        settings.CART_SESSION_COOKIE
    )
    if session_id and len(session_id) <= SESSION_ID_MAX_LENGTH:
        return session_id
    return None


def get_cart_owner(
    request: Request,
    response: Response,
    current_user: User | None = Depends(get_current_user),
) -> CartOwner:
    """
    Resolve whose cart this request works on.

    - Authenticated: the user's cart (needs manage_cart).
    - Guest: the cart of the session id sent in the X-Cart-Session header or
      the cart_session cookie. A fresh id is issued when neither is present
      and echoed back in both.
    """
    if current_user is not None:
        ensure_access(current_user.role, "manage_cart", current_user.permissions)
        return CartOwner(user_id=current_user.id)

    session_id = _read_session_id(request) or uuid.uuid4().hex
    response.set_cookie(
        settings.CART_SESSION_COOKIE,
        session_id,
        max_age=SESSION_MAX_AGE,
        httponly=True,
        samesite="lax",
    )
    response.headers[settings.CART_SESSION_HEADER] = session_id
    return CartOwner(session_id=session_id)


@router.get("", response_model=CartSummary)
def get_my_cart(
    session: Session = Depends(get_session),
    owner: CartOwner = Depends(get_cart_owner),
):
    """
    Get the caller's cart summary (user or guest).
    """
    return service.get_cart_summary(session, owner)


@router.post("", response_model=CartSummary)
def add_to_cart(
    payload: CartItemCreate,
    session: Session = Depends(get_session),
    owner: CartOwner = Depends(get_cart_owner),
):
    """
    Add product to the cart. Adding a product already in the cart increases
    its quantity.

    Returns the updated cart summary.
    """
    return service.add_to_cart(session, owner, payload)


@router.post("/merge", response_model=CartSummary)
def merge_guest_cart(
    request: Request,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_permission("manage_cart")),
):
    """
    Fold the guest cart identified by the session header/cookie into the
    authenticated user's cart. Typically called right after login.
    """
    session_id = _read_session_id(request)
    if session_id is None:
        return service.get_cart_summary(session, CartOwner(user_id=current_user.id))
    return service.merge_guest_cart(session, current_user.id, session_id)


@router.patch("/{product_id}", response_model=CartSummary)
def update_cart_item(
    product_id: uuid.UUID,
    payload: CartItemUpdate,
    session: Session = Depends(get_session),
    owner: CartOwner = Depends(get_cart_owner),
):
    """
    Update quantity of a product in the cart.

    Returns the updated cart summary.
    """
    return service.update_quantity(
        session=session,
        owner=owner,
        product_id=product_id,
        payload=payload,
    )


@router.delete("/{product_id}", response_model=CartSummary)
def remove_cart_item(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
    owner: CartOwner = Depends(get_cart_owner),
):
    """
    Remove a product from the cart.

    Returns the updated cart summary.
    """
    return service.remove_item(session, owner, product_id)


@router.delete("", response_model=CartSummary)
def clear_cart(
    session: Session = Depends(get_session),
    owner: CartOwner = Depends(get_cart_owner),
):
    """
    Clear the entire cart.

    Returns an empty cart summary.
    """
    return service.clear_cart(session, owner)
