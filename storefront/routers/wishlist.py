# storefront/routers/wishlist.py
import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from storefront.core.auth import require_permission
from storefront.database import get_session
from storefront.models.user import User
from storefront.repositories.product_repo import ProductRepository
from storefront.repositories.wishlist_repo import WishlistRepository
from storefront.schemas.wishlist import WishlistAdd, WishlistItemRead
from storefront.services.wishlist_service import WishlistService

router = APIRouter(prefix="/wishlist", tags=["Wishlist"])

service = WishlistService(WishlistRepository(), ProductRepository())

wishlist_owner = require_permission("manage_cart")


@router.get("", response_model=list[WishlistItemRead])
def get_wishlist(
    session: Session = Depends(get_session),
    current_user: User = Depends(wishlist_owner),
):
    return service.get_wishlist(session, current_user)


@router.post("", response_model=list[WishlistItemRead])
def add_to_wishlist(
    payload: WishlistAdd,
    session: Session = Depends(get_session),
    current_user: User = Depends(wishlist_owner),
):
    return service.add_product(session, current_user, payload.product_id)


@router.delete("/{product_id}", response_model=list[WishlistItemRead])
def remove_from_wishlist(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(wishlist_owner),
):
    return service.remove_product(session, current_user, product_id)
