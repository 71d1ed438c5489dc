# storefront/routers/products.py
import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from storefront.core.auth import require_permission
from storefront.database import get_session
from storefront.repositories.cart_repo import CartRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.repositories.review_repo import ReviewRepository
from storefront.repositories.wishlist_repo import WishlistRepository
from storefront.schemas.product import ProductCreate, ProductRead, ProductUpdate
from storefront.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["Products"])

service = ProductService(
    ProductRepository(),
    CartRepository(),
    ReviewRepository(),
    WishlistRepository(),
)

manage_products = [Depends(require_permission("manage_products"))]


# -------- Catalog (public) --------


@router.get("", response_model=list[ProductRead])
def list_products(
    session: Session = Depends(get_session),
    category: str | None = None,
    q: str | None = Query(default=None, max_length=100, description="Name contains"),
    in_stock: bool = False,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=200),
):
    """
    Browse the catalog, alphabetically.

    Filters combine: category, case-insensitive name search (`q`), and
    `in_stock=true` to hide sold-out products.
    """
    return service.list_products(
        session,
        category=category,
        keyword=q,
        in_stock=in_stock,
        skip=skip,
        limit=limit,
    )


@router.get("/categories", response_model=list[str])
def list_categories(session: Session = Depends(get_session)):
    return service.list_categories(session)


@router.get("/{product_id}", response_model=ProductRead)
def get_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    return service.get_product(session, product_id)


# -------- Catalog management (manage_products) --------


@router.post(
    "",
    response_model=ProductRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=manage_products,
)
def create_product(
    payload: ProductCreate,
    session: Session = Depends(get_session),
):
    return service.create_product(session, payload)


@router.patch("/{product_id}", response_model=ProductRead, dependencies=manage_products)
def update_product(
    product_id: uuid.UUID,
    payload: ProductUpdate,
    session: Session = Depends(get_session),
):
    """
    Partial update. Carts pick up a new price immediately; placed orders
    keep the price they were placed at.
    """
    return service.update_product(session, product_id, payload)


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=manage_products,
)
def delete_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Remove a product from the catalog, from every cart and wishlist
    holding it, together with its reviews.
    """
    service.delete_product(session, product_id)
    return None
