# storefront/services/product_service.py
import logging
import uuid
from datetime import datetime, timezone

from sqlmodel import Session

from storefront.core.errors import ProductNotFound
from storefront.models.product import Product
from storefront.repositories.cart_repo import CartRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.repositories.review_repo import ReviewRepository
from storefront.repositories.wishlist_repo import WishlistRepository
from storefront.schemas.product import ProductCreate, ProductUpdate

logger = logging.getLogger(__name__)


class ProductService:
    """
    Catalog rules.

    Browsing is public. Writes are gated by manage_products at the router;
    a deleted product also disappears from every cart and wishlist and
    loses its reviews, while orders keep their own snapshot of it.
    """

    def __init__(
        self,
        repo: ProductRepository,
        cart_repo: CartRepository,
        review_repo: ReviewRepository,
        wishlist_repo: WishlistRepository,
    ):
        self.repo = repo
        self.cart_repo = cart_repo
        self.review_repo = review_repo
        self.wishlist_repo = wishlist_repo

    def list_products(
        self,
        session: Session,
        category: str | None = None,
        keyword: str | None = None,
        in_stock: bool = False,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Product]:
        keyword = keyword.strip() if keyword else None
        return self.repo.search(
            session,
            category=category,
            keyword=keyword,
            in_stock=in_stock,
            skip=skip,
            limit=limit,
        )

    def list_categories(self, session: Session) -> list[str]:
        return self.repo.categories(session)

    def get_product(self, session: Session, product_id: uuid.UUID) -> Product:
        product = self.repo.get_by_id(session, product_id)
        if product is None:
            raise ProductNotFound(f"Product not found: {product_id}")
        return product

    def create_product(self, session: Session, payload: ProductCreate) -> Product:
        product = self.repo.save(session, Product.model_validate(payload))
        logger.info("Product %s created (%s)", product.id, product.name)
        return product

    def update_product(
        self,
        session: Session,
        product_id: uuid.UUID,
        payload: ProductUpdate,
    ) -> Product:
        product = self.get_product(session, product_id)

        changes = payload.model_dump(exclude_unset=True, exclude_none=True)
        for field, value in changes.items():
            setattr(product, field, value)
        if changes:
            product.updated_at = datetime.now(timezone.utc)

        return self.repo.save(session, product)

    def delete_product(self, session: Session, product_id: uuid.UUID) -> None:
        product = self.get_product(session, product_id)
        self.cart_repo.delete_items_for_product(session, product.id)
        self.wishlist_repo.delete_for_product(session, product.id)
        self.review_repo.delete_for_product(session, product.id)
        self.repo.delete(session, product)
        logger.info("Product %s deleted", product_id)
