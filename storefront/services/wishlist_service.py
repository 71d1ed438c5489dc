# storefront/services/wishlist_service.py
import uuid

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from storefront.core.errors import ProductNotFound
from storefront.models.user import User
from storefront.models.wishlist import WishlistItem
from storefront.repositories.product_repo import ProductRepository
from storefront.repositories.wishlist_repo import WishlistRepository
from storefront.schemas.wishlist import WishlistItemRead


class WishlistService:
    """Saved-for-later products of a signed-in user."""

    def __init__(self, repo: WishlistRepository, product_repo: ProductRepository):
        self.repo = repo
        self.product_repo = product_repo

    def get_wishlist(self, session: Session, user: User) -> list[WishlistItemRead]:
        """
        Saved products, oldest first, with their current catalog data.
        """
        items = self.repo.list_for_user(session, user.id)
        products = self.product_repo.get_many(session, [it.product_id for it in items])

        result: list[WishlistItemRead] = []
        for it in items:
            product = products.get(it.product_id)
            if product is None:
                continue
            result.append(
                WishlistItemRead(
                    product_id=product.id,
                    product_name=product.name,
                    price=product.price,
                    stock_on_hand=product.stock_on_hand,
                    average_rating=product.average_rating,
                    added_at=it.added_at,
                )
            )
        return result

    def add_product(
        self,
        session: Session,
        user: User,
        product_id: uuid.UUID,
    ) -> list[WishlistItemRead]:
        if self.product_repo.get_by_id(session, product_id) is None:
            raise ProductNotFound(f"Product not found: {product_id}")

        duplicate = HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Product already in wishlist",
        )
        if self.repo.get(session, user.id, product_id) is not None:
            raise duplicate
        try:
            self.repo.add(session, WishlistItem(user_id=user.id, product_id=product_id))
        except IntegrityError:
            session.rollback()
            raise duplicate

        return self.get_wishlist(session, user)

    def remove_product(
        self,
        session: Session,
        user: User,
        product_id: uuid.UUID,
    ) -> list[WishlistItemRead]:
        item = self.repo.get(session, user.id, product_id)
        if item is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Product not in wishlist",
            )
        self.repo.delete(session, item)
        return self.get_wishlist(session, user)
