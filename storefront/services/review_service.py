# storefront/services/review_service.py
import logging
import uuid
from datetime import datetime, timezone

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from storefront.core.errors import AccessDenied, ProductNotFound
from storefront.core.permissions import has_access
from storefront.models.product import Product
from storefront.models.review import Review
from storefront.models.user import User
from storefront.repositories.product_repo import ProductRepository
from storefront.repositories.review_repo import ReviewRepository
from storefront.schemas.review import ReviewCreate, ReviewUpdate

logger = logging.getLogger(__name__)


class ReviewService:
    """
    Product reviews.

    Rules:
      - one review per product and user
      - only the author edits a review
      - the author, or anyone holding manage_products, deletes it
      - every write recomputes the product's average_rating / review_count
        in the same transaction, with the product row locked
    """

    def __init__(self, repo: ReviewRepository, product_repo: ProductRepository):
        self.repo = repo
        self.product_repo = product_repo

    def _locked_product(self, session: Session, product_id: uuid.UUID) -> Product:
        product = self.product_repo.get_many(session, [product_id], lock=True).get(product_id)
        if product is None:
            raise ProductNotFound(f"Product not found: {product_id}")
        return product

    def _refresh_rating(self, session: Session, product: Product) -> None:
        count, average = self.repo.rating_summary(session, product.id)
        product.review_count = count
        product.average_rating = round(average, 2) if average is not None else 0.0
        session.add(product)

    def get_review(self, session: Session, review_id: uuid.UUID) -> Review:
        review = self.repo.get_by_id(session, review_id)
        if review is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Review not found",
            )
        return review

    def list_product_reviews(
        self,
        session: Session,
        product_id: uuid.UUID,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Review]:
        if self.product_repo.get_by_id(session, product_id) is None:
            raise ProductNotFound(f"Product not found: {product_id}")
        return self.repo.list_for_product(session, product_id, skip=skip, limit=limit)

    def list_user_reviews(self, session: Session, user: User) -> list[Review]:
        return self.repo.list_by_user(session, user.id)

    def add_review(
        self,
        session: Session,
        user: User,
        product_id: uuid.UUID,
        payload: ReviewCreate,
    ) -> Review:
        product = self._locked_product(session, product_id)
        duplicate = HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You already reviewed this product",
        )
        if self.repo.get_for_user(session, product_id, user.id) is not None:
            raise duplicate

        review = Review(
            product_id=product.id,
            user_id=user.id,
            user_name=user.name,
            rating=payload.rating,
            comment=payload.comment,
        )
        try:
            self.repo.add(session, review)
        except IntegrityError:
            session.rollback()
            raise duplicate

        self._refresh_rating(session, product)
        session.commit()
        session.refresh(review)
        logger.info("Review %s added to product %s", review.id, product.id)
        return review

    def update_review(
        self,
        session: Session,
        user: User,
        review_id: uuid.UUID,
        payload: ReviewUpdate,
    ) -> Review:
        review = self.get_review(session, review_id)
        if review.user_id != user.id:
            raise AccessDenied("Not authorized to edit this review")

        changes = payload.model_dump(exclude_unset=True, exclude_none=True)
        if not changes:
            return review

        product = self._locked_product(session, review.product_id)
        for field, value in changes.items():
            setattr(review, field, value)
        review.updated_at = datetime.now(timezone.utc)
        session.add(review)
        session.flush()

        self._refresh_rating(session, product)
        session.commit()
        session.refresh(review)
        return review

    def delete_review(self, session: Session, user: User, review_id: uuid.UUID) -> None:
        review = self.get_review(session, review_id)
        if review.user_id != user.id and not has_access(
            user.role, "manage_products", user.permissions
        ):
            raise AccessDenied("Not authorized, requires manage_products")

        product = self._locked_product(session, review.product_id)
        self.repo.delete(session, review)
        self._refresh_rating(session, product)
        session.commit()
        logger.info("Review %s deleted by %s", review_id, user.id)
