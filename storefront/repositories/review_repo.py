# storefront/repositories/review_repo.py
import uuid

from sqlalchemy import func
from sqlmodel import Session, select

from storefront.models.review import Review


class ReviewRepository:
    """
    Product reviews.

    Writes only flush: the service recomputes the product's rating in the
    same transaction and commits once.
    """

    def get_by_id(self, session: Session, review_id: uuid.UUID) -> Review | None:
        return session.get(Review, review_id)

    def get_for_user(
        self,
        session: Session,
        product_id: uuid.UUID,
        user_id: uuid.UUID,
    ) -> Review | None:
        stmt = select(Review).where(
            Review.product_id == product_id,
            Review.user_id == user_id,
        )
        return session.exec(stmt).first()

    def list_for_product(
        self,
        session: Session,
        product_id: uuid.UUID,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Review]:
        stmt = (
            select(Review)
            .where(Review.product_id == product_id)
            .order_by(Review.created_at.desc(), Review.id)
            .offset(skip)
            .limit(limit)
        )
        return list(session.exec(stmt).all())

    def list_by_user(self, session: Session, user_id: uuid.UUID) -> list[Review]:
        stmt = (
            select(Review)
            .where(Review.user_id == user_id)
            .order_by(Review.created_at.desc(), Review.id)
        )
        return list(session.exec(stmt).all())

    def rating_summary(
        self,
        session: Session,
        product_id: uuid.UUID,
    ) -> tuple[int, float | None]:
        """(review count, mean rating); the mean is None without reviews."""
        stmt = select(func.count(Review.id), func.avg(Review.rating)).where(
            Review.product_id == product_id
        )
        count, average = session.exec(stmt).one()
        return int(count or 0), (float(average) if average is not None else None)

    def add(self, session: Session, review: Review) -> Review:
        session.add(review)
        session.flush()
        return review

    def delete(self, session: Session, review: Review) -> None:
        session.delete(review)
        session.flush()

    def delete_for_product(self, session: Session, product_id: uuid.UUID) -> None:
        stmt = select(Review).where(Review.product_id == product_id)
        for row in session.exec(stmt).all():
            session.delete(row)
        session.flush()
