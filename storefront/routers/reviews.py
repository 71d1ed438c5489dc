# storefront/routers/reviews.py
import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from storefront.core.auth import require_auth, require_permission
from storefront.database import get_session
from storefront.models.user import User
from storefront.repositories.product_repo import ProductRepository
from storefront.repositories.review_repo import ReviewRepository
from storefront.schemas.review import ReviewCreate, ReviewRead, ReviewUpdate
from storefront.services.review_service import ReviewService

router = APIRouter(prefix="/reviews", tags=["Reviews"])

service = ReviewService(ReviewRepository(), ProductRepository())


@router.get("/product/{product_id}", response_model=list[ReviewRead])
def list_product_reviews(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=200),
):
    """
    Reviews of one product, newest first. Public.
    """
    return service.list_product_reviews(session, product_id, skip=skip, limit=limit)


@router.get("/me", response_model=list[ReviewRead])
def list_my_reviews(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    return service.list_user_reviews(session, current_user)


@router.post(
    "/product/{product_id}",
    response_model=ReviewRead,
    status_code=status.HTTP_201_CREATED,
)
def add_review(
    product_id: uuid.UUID,
    payload: ReviewCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_permission("place_orders")),
):
    return service.add_review(session, current_user, product_id, payload)


@router.patch("/{review_id}", response_model=ReviewRead)
def update_review(
    review_id: uuid.UUID,
    payload: ReviewUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_permission("place_orders")),
):
    """
    Edit one's own review.
    """
    return service.update_review(session, current_user, review_id, payload)


@router.delete("/{review_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_review(
    review_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Authors delete their own reviews; manage_products deletes anyone's.
    """
    service.delete_review(session, current_user, review_id)
    return None
