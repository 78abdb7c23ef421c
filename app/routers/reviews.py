# app/routers/reviews.py
import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from app.core.auth import require_auth
from app.database import get_session
from app.models.user import User
from app.repositories.product_repo import ProductRepository
from app.repositories.review_repo import ReviewRepository
from app.schemas.common import MessageResponse
from app.schemas.review import (
    ReviewCreate,
    ReviewListResponse,
    ReviewResponse,
    ReviewSortField,
    ReviewUpdate,
)
from app.services.review_service import ReviewService

# Mounted under /products, next to the catalog routes.
router = APIRouter(prefix="/products", tags=["Reviews"])

review_repo = ReviewRepository()
product_repo = ProductRepository()
service = ReviewService(review_repo, product_repo)


# "/user/reviews" must be declared before "/{product_id}/reviews".
@router.get("/user/reviews", response_model=ReviewListResponse)
def list_my_reviews(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
):
    """
    Reviews written by the authenticated user, newest first.
    """
    return service.list_my_reviews(session, current_user, page, limit)


@router.put("/reviews/{review_id}", response_model=ReviewResponse)
def update_review(
    review_id: uuid.UUID,
    payload: ReviewUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    review = service.update_review(session, current_user, review_id, payload)
    return ReviewResponse(message="Review updated successfully", review=review)


@router.delete("/reviews/{review_id}", response_model=MessageResponse)
def delete_review(
    review_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Delete a review. Authors delete their own; admins delete any.
    """
    service.delete_review(session, current_user, review_id)
    return MessageResponse(message="Review deleted successfully")


@router.get("/{product_id}/reviews", response_model=ReviewListResponse)
def list_product_reviews(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    sort_by: ReviewSortField = Query(default="created_at", alias="sortBy"),
    sort_order: str = Query(default="desc", alias="sortOrder", pattern="^(asc|desc)$"),
):
    """
    Public listing of a product's reviews.
    """
    return service.list_product_reviews(
        session, product_id, page, limit, sort_by, descending=sort_order == "desc"
    )


@router.post(
    "/{product_id}/reviews",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_review(
    product_id: uuid.UUID,
    payload: ReviewCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Review a product. One review per user and product.
    """
    review = service.create_review(session, current_user, product_id, payload)
    return ReviewResponse(message="Review submitted successfully", review=review)
