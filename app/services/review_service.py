# app/services/review_service.py
import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from app.core.errors import ConflictError, NotFoundError
from app.core.permissions import Action, authorize
from app.models.review import Review
from app.models.user import User
from app.repositories.product_repo import ProductRepository
from app.repositories.review_repo import ReviewRepository
from app.schemas.review import (
    ReviewCreate,
    ReviewListResponse,
    ReviewPagination,
    ReviewRead,
    ReviewUpdate,
)

logger = logging.getLogger(__name__)


class ReviewService:
    """
    Product reviews.

    Rules:
      - any signed-in user may review an existing product, once
      - only the author edits a review
      - the author or an admin deletes it
    """

    def __init__(self, review_repo: ReviewRepository, product_repo: ProductRepository):
        self.review_repo = review_repo
        self.product_repo = product_repo

    def _require_product(self, session: Session, product_id: uuid.UUID) -> None:
        if self.product_repo.get_by_id(session, product_id) is None:
            raise NotFoundError("Product not found")

    def list_product_reviews(
        self,
        session: Session,
        product_id: uuid.UUID,
        page: int = 1,
        limit: int = 10,
        sort_by: str = "created_at",
        descending: bool = True,
    ) -> ReviewListResponse:
        self._require_product(session, product_id)
        skip = (page - 1) * limit
        reviews = self.review_repo.list_for_product(
            session, product_id, skip, limit, sort_by, descending
        )
        total = self.review_repo.count_for_product(session, product_id)
        return ReviewListResponse(
            reviews=[ReviewRead.model_validate(r) for r in reviews],
            pagination=ReviewPagination.build(page, limit, total),
        )

    def list_my_reviews(
        self, session: Session, user: User, page: int = 1, limit: int = 10
    ) -> ReviewListResponse:
        skip = (page - 1) * limit
        reviews = self.review_repo.list_for_user(session, user.id, skip, limit)
        total = self.review_repo.count_for_user(session, user.id)
        return ReviewListResponse(
            reviews=[ReviewRead.model_validate(r) for r in reviews],
            pagination=ReviewPagination.build(page, limit, total),
        )

    def create_review(
        self,
        session: Session,
        user: User,
        product_id: uuid.UUID,
        payload: ReviewCreate,
    ) -> ReviewRead:
        authorize(user, Action.WRITE_REVIEW)
        self._require_product(session, product_id)

        if self.review_repo.get_for_product_and_user(session, product_id, user.id):
            raise ConflictError("You have already reviewed this product")

        review = Review(
            product_id=product_id,
            user_id=user.id,
            username=user.name,
            rating=payload.rating,
            comment=payload.comment,
        )
        try:
            review = self.review_repo.create(session, review)
        except IntegrityError:
            session.rollback()
            raise ConflictError("You have already reviewed this product")

        logger.info("Review %s on product %s by %s", review.id, product_id, user.id)
        return ReviewRead.model_validate(review)

    def update_review(
        self,
        session: Session,
        user: User,
        review_id: uuid.UUID,
        payload: ReviewUpdate,
    ) -> ReviewRead:
        review = self.review_repo.get_by_id(session, review_id)
        # authors only; admins moderate by deleting
        if review is None or review.user_id != user.id:
            raise NotFoundError("Review not found")

        if payload.rating is not None:
            review.rating = payload.rating
        if payload.comment is not None:
            review.comment = payload.comment
        review.updated_at = datetime.now(timezone.utc)

        return ReviewRead.model_validate(self.review_repo.update(session, review))

    def delete_review(self, session: Session, user: User, review_id: uuid.UUID) -> None:
        review = self.review_repo.get_by_id(session, review_id)
        if review is None:
            raise NotFoundError("Review not found")
        authorize(user, Action.DELETE, review)
        self.review_repo.delete(session, review)
