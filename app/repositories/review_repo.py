# app/repositories/review_repo.py
import uuid

from sqlalchemy import func
from sqlmodel import Session, select

from app.models.review import Review

# Columns a listing may be sorted by.
SORTABLE_FIELDS = {
    "created_at": Review.created_at,
    "rating": Review.rating,
    "helpful": Review.helpful,
}


class ReviewRepository:
    """
    Data access layer for Review.
    """

    def get_by_id(self, session: Session, review_id: uuid.UUID) -> Review | None:
        return session.get(Review, review_id)

    def get_for_product_and_user(
        self, session: Session, product_id: uuid.UUID, user_id: str
    ) -> Review | None:
        stmt = select(Review).where(
            Review.product_id == product_id, Review.user_id == user_id
        )
        return session.exec(stmt).first()

    def list_for_product(
        self,
        session: Session,
        product_id: uuid.UUID,
        skip: int = 0,
        limit: int = 10,
        sort_by: str = "created_at",
        descending: bool = True,
    ) -> list[Review]:
        column = SORTABLE_FIELDS.get(sort_by, Review.created_at)
        order = column.desc() if descending else column.asc()
        stmt = (
            select(Review)
            .where(Review.product_id == product_id)
            .order_by(order, Review.id)
            .offset(skip)
            .limit(limit)
        )
        return list(session.exec(stmt).all())

    def count_for_product(self, session: Session, product_id: uuid.UUID) -> int:
        stmt = select(func.count()).select_from(Review).where(Review.product_id == product_id)
        return int(session.exec(stmt).one())

    def list_for_user(
        self, session: Session, user_id: str, skip: int = 0, limit: int = 10
    ) -> list[Review]:
        stmt = (
            select(Review)
            .where(Review.user_id == user_id)
            .order_by(Review.created_at.desc(), Review.id)
            .offset(skip)
            .limit(limit)
        )
        return list(session.exec(stmt).all())

    def count_for_user(self, session: Session, user_id: str) -> int:
        stmt = select(func.count()).select_from(Review).where(Review.user_id == user_id)
        return int(session.exec(stmt).one())

    def create(self, session: Session, review: Review) -> Review:
        session.add(review)
        session.commit()
        session.refresh(review)
        return review

    def update(self, session: Session, review: Review) -> Review:
        session.add(review)
        session.commit()
        session.refresh(review)
        return review

    def delete(self, session: Session, review: Review) -> None:
        session.delete(review)
        session.commit()
