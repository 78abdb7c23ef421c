# app/models/review.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Review(SQLModel, table=True):
    """
    A customer's rating and comment on a product.

    One review per (product, user); a second attempt is a conflict.
    """

    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint("product_id", "user_id", name="uq_reviews_product_user"),
    )

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    product_id: uuid.UUID = Field(
        foreign_key="products.id",
        index=True,
    )

    user_id: str = Field(
        foreign_key="users.id",
        index=True,
    )

    # display name at the time of writing
    username: str = Field(max_length=100)

    rating: int = Field(ge=1, le=5, index=True)
    comment: str = Field(max_length=500)

    verified: bool = Field(default=False)
    helpful: int = Field(default=0, ge=0)

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
