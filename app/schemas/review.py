# app/schemas/review.py
import uuid
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, Field, field_validator

from app.schemas.common import ApiModel

ReviewSortField = Literal["created_at", "rating", "helpful"]


def _clean_comment(v: str | None) -> str | None:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError("Comment cannot be empty")
    return v


class ReviewCreate(ApiModel):
    model_config = ConfigDict(extra="forbid")

    rating: int = Field(ge=1, le=5)
    comment: str = Field(max_length=500)

    @field_validator("comment")
    @classmethod
    def strip_comment(cls, v: str) -> str:
        return _clean_comment(v)


class ReviewUpdate(ApiModel):
    """
    Partial update; omitted fields keep their value.
    """

    model_config = ConfigDict(extra="forbid")

    rating: int | None = Field(default=None, ge=1, le=5)
    comment: str | None = Field(default=None, max_length=500)

    @field_validator("comment")
    @classmethod
    def strip_comment(cls, v: str | None) -> str | None:
        return _clean_comment(v)


class ReviewRead(ApiModel):
    """Reviewer ids are not exposed, only the display name."""

    id: uuid.UUID
    product_id: uuid.UUID
    username: str
    rating: int
    comment: str
    verified: bool
    helpful: int
    created_at: datetime
    updated_at: datetime


class ReviewPagination(ApiModel):
    current_page: int
    total_pages: int
    total_reviews: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "ReviewPagination":
        total_pages = (total + limit - 1) // limit if limit else 0
        return cls(
            current_page=page,
            total_pages=total_pages,
            total_reviews=total,
            has_next=page < total_pages,
            has_prev=page > 1,
        )


class ReviewResponse(ApiModel):
    success: bool = True
    message: str | None = None
    review: ReviewRead


class ReviewListResponse(ApiModel):
    success: bool = True
    reviews: list[ReviewRead]
    pagination: ReviewPagination
