# app/models/cart.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Cart(SQLModel, table=True):
    """
    One cart per user, created lazily on first mutation.

    The row is never deleted; checkout clears its lines instead.
    """

    __tablename__ = "carts"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    user_id: str = Field(
        foreign_key="users.id",
        unique=True,
        index=True,
    )

    created_at: datetime = Field(default_factory=_utcnow)

    # "last modified", bumped by every line mutation
    updated_at: datetime = Field(default_factory=_utcnow)


class CartItem(SQLModel, table=True):
    """
    Shopping cart line.
    One cart cannot have 2 rows for the same product.
    """

    __tablename__ = "cart_items"
    __table_args__ = (
        UniqueConstraint("cart_id", "product_id", name="uq_cart_items_cart_product"),
    )

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    cart_id: uuid.UUID = Field(
        foreign_key="carts.id",
        index=True,
    )

    product_id: uuid.UUID = Field(
        foreign_key="products.id",
        index=True,
    )

    quantity: int = Field(
        ge=1,
        le=100,
        description="Must be within 1..100",
    )

    price: float = Field(
        ge=0,
        description="Price when added to cart",
    )

    product_name: str
    image_url: str | None = None

    added_at: datetime = Field(default_factory=_utcnow)
