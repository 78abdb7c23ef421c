# app/models/purchase.py
import uuid
from datetime import date, datetime, timezone

from sqlmodel import SQLModel, Field


class Purchase(SQLModel, table=True):
    """
    Legacy purchase request: a scheduled delivery of a named product.

    Predates the cart/checkout flow and never touches stock.
    """

    __tablename__ = "purchases"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    user_id: str = Field(
        foreign_key="users.id",
        index=True,
    )
    username: str = Field(index=True)

    delivery_date: date
    delivery_time: str
    delivery_location: str
    product_name: str
    quantity: int = Field(ge=1, le=100)
    message: str = Field(default="", max_length=500)

    status: str = Field(default="pending", index=True)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
