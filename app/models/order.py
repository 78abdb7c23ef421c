# app/models/order.py
import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, Column, UniqueConstraint
from sqlmodel import SQLModel, Field

PAYMENT_METHODS: tuple[str, ...] = ("card", "cod", "bank_transfer")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Order(SQLModel, table=True):
    """
    Customer order.

    Items, prices and totals are a snapshot taken at checkout and are
    never rewritten. Only status, payment status, tracking metadata and
    timestamps change afterwards.
    """

    __tablename__ = "orders"
    __table_args__ = (
        UniqueConstraint("user_id", "idempotency_key", name="uq_orders_user_idempotency"),
    )

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    # Human-readable identifier, e.g. ORD-LZ3K1A2B-X7Q9P
    order_number: str = Field(
        unique=True,
        index=True,
        max_length=40,
    )

    user_id: str = Field(
        foreign_key="users.id",
        index=True,
    )

    shipping: dict[str, Any] = Field(
        sa_column=Column(JSON, nullable=False),
        description="Shipping address snapshot",
    )
    billing: dict[str, Any] = Field(
        sa_column=Column(JSON, nullable=False),
        description="Billing address snapshot",
    )

    # card | cod | bank_transfer
    payment_method: str = Field(default="cod")

    # pending | paid | failed | refunded
    payment_status: str = Field(default="pending")

    status: str = Field(
        default="pending",
        index=True,
        description="Order status lifecycle",
    )

    subtotal: float = Field(ge=0)
    tax: float = Field(default=0.0, ge=0)
    shipping_fee: float = Field(default=0.0, ge=0)
    total: float = Field(ge=0)

    notes: str = Field(default="", max_length=500)
    tracking_number: str | None = None
    estimated_delivery: datetime | None = None
    delivered_at: datetime | None = None
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = Field(default=None, max_length=200)

    idempotency_key: str | None = Field(default=None, max_length=255)

    created_at: datetime = Field(
        default_factory=_utcnow,
        index=True,
        description="Creation timestamp (UTC)",
    )
    updated_at: datetime = Field(default_factory=_utcnow)


class OrderItem(SQLModel, table=True):
    """
    Line item inside an order, copied from the cart at checkout.
    """

    __tablename__ = "order_items"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    order_id: uuid.UUID = Field(
        foreign_key="orders.id",
        index=True,
    )

    position: int = Field(default=0, ge=0)

    product_id: uuid.UUID = Field(
        foreign_key="products.id",
        index=True,
    )

    product_name: str

    quantity: int = Field(
        gt=0,
        description="Quantity ordered (>=1)",
    )

    unit_price: float = Field(
        ge=0,
        description="Unit price at time of order (pre-tax)",
    )

    image_url: str | None = None
