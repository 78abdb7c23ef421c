# app/schemas/order.py
import uuid
from datetime import datetime
from typing import Any, Literal

from pydantic import ConfigDict, EmailStr, Field, field_validator

from app.schemas.common import ApiModel, Pagination

OrderStatus = Literal[
    "pending", "confirmed", "processing", "shipped", "delivered", "cancelled"
]
PaymentMethod = Literal["card", "cod", "bank_transfer"]
PaymentStatus = Literal["pending", "paid", "failed", "refunded"]


class AddressInfo(ApiModel):
    """
    Shipping / billing snapshot stored on the order.

    Every field is required, trimmed and non-empty; free text is
    length-bounded.
    """

    model_config = ConfigDict(extra="ignore")

    first_name: str = Field(max_length=50)
    last_name: str = Field(max_length=50)
    email: EmailStr
    phone: str = Field(max_length=30)
    address: str = Field(max_length=200)
    city: str = Field(max_length=50)
    district: str = Field(max_length=50)
    postal_code: str = Field(max_length=20)

    @field_validator(
        "first_name",
        "last_name",
        "phone",
        "address",
        "city",
        "district",
        "postal_code",
        mode="before",
    )
    @classmethod
    def not_empty(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip()
            if not v:
                raise ValueError("field cannot be empty")
        return v

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v


class ClientTotals(ApiModel):
    """
    Totals as computed by the client. Informational only; the server
    recomputes every amount from the cart.
    """

    subtotal: float | None = None
    tax: float | None = None
    shipping: float | None = None
    total: float | None = None


class CheckoutRequest(ApiModel):
    """
    Payload for `POST /orders`.

    Shipping/billing/payment method are validated by the checkout
    service, in order, after the cart has been checked. `items` and
    `totals` are accepted for compatibility with existing clients but
    the cart is the source of truth.
    """

    items: list[dict[str, Any]] | None = None
    shipping: dict[str, Any] | None = None
    billing: dict[str, Any] | None = None
    payment_method: str | None = None
    totals: ClientTotals | None = None


class OrderItemRead(ApiModel):
    product_id: uuid.UUID
    product_name: str
    price: float
    quantity: int
    image_url: str | None = None
    line_total: float


class OrderTotals(ApiModel):
    subtotal: float
    tax: float
    shipping: float
    total: float


class OrderRead(ApiModel):
    """
    Full order view including items.
    """

    order_id: str
    status: OrderStatus
    payment_method: PaymentMethod
    payment_status: PaymentStatus
    items: list[OrderItemRead]
    shipping: AddressInfo
    billing: AddressInfo
    totals: OrderTotals
    notes: str = ""
    tracking_number: str | None = None
    estimated_delivery: datetime | None = None
    delivered_at: datetime | None = None
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = None
    created_at: datetime
    updated_at: datetime


class AdminOrderRead(OrderRead):
    user_id: str


class OrderCreateResponse(ApiModel):
    success: bool = True
    message: str = "Order created successfully"
    order_id: str
    order: OrderRead


class OrderResponse(ApiModel):
    success: bool = True
    message: str | None = None
    order: OrderRead


class AdminOrderResponse(ApiModel):
    success: bool = True
    message: str | None = None
    order: AdminOrderRead


class OrderListResponse(ApiModel):
    success: bool = True
    orders: list[OrderRead]
    pagination: Pagination


class AdminOrderListResponse(ApiModel):
    success: bool = True
    orders: list[AdminOrderRead]
    pagination: Pagination


class OrderCancelRequest(ApiModel):
    reason: str | None = Field(default=None, max_length=200)

    @field_validator("reason")
    @classmethod
    def normalize_reason(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class OrderStatusUpdate(ApiModel):
    """
    Admin payload to change order status.
    """

    model_config = ConfigDict(extra="forbid")

    status: OrderStatus
    tracking_number: str | None = Field(default=None, max_length=100)
    notes: str | None = Field(default=None, max_length=500)
