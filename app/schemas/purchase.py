# app/schemas/purchase.py
import uuid
from datetime import date, datetime
from typing import Literal

from pydantic import ConfigDict, Field, field_validator

from app.schemas.common import ApiModel

DeliveryTime = Literal["10 AM", "11 AM", "12 PM"]
DeliveryDistrict = Literal[
    "Colombo",
    "Gampaha",
    "Kandy",
    "Galle",
    "Matara",
    "Kurunegala",
    "Jaffna",
    "Badulla",
    "Anuradhapura",
    "Ratnapura",
]
PurchaseProduct = Literal[
    "Laptop",
    "Smartphone",
    "Tablet",
    "Headphones",
    "Camera",
    "Smartwatch",
    "Printer",
    "Monitor",
    "Keyboard",
    "Mouse",
]
PurchaseStatus = Literal["pending", "confirmed", "shipped", "delivered", "cancelled"]


class PurchaseCreate(ApiModel):
    """
    Payload for a purchase request.

    The delivery date rules (not in the past, no Sundays) are checked by
    the service because they depend on "today".
    """

    model_config = ConfigDict(extra="forbid")

    delivery_date: date = Field(alias="date")
    delivery_time: DeliveryTime
    delivery_location: DeliveryDistrict
    product_name: PurchaseProduct
    quantity: int = Field(ge=1, le=100)
    message: str = Field(default="", max_length=500)

    @field_validator("message")
    @classmethod
    def strip_message(cls, v: str) -> str:
        return v.strip()


class PurchaseRead(ApiModel):
    id: uuid.UUID
    user_id: str
    username: str
    delivery_date: date = Field(alias="date")
    delivery_time: str
    delivery_location: str
    product_name: str
    quantity: int
    message: str
    status: PurchaseStatus
    created_at: datetime
    updated_at: datetime


class PurchaseStatusUpdate(ApiModel):
    model_config = ConfigDict(extra="forbid")

    status: PurchaseStatus


class PurchaseStats(ApiModel):
    """
    Counters for the stats endpoint. Admins get store-wide figures,
    everyone else their own.
    """

    role: str
    total_purchases: int | None = None
    unique_users: int | None = None
    my_purchases: int | None = None
    pending_purchases: int
    completed_purchases: int
