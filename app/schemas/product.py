# app/schemas/product.py
import uuid
from datetime import datetime

from pydantic import ConfigDict, Field, field_validator

from app.schemas.common import ApiModel
from app.services.pricing import to_money


def _round_price(v: float | None) -> float | None:
    # stored prices are whole cents
    return None if v is None else float(to_money(v))


class ProductRead(ApiModel):
    id: uuid.UUID
    name: str
    slug: str
    description: str | None = None
    price: float
    stock_on_hand: int
    is_active: bool
    image_url: str | None = None
    created_at: datetime


class ProductCreate(ApiModel):
    """
    Payload for creating a product.

    - slug is optional: if omitted, generated from `name`.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=200)
    slug: str | None = None
    description: str | None = Field(default=None, max_length=1000)
    price: float = Field(ge=0)
    stock_on_hand: int = Field(default=0, ge=0)
    is_active: bool = True
    image_url: str | None = None

    @field_validator("price")
    @classmethod
    def price_to_cents(cls, v: float) -> float:
        return _round_price(v)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Product name is required")
        return v


class ProductUpdate(ApiModel):
    """
    Partial update. Setting `stock_on_hand` overwrites the count
    (restocking / stock-take); checkout never goes through here.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=200)
    slug: str | None = None
    description: str | None = Field(default=None, max_length=1000)
    price: float | None = Field(default=None, ge=0)
    stock_on_hand: int | None = Field(default=None, ge=0)
    is_active: bool | None = None
    image_url: str | None = None

    @field_validator("price")
    @classmethod
    def price_to_cents(cls, v: float | None) -> float | None:
        return _round_price(v)
