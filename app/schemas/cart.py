# app/schemas/cart.py
import uuid
from datetime import datetime

from app.schemas.common import ApiModel


class CartItemCreate(ApiModel):
    """
    Payload for adding to cart.

    Quantity bounds are enforced by the service, which also checks the
    summed quantity when the product is already in the cart.
    """

    product_id: uuid.UUID
    quantity: int = 1


class CartItemUpdate(ApiModel):
    """
    Payload for updating quantity of a cart line.
    Values below 1 remove the line.
    """

    quantity: int


class CartItemRead(ApiModel):
    """
    Read model for a single cart line, including line_total.
    """

    id: uuid.UUID
    product_id: uuid.UUID
    product_name: str
    price: float
    quantity: int
    image_url: str | None = None
    line_total: float
    added_at: datetime


class CartSummary(ApiModel):
    """
    Full cart response model with derived totals.
    """

    items: list[CartItemRead]
    total: float
    total_items: int
    updated_at: datetime | None = None


class CartMutationResponse(ApiModel):
    success: bool = True
    message: str
    cart: CartSummary
