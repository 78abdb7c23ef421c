# app/routers/cart.py
import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.core.auth import require_auth
from app.database import get_session
from app.models.user import User
from app.repositories.cart_repo import CartRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.cart import (
    CartSummary,
    CartItemCreate,
    CartItemUpdate,
    CartMutationResponse,
)
from app.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["Cart"])

cart_repo = CartRepository()
product_repo = ProductRepository()
service = CartService(cart_repo, product_repo)


@router.get("", response_model=CartSummary)
def get_my_cart(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Get current user's cart summary.

    A user without a cart gets an empty one; nothing is persisted.
    """
    return service.get_cart_summary(session, current_user)


@router.post("", response_model=CartMutationResponse)
def add_to_cart(
    payload: CartItemCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Add product to the current user's cart.

    Returns the updated cart summary.
    """
    cart = service.add_to_cart(session, current_user, payload)
    return CartMutationResponse(message="Item added to cart", cart=cart)


@router.put("/{item_id}", response_model=CartMutationResponse)
def update_cart_item(
    item_id: uuid.UUID,
    payload: CartItemUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Set the quantity of a cart line. Quantity 0 removes it.
    """
    cart = service.update_quantity(session, current_user, item_id, payload)
    return CartMutationResponse(message="Cart updated", cart=cart)


@router.delete("/{item_id}", response_model=CartMutationResponse)
def remove_cart_item(
    item_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    cart = service.remove_item(session, current_user, item_id)
    return CartMutationResponse(message="Item removed from cart", cart=cart)


@router.delete("", response_model=CartMutationResponse)
def clear_cart(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Clear the entire cart.
    """
    cart = service.clear_cart(session, current_user)
    return CartMutationResponse(message="Cart cleared", cart=cart)
