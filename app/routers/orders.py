# app/routers/orders.py
from fastapi import APIRouter, Depends, Header, Query, Response, status
from sqlmodel import Session

from app.core.auth import require_auth
from app.database import get_session
from app.models.user import User
from app.repositories.cart_repo import CartRepository
from app.repositories.order_repo import OrderRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.order import (
    AdminOrderListResponse,
    AdminOrderResponse,
    CheckoutRequest,
    OrderCancelRequest,
    OrderCreateResponse,
    OrderListResponse,
    OrderResponse,
    OrderStatus,
    OrderStatusUpdate,
)
from app.services.checkout_service import CheckoutService
from app.services.inventory_service import InventoryLedger
from app.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])

order_repo = OrderRepository()
cart_repo = CartRepository()
product_repo = ProductRepository()
ledger = InventoryLedger(product_repo)
service = OrderService(order_repo, ledger)
checkout_service = CheckoutService(cart_repo, order_repo, ledger)


# -------- User-facing endpoints --------


@router.post(
    "",
    response_model=OrderCreateResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_order(
    payload: CheckoutRequest,
    response: Response,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
    idempotency_key: str | None = Header(default=None, max_length=100),
):
    """
    Create an order from the current user's cart.

    Prices and totals come from the cart; client-sent items and totals
    are not trusted. With an `Idempotency-Key` header a repeated request
    returns the order created by the first one (200 instead of 201).
    """
    order, created = checkout_service.checkout(
        session, current_user, payload, idempotency_key=idempotency_key
    )
    if not created:
        response.status_code = status.HTTP_200_OK
    return OrderCreateResponse(order_id=order.order_id, order=order)


@router.get("", response_model=OrderListResponse)
def list_my_orders(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    status: OrderStatus | None = None,
):
    """
    List the authenticated user's orders, newest first.
    """
    return service.list_user_orders(session, current_user, page, limit, status)


# -------- Admin endpoints --------
# Declared before "/{order_id}" so "admin" is not taken for an order id.


@router.get("/admin/all", response_model=AdminOrderListResponse)
def list_all_orders(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    status: OrderStatus | None = None,
):
    """
    List all orders (admin only).
    """
    return service.list_all_orders(session, current_user, page, limit, status)


@router.put("/admin/{order_id}/status", response_model=AdminOrderResponse)
def update_order_status(
    order_id: str,
    payload: OrderStatusUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Update order status (admin only).

      pending -> confirmed -> processing -> shipped -> delivered

    Setting "cancelled" cancels the order and restores stock.
    Delivered and cancelled orders can't change anymore.
    """
    order = service.update_status(session, current_user, order_id, payload)
    return AdminOrderResponse(message="Order status updated", order=order)


# -------- Single order --------


@router.get("/{order_id}", response_model=OrderResponse)
def get_my_order(
    order_id: str,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Get a single order belonging to the current user.
    """
    return OrderResponse(order=service.get_user_order(session, current_user, order_id))


@router.put("/{order_id}/cancel", response_model=OrderResponse)
def cancel_order(
    order_id: str,
    payload: OrderCancelRequest | None = None,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Cancel an order that has not shipped yet. Stock is restored.
    """
    reason = payload.reason if payload else None
    order = service.cancel_order(session, current_user, order_id, reason)
    return OrderResponse(message="Order cancelled successfully", order=order)
