# app/services/order_service.py
import logging
import secrets
import string
import time
from datetime import datetime, timedelta, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app.core.config import get_settings
from app.core.errors import (
    InternalError,
    InvalidTransitionError,
    NotFoundError,
)
from app.core.permissions import Action, authorize, is_allowed
from app.models.order import Order, OrderItem
from app.models.user import User
from app.repositories.order_repo import OrderRepository
from app.schemas.common import Pagination
from app.schemas.order import (
    AddressInfo,
    AdminOrderListResponse,
    AdminOrderRead,
    OrderItemRead,
    OrderListResponse,
    OrderRead,
    OrderStatusUpdate,
    OrderTotals,
)
from app.services.inventory_service import InventoryLedger, StockLine
from app.services.pricing import to_money

logger = logging.getLogger(__name__)

# Forward order of the lifecycle; "cancelled" sits outside it.
STATUS_FLOW: tuple[str, ...] = (
    "pending",
    "confirmed",
    "processing",
    "shipped",
    "delivered",
)
CANCELLABLE_STATUSES: frozenset[str] = frozenset({"pending", "confirmed", "processing"})
TERMINAL_STATUSES: frozenset[str] = frozenset({"delivered", "cancelled"})

_BASE36 = string.digits + string.ascii_uppercase


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    out = []
    while value:
        value, rem = divmod(value, 36)
        out.append(_BASE36[rem])
    return "".join(reversed(out))


def generate_order_number() -> str:
    """
    Human-readable order id: ORD-<base36 ms timestamp>-<5 random chars>.
    """
    stamp = _to_base36(int(time.time() * 1000))
    suffix = "".join(secrets.choice(_BASE36) for _ in range(5))
    return f"ORD-{stamp}-{suffix}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def build_order_read(
    order: Order,
    items: list[OrderItem],
    admin: bool = False,
) -> OrderRead:
    """
    Compose the order DTO from ORM rows. Totals come from the stored
    snapshot, never from live product data.
    """
    item_dtos = [
        OrderItemRead(
            product_id=it.product_id,
            product_name=it.product_name,
            price=it.unit_price,
            quantity=it.quantity,
            image_url=it.image_url,
            line_total=float(to_money(it.unit_price) * it.quantity),
        )
        for it in items
    ]
    fields = dict(
        order_id=order.order_number,
        status=order.status,
        payment_method=order.payment_method,
        payment_status=order.payment_status,
        items=item_dtos,
        shipping=AddressInfo.model_validate(order.shipping),
        billing=AddressInfo.model_validate(order.billing),
        totals=OrderTotals(
            subtotal=order.subtotal,
            tax=order.tax,
            shipping=order.shipping_fee,
            total=order.total,
        ),
        notes=order.notes or "",
        tracking_number=order.tracking_number,
        estimated_delivery=order.estimated_delivery,
        delivered_at=order.delivered_at,
        cancelled_at=order.cancelled_at,
        cancellation_reason=order.cancellation_reason,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )
    if admin:
        return AdminOrderRead(user_id=order.user_id, **fields)
    return OrderRead(**fields)


class OrderService:
    """
    Order reads and lifecycle transitions.

    Lifecycle:

      pending -> confirmed -> processing -> shipped -> delivered
      pending | confirmed | processing -> cancelled

    Cancelling restores every ordered quantity to stock exactly once:
    the status flip is a conditional UPDATE and the restore commits in
    the same transaction, so a second cancel finds nothing to flip.
    """

    def __init__(self, order_repo: OrderRepository, ledger: InventoryLedger):
        self.order_repo = order_repo
        self.ledger = ledger

    # -------- helpers --------

    def _get_order(self, session: Session, order_number: str) -> Order:
        order = self.order_repo.get_by_number(session, order_number)
        if not order:
            raise NotFoundError("Order not found")
        return order

    def _read(self, session: Session, order: Order, admin: bool = False) -> OrderRead:
        items = self.order_repo.list_items_for_order(session, order.id)
        return build_order_read(order, items, admin=admin)

    def _current_status(self, session: Session, order: Order) -> str:
        session.refresh(order)
        return order.status

    # -------- User-facing operations --------

    def list_user_orders(
        self,
        session: Session,
        user: User,
        page: int = 1,
        limit: int = 10,
        status: str | None = None,
    ) -> OrderListResponse:
        """
        Paginated list of the user's own orders, newest first.
        """
        skip = (page - 1) * limit
        orders = self.order_repo.list_for_user(session, user.id, skip, limit, status)
        total = self.order_repo.count_for_user(session, user.id, status)
        return OrderListResponse(
            orders=[self._read(session, o) for o in orders],
            pagination=Pagination.build(page, limit, total),
        )

    def get_user_order(
        self,
        session: Session,
        user: User,
        order_number: str,
    ) -> OrderRead:
        """
        Get a single order of the user.

        - 404 if order not found or does not belong to this user.
        """
        order = self.order_repo.get_by_number(session, order_number)
        if not order or not is_allowed(user, Action.READ, order):
            raise NotFoundError("Order not found")
        return self._read(session, order, admin=user.role == "admin")

    def cancel_order(
        self,
        session: Session,
        user: User,
        order_number: str,
        reason: str | None = None,
    ) -> OrderRead:
        """
        Cancel an order and put its quantities back in stock.

        Allowed for the owner (or an admin) while the order is pending,
        confirmed or processing. Anything else raises with the current
        status in the message.
        """
        order = self._get_order(session, order_number)
        authorize(user, Action.CANCEL, order)

        if order.status not in CANCELLABLE_STATUSES:
            raise InvalidTransitionError(
                f"Cannot cancel order with status: {order.status}"
            )

        if reason is None:
            reason = (
                "Cancelled by customer" if order.user_id == user.id else "Cancelled by admin"
            )

        items = self.order_repo.list_items_for_order(session, order.id)
        now = _utcnow()

        try:
            moved = self.order_repo.transition_status(
                session,
                order.id,
                from_statuses=CANCELLABLE_STATUSES,
                values={
                    "status": "cancelled",
                    "cancelled_at": now,
                    "cancellation_reason": reason[:200],
                    "updated_at": now,
                },
            )
            if not moved:
                session.rollback()
                raise InvalidTransitionError(
                    f"Cannot cancel order with status: {self._current_status(session, order)}"
                )

            self.ledger.restore_lines(
                session,
                [StockLine(it.product_id, it.quantity, it.product_name) for it in items],
            )
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception("Cancellation of order %s failed", order_number)
            raise InternalError("Failed to cancel order") from exc

        logger.info(
            "Order %s cancelled by %s; restored %s line(s) to stock",
            order_number,
            user.id,
            len(items),
        )
        session.refresh(order)
        return build_order_read(order, items, admin=user.role == "admin")

    # -------- Admin operations --------

    def list_all_orders(
        self,
        session: Session,
        user: User,
        page: int = 1,
        limit: int = 20,
        status: str | None = None,
    ) -> AdminOrderListResponse:
        """
        List all orders (admin only).
        """
        authorize(user, Action.LIST_ALL)
        skip = (page - 1) * limit
        orders = self.order_repo.list_all(session, skip, limit, status)
        total = self.order_repo.count_all(session, status)
        return AdminOrderListResponse(
            orders=[self._read(session, o, admin=True) for o in orders],
            pagination=Pagination.build(page, limit, total),
        )

    def update_status(
        self,
        session: Session,
        user: User,
        order_number: str,
        payload: OrderStatusUpdate,
    ) -> OrderRead:
        """
        Admin-only status update.

        - "cancelled" goes through `cancel_order` (restores stock).
        - delivered / cancelled are terminal, tracking and notes included.
        - statuses only move forward along STATUS_FLOW.
        - shipped: estimated_delivery = now + N days if not set yet.
        - delivered: payment_status = paid, delivered_at = now.
        """
        order = self._get_order(session, order_number)
        authorize(user, Action.UPDATE_STATUS, order)

        current = order.status
        new = payload.status

        if current in TERMINAL_STATUSES:
            raise InvalidTransitionError(f"Cannot change status of a {current} order")

        if new == "cancelled":
            reason = (payload.notes or "").strip() or None
            return self.cancel_order(session, user, order_number, reason)

        if STATUS_FLOW.index(new) < STATUS_FLOW.index(current):
            raise InvalidTransitionError(
                f"Invalid status transition: {current} -> {new}"
            )

        now = _utcnow()
        values: dict = {"status": new, "updated_at": now}
        if payload.tracking_number:
            values["tracking_number"] = payload.tracking_number
        if payload.notes:
            values["notes"] = payload.notes
        if new == "shipped" and order.estimated_delivery is None:
            values["estimated_delivery"] = now + timedelta(
                days=get_settings().ESTIMATED_DELIVERY_DAYS
            )
        if new == "delivered" and current != "delivered":
            values["delivered_at"] = now
            values["payment_status"] = "paid"

        moved = self.order_repo.transition_status(
            session, order.id, from_statuses=[current], values=values
        )
        if not moved:
            session.rollback()
            raise InvalidTransitionError(
                f"Order status changed to {self._current_status(session, order)}, "
                "please retry"
            )
        session.commit()

        logger.info("Order %s status %s -> %s by %s", order_number, current, new, user.id)
        session.refresh(order)
        return self._read(session, order, admin=True)
