# app/services/checkout_service.py
import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session

from app.core.config import get_settings
from app.core.errors import (
    InternalError,
    ValidationError,
    field_errors_from_pydantic,
)
from app.core.permissions import Action, authorize
from app.models.cart import Cart, CartItem
from app.models.order import PAYMENT_METHODS, Order, OrderItem
from app.models.user import User
from app.repositories.cart_repo import CartRepository
from app.repositories.order_repo import OrderRepository
from app.schemas.order import AddressInfo, CheckoutRequest, ClientTotals, OrderRead
from app.services.inventory_service import InventoryLedger, StockLine
from app.services.order_service import build_order_read, generate_order_number
from app.services.pricing import OrderTotals, compute_totals

logger = logging.getLogger(__name__)


class CheckoutService:
    """
    Turns the user's cart into an order.

    Preconditions, checked in this order and without side effects:
      1. cart exists and has lines
      2. shipping and billing addresses are valid
      3. payment method is card | cod | bank_transfer
      4. totals are recomputed from the cart's line snapshots

    Then, as a saga of individually committed steps:
      a. take stock for every line (all or nothing, see InventoryLedger.reserve)
      b. build the order from copies of the cart lines
      c. persist it; on failure the stock taken in (a) is released
      d. clear the cart; a failure here is logged and the order stands
    """

    def __init__(
        self,
        cart_repo: CartRepository,
        order_repo: OrderRepository,
        ledger: InventoryLedger,
    ):
        self.cart_repo = cart_repo
        self.order_repo = order_repo
        self.ledger = ledger

    # ---- preconditions ----

    @staticmethod
    def _validate_address(
        field: str, raw: dict[str, Any] | None, errors: list[dict[str, str]]
    ) -> AddressInfo | None:
        if not raw:
            errors.append(
                {"field": field, "message": f"{field.capitalize()} information is required"}
            )
            return None
        try:
            return AddressInfo.model_validate(raw)
        except PydanticValidationError as exc:
            errors.extend(field_errors_from_pydantic(exc.errors(), prefix=field))
            return None

    @staticmethod
    def _log_client_totals(
        user: User, client: ClientTotals | None, server: OrderTotals
    ) -> None:
        if client is None or client.total is None:
            return
        if abs(client.total - float(server.total)) >= 0.01:
            logger.warning(
                "Client totals ignored for user %s: client total %.2f, server total %s",
                user.id,
                client.total,
                server.total,
            )

    # ---- main entry point ----

    def checkout(
        self,
        session: Session,
        user: User,
        payload: CheckoutRequest,
        idempotency_key: str | None = None,
    ) -> tuple[OrderRead, bool]:
        """
        Place an order from the current cart.

        Returns (order, created). `created` is False only when an
        idempotency key matched an order placed earlier.
        """
        authorize(user, Action.CHECKOUT)

        if idempotency_key:
            previous = self.order_repo.get_by_idempotency_key(
                session, user.id, idempotency_key
            )
            if previous is not None:
                logger.info(
                    "Replaying order %s for idempotency key of user %s",
                    previous.order_number,
                    user.id,
                )
                return self._read(session, previous), False

        # 1) cart
        cart: Cart | None = self.cart_repo.get_for_user(session, user.id)
        cart_items: list[CartItem] = (
            self.cart_repo.list_items(session, cart.id) if cart is not None else []
        )
        if not cart_items:
            raise ValidationError(
                "Cart is empty",
                errors=[{"field": "items", "message": "Order must contain at least one item"}],
            )

        # 2) addresses
        errors: list[dict[str, str]] = []
        shipping = self._validate_address("shipping", payload.shipping, errors)
        billing = self._validate_address("billing", payload.billing, errors)
        if errors:
            raise ValidationError("Invalid address", errors=errors)

        # 3) payment method
        if payload.payment_method not in PAYMENT_METHODS:
            raise ValidationError(
                "Invalid payment method",
                errors=[
                    {
                        "field": "paymentMethod",
                        "message": f"Payment method must be one of: {', '.join(PAYMENT_METHODS)}",
                    }
                ],
            )

        # Copy the lines now; the ORM rows expire on the commits below.
        snapshot = [
            OrderItem(
                position=pos,
                product_id=ci.product_id,
                product_name=ci.product_name,
                unit_price=ci.price,
                quantity=ci.quantity,
                image_url=ci.image_url,
            )
            for pos, ci in enumerate(cart_items)
        ]
        cart_id = cart.id

        # 4) totals
        settings = get_settings()
        totals = compute_totals(
            ((it.unit_price, it.quantity) for it in snapshot),
            tax_rate=settings.TAX_RATE,
            shipping_fee=settings.SHIPPING_FEE,
        )
        self._log_client_totals(user, payload.totals, totals)

        # a) stock
        reserved = self.ledger.reserve(
            session,
            [StockLine(it.product_id, it.quantity, it.product_name) for it in snapshot],
        )

        # b) build
        order = Order(
            order_number=generate_order_number(),
            user_id=user.id,
            shipping=shipping.model_dump(mode="json", by_alias=True),
            billing=billing.model_dump(mode="json", by_alias=True),
            payment_method=payload.payment_method,
            payment_status="pending",
            status="pending",
            subtotal=float(totals.subtotal),
            tax=float(totals.tax),
            shipping_fee=float(totals.shipping),
            total=float(totals.total),
            idempotency_key=idempotency_key,
        )

        # c) persist
        try:
            self.order_repo.add_order(session, order, snapshot)
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error(
                "Persisting order for user %s failed; releasing reserved stock",
                user.id,
            )
            self.ledger.release(session, reserved)
            if idempotency_key and isinstance(exc, IntegrityError):
                winner = self.order_repo.get_by_idempotency_key(
                    session, user.id, idempotency_key
                )
                if winner is not None:
                    return self._read(session, winner), False
            raise InternalError("Failed to create order") from exc

        order_number = order.order_number
        logger.info(
            "Order %s placed by %s: %s line(s), total %s",
            order_number,
            user.id,
            len(snapshot),
            totals.total,
        )

        # d) clear cart
        self._clear_cart(session, cart_id, order_number)

        return self._read(session, order), True

    # ---- helpers ----

    def _clear_cart(self, session: Session, cart_id, order_number: str) -> None:
        try:
            cart = session.get(Cart, cart_id)
            if cart is not None:
                self.cart_repo.clear(session, cart)
                session.commit()
        except SQLAlchemyError:
            session.rollback()
            logger.exception(
                "Order %s placed but cart %s could not be cleared", order_number, cart_id
            )

    def _read(self, session: Session, order: Order) -> OrderRead:
        items = self.order_repo.list_items_for_order(session, order.id)
        return build_order_read(order, items)
