# app/services/cart_service.py
import uuid

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from app.core.config import get_settings
from app.core.errors import (
    CapacityError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from app.core.permissions import Action, authorize
from app.models.cart import Cart, CartItem
from app.models.product import Product
from app.models.user import User
from app.repositories.cart_repo import CartRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.cart import (
    CartItemCreate,
    CartItemUpdate,
    CartItemRead,
    CartSummary,
)
from app.services.pricing import to_money


class CartService:
    """
    Business logic for cart operations.

    Responsibilities:
      - one cart per user, created on first mutation
      - at most one line per product, quantity always within 1..max
      - snapshot price/name/image from Product when a line is added
      - compute line totals and cart totals

    Stock is not consulted here; checkout re-validates it.
    """

    def __init__(self, cart_repo: CartRepository, product_repo: ProductRepository):
        self.cart_repo = cart_repo
        self.product_repo = product_repo

    # ---- internal helpers ----

    @staticmethod
    def _max_quantity() -> int:
        return get_settings().CART_MAX_LINE_QUANTITY

    def _check_quantity(self, quantity: int) -> None:
        max_qty = self._max_quantity()
        if quantity < 1 or quantity > max_qty:
            raise ValidationError(
                f"Quantity must be between 1 and {max_qty}",
                errors=[
                    {
                        "field": "quantity",
                        "message": f"Quantity must be between 1 and {max_qty}",
                    }
                ],
            )

    def _get_valid_product(self, session: Session, product_id: uuid.UUID) -> Product:
        product = self.product_repo.get_by_id(session, product_id)
        if not product:
            raise NotFoundError("Product not found")
        if not product.is_active:
            raise ValidationError(
                "Product is inactive",
                errors=[{"field": "productId", "message": "Product is inactive"}],
            )
        return product

    def _require_cart(self, session: Session, user: User) -> Cart:
        cart = self.cart_repo.get_for_user(session, user.id)
        if cart is None:
            raise NotFoundError("Cart not found")
        return cart

    def _require_item(self, session: Session, cart: Cart, item_id: uuid.UUID) -> CartItem:
        item = self.cart_repo.get_item(session, cart.id, item_id)
        if item is None:
            raise NotFoundError("Item not found in cart")
        return item

    def _summary(self, session: Session, cart: Cart | None) -> CartSummary:
        if cart is None:
            return CartSummary(items=[], total=0.0, total_items=0)

        items = self.cart_repo.list_items(session, cart.id)
        reads: list[CartItemRead] = []
        total = to_money(0)
        total_items = 0

        for it in items:
            line_total = to_money(it.price) * it.quantity
            total += line_total
            total_items += it.quantity
            reads.append(
                CartItemRead(
                    id=it.id,
                    product_id=it.product_id,
                    product_name=it.product_name,
                    price=it.price,
                    quantity=it.quantity,
                    image_url=it.image_url,
                    line_total=float(line_total),
                    added_at=it.added_at,
                )
            )

        return CartSummary(
            items=reads,
            total=float(total),
            total_items=total_items,
            updated_at=cart.updated_at,
        )

    # ---- public operations ----

    def get_cart_summary(self, session: Session, user: User) -> CartSummary:
        """
        Return the user's cart, or an empty one if they never had one.
        Reading never creates the cart row.
        """
        return self._summary(session, self.cart_repo.get_for_user(session, user.id))

    def add_to_cart(
        self,
        session: Session,
        user: User,
        payload: CartItemCreate,
    ) -> CartSummary:
        """
        Add a product to the user's cart.

        Rules:
          - quantity within 1..max
          - product already in cart => quantities sum; a sum above max is
            rejected and the existing line is left as it was
          - new product must exist and be active; price/name/image are
            snapshotted from it
        """
        authorize(user, Action.MUTATE_CART)
        self._check_quantity(payload.quantity)
        max_qty = self._max_quantity()

        cart = self.cart_repo.get_for_user(session, user.id)
        existing = (
            self.cart_repo.get_item_for_product(session, cart.id, payload.product_id)
            if cart is not None
            else None
        )

        if existing is not None:
            new_qty = existing.quantity + payload.quantity
            if new_qty > max_qty:
                raise CapacityError(
                    f"Maximum quantity per item is {max_qty}",
                    errors=[
                        {
                            "field": "quantity",
                            "message": (
                                f"Cart already holds {existing.quantity}; "
                                f"maximum quantity per item is {max_qty}"
                            ),
                        }
                    ],
                )
            existing.quantity = new_qty
            self.cart_repo.save_item(session, existing)
        else:
            product = self._get_valid_product(session, payload.product_id)
            cart = self.cart_repo.get_or_create_for_user(session, user.id)
            self.cart_repo.add_from_product(
                session, cart=cart, product=product, quantity=payload.quantity
            )

        self.cart_repo.touch(session, cart)
        try:
            session.commit()
        except IntegrityError:
            # another request inserted the same cart or line first
            session.rollback()
            raise ConflictError("Cart was modified concurrently, please retry")

        return self._summary(session, cart)

    def update_quantity(
        self,
        session: Session,
        user: User,
        item_id: uuid.UUID,
        payload: CartItemUpdate,
    ) -> CartSummary:
        """
        Set the quantity of a cart line.

        quantity < 1 removes the line; quantity > max => 400.
        """
        authorize(user, Action.MUTATE_CART)
        cart = self._require_cart(session, user)
        item = self._require_item(session, cart, item_id)

        if payload.quantity < 1:
            self.cart_repo.delete_item(session, item)
        else:
            self._check_quantity(payload.quantity)
            item.quantity = payload.quantity
            self.cart_repo.save_item(session, item)

        self.cart_repo.touch(session, cart)
        session.commit()
        return self._summary(session, cart)

    def remove_item(
        self,
        session: Session,
        user: User,
        item_id: uuid.UUID,
    ) -> CartSummary:
        """
        Remove a line from the cart and return updated summary.
        """
        authorize(user, Action.MUTATE_CART)
        cart = self._require_cart(session, user)
        item = self._require_item(session, cart, item_id)

        self.cart_repo.delete_item(session, item)
        self.cart_repo.touch(session, cart)
        session.commit()
        return self._summary(session, cart)

    def clear_cart(self, session: Session, user: User) -> CartSummary:
        """
        Remove all lines. The cart row itself is kept.
        """
        authorize(user, Action.MUTATE_CART)
        cart = self.cart_repo.get_for_user(session, user.id)
        if cart is None:
            return self._summary(session, None)

        self.cart_repo.clear(session, cart)
        session.commit()
        return self._summary(session, cart)
