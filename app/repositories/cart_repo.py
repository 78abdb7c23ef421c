# app/repositories/cart_repo.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import delete
from sqlmodel import Session, select

from app.models.cart import Cart, CartItem
from app.models.product import Product
from app.services.pricing import to_money


class CartRepository:

    # ---- Cart ----

    def get_for_user(self, session: Session, user_id: str) -> Cart | None:
        stmt = select(Cart).where(Cart.user_id == user_id)
        return session.exec(stmt).first()

    def get_or_create_for_user(self, session: Session, user_id: str) -> Cart:
        """
        Return the user's cart row, inserting it on first mutation.
        Not committed; the caller commits together with the line change.
        """
        cart = self.get_for_user(session, user_id)
        if cart is None:
            cart = Cart(user_id=user_id)
            session.add(cart)
            session.flush()
        return cart

    def touch(self, session: Session, cart: Cart) -> None:
        cart.updated_at = datetime.now(timezone.utc)
        session.add(cart)

    # ---- Lines ----

    def list_items(self, session: Session, cart_id: uuid.UUID) -> list[CartItem]:
        stmt = (
            select(CartItem)
            .where(CartItem.cart_id == cart_id)
            .order_by(CartItem.added_at, CartItem.id)
        )
        return list(session.exec(stmt).all())

    def get_item(
        self, session: Session, cart_id: uuid.UUID, item_id: uuid.UUID
    ) -> CartItem | None:
        stmt = select(CartItem).where(
            CartItem.cart_id == cart_id, CartItem.id == item_id
        )
        return session.exec(stmt).first()

    def get_item_for_product(
        self, session: Session, cart_id: uuid.UUID, product_id: uuid.UUID
    ) -> CartItem | None:
        stmt = select(CartItem).where(
            CartItem.cart_id == cart_id, CartItem.product_id == product_id
        )
        return session.exec(stmt).first()

    def add_from_product(
        self,
        session: Session,
        *,
        cart: Cart,
        product: Product,
        quantity: int,
    ) -> CartItem:
        """
        Append a line from a Product, snapshotting:
          - price (rounded to cents)
          - product_name
          - image_url

        Business logic (quantity bounds, duplicates) lives in the service.
        """
        item = CartItem(
            cart_id=cart.id,
            product_id=product.id,
            quantity=quantity,
            price=float(to_money(product.price)),
            product_name=product.name,
            image_url=product.image_url,
        )
        session.add(item)
        return item

    def save_item(self, session: Session, item: CartItem) -> CartItem:
        session.add(item)
        return item

    def delete_item(self, session: Session, item: CartItem) -> None:
        session.delete(item)

    def clear(self, session: Session, cart: Cart) -> int:
        """Remove every line; the cart row itself stays."""
        result = session.connection().execute(
            delete(CartItem).where(CartItem.cart_id == cart.id)
        )
        self.touch(session, cart)
        return result.rowcount
