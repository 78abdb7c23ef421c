# app/repositories/product_repo.py
import uuid

from sqlalchemy import update
from sqlmodel import Session, select

from app.models.product import Product


class ProductRepository:
    """
    Data access layer for Product.

    - Pure DB operations (CRUD + queries).
    - No FastAPI, no business logic.

    Stock is never read-then-written here: `try_decrement_stock` and
    `increment_stock` are single UPDATE statements evaluated by the
    database, so concurrent callers on one product serialize on the row.
    """

    # ----- Products -----

    def get_by_id(self, session: Session, product_id: uuid.UUID) -> Product | None:
        return session.get(Product, product_id)

    def get_by_slug(self, session: Session, slug: str) -> Product | None:
        stmt = select(Product).where(Product.slug == slug)
        return session.exec(stmt).first()

    def list(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        only_active: bool = True,
    ) -> list[Product]:
        stmt = select(Product)
        if only_active:
            stmt = stmt.where(Product.is_active == True)  # noqa: E712
        stmt = stmt.order_by(Product.created_at.desc()).offset(skip).limit(limit)
        return list(session.exec(stmt).all())

    def create(self, session: Session, product: Product) -> Product:
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    def update(self, session: Session, product: Product) -> Product:
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    def delete(self, session: Session, product: Product) -> None:
        session.delete(product)
        session.commit()

    # ----- Stock (no commits; callers own the transaction) -----

    def try_decrement_stock(
        self,
        session: Session,
        product_id: uuid.UUID,
        quantity: int,
    ) -> bool:
        """
        Conditionally take `quantity` units.

        Runs `UPDATE ... SET stock = stock - n WHERE id = :id AND stock >= n`
        and reports whether a row matched. Nothing is written when the
        product is short or missing.
        """
        stmt = (
            update(Product)
            .where(Product.id == product_id, Product.stock_on_hand >= quantity)
            .values(stock_on_hand=Product.stock_on_hand - quantity)
            .execution_options(synchronize_session=False)
        )
        result = session.connection().execute(stmt)
        return result.rowcount == 1

    def increment_stock(
        self,
        session: Session,
        product_id: uuid.UUID,
        quantity: int,
    ) -> bool:
        """Return `quantity` units. False when the product no longer exists."""
        stmt = (
            update(Product)
            .where(Product.id == product_id)
            .values(stock_on_hand=Product.stock_on_hand + quantity)
            .execution_options(synchronize_session=False)
        )
        result = session.connection().execute(stmt)
        return result.rowcount == 1
