# app/repositories/order_repo.py
import uuid
from typing import Iterable

from sqlalchemy import func, update
from sqlmodel import Session, select

from app.models.order import Order, OrderItem


class OrderRepository:
    """
    Data access layer for orders and order_items.

    NOTE:
      - No commits here; order creation and cancellation are multi-step
        transactions. The service is responsible for calling session.commit().
    """

    # ---- Orders ----

    def list_for_user(
        self,
        session: Session,
        user_id: str,
        skip: int = 0,
        limit: int = 10,
        status: str | None = None,
    ) -> list[Order]:
        stmt = select(Order).where(Order.user_id == user_id)
        if status:
            stmt = stmt.where(Order.status == status)
        stmt = stmt.order_by(Order.created_at.desc()).offset(skip).limit(limit)
        return list(session.exec(stmt).all())

    def count_for_user(
        self, session: Session, user_id: str, status: str | None = None
    ) -> int:
        stmt = select(func.count()).select_from(Order).where(Order.user_id == user_id)
        if status:
            stmt = stmt.where(Order.status == status)
        return int(session.exec(stmt).one())

    def list_all(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 20,
        status: str | None = None,
    ) -> list[Order]:
        stmt = select(Order)
        if status:
            stmt = stmt.where(Order.status == status)
        stmt = stmt.order_by(Order.created_at.desc()).offset(skip).limit(limit)
        return list(session.exec(stmt).all())

    def count_all(self, session: Session, status: str | None = None) -> int:
        stmt = select(func.count()).select_from(Order)
        if status:
            stmt = stmt.where(Order.status == status)
        return int(session.exec(stmt).one())

    def get_by_number(self, session: Session, order_number: str) -> Order | None:
        stmt = select(Order).where(Order.order_number == order_number)
        return session.exec(stmt).first()

    def get_by_idempotency_key(
        self, session: Session, user_id: str, key: str
    ) -> Order | None:
        stmt = select(Order).where(
            Order.user_id == user_id, Order.idempotency_key == key
        )
        return session.exec(stmt).first()

    def add_order(
        self,
        session: Session,
        order: Order,
        items: Iterable[OrderItem],
    ) -> Order:
        """
        Insert an Order and its lines without committing.
        """
        session.add(order)
        session.flush()  # surface unique violations before the lines go in
        for item in items:
            item.order_id = order.id
            session.add(item)
        session.flush()
        return order

    def transition_status(
        self,
        session: Session,
        order_id: uuid.UUID,
        *,
        from_statuses: Iterable[str],
        values: dict,
    ) -> bool:
        """
        Conditionally move an order out of one of `from_statuses`.

        Returns False when the order was not in an allowed status at the
        moment the UPDATE ran, e.g. a concurrent cancellation got there first.
        """
        stmt = (
            update(Order)
            .where(Order.id == order_id, Order.status.in_(list(from_statuses)))
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = session.connection().execute(stmt)
        return result.rowcount == 1

    # ---- Order items ----

    def list_items_for_order(
        self,
        session: Session,
        order_id: uuid.UUID,
    ) -> list[OrderItem]:
        stmt = (
            select(OrderItem)
            .where(OrderItem.order_id == order_id)
            .order_by(OrderItem.position)
        )
        return list(session.exec(stmt).all())
