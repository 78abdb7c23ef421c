# app/repositories/purchase_repo.py
import uuid

from sqlalchemy import func
from sqlmodel import Session, select

from app.models.purchase import Purchase


class PurchaseRepository:
    """
    Data access layer for legacy purchase requests.
    """

    def get_by_id(self, session: Session, purchase_id: uuid.UUID) -> Purchase | None:
        return session.get(Purchase, purchase_id)

    def list_for_user(self, session: Session, user_id: str) -> list[Purchase]:
        stmt = (
            select(Purchase)
            .where(Purchase.user_id == user_id)
            .order_by(Purchase.created_at.desc())
        )
        return list(session.exec(stmt).all())

    def list_for_username(self, session: Session, username: str) -> list[Purchase]:
        stmt = (
            select(Purchase)
            .where(Purchase.username == username)
            .order_by(Purchase.created_at.desc())
        )
        return list(session.exec(stmt).all())

    def list_all(self, session: Session) -> list[Purchase]:
        stmt = select(Purchase).order_by(Purchase.created_at.desc())
        return list(session.exec(stmt).all())

    def create(self, session: Session, purchase: Purchase) -> Purchase:
        session.add(purchase)
        session.commit()
        session.refresh(purchase)
        return purchase

    def update(self, session: Session, purchase: Purchase) -> Purchase:
        session.add(purchase)
        session.commit()
        session.refresh(purchase)
        return purchase

    def delete(self, session: Session, purchase: Purchase) -> None:
        session.delete(purchase)
        session.commit()

    def count(
        self,
        session: Session,
        user_id: str | None = None,
        status: str | None = None,
    ) -> int:
        stmt = select(func.count()).select_from(Purchase)
        if user_id is not None:
            stmt = stmt.where(Purchase.user_id == user_id)
        if status is not None:
            stmt = stmt.where(Purchase.status == status)
        return int(session.exec(stmt).one())

    def count_users(self, session: Session) -> int:
        stmt = select(func.count(func.distinct(Purchase.user_id)))
        return int(session.exec(stmt).one())
