# app/services/purchase_service.py
import logging
import uuid
from datetime import date, datetime, timezone

from sqlmodel import Session

from app.core.errors import NotFoundError, ValidationError
from app.core.permissions import Action, authorize
from app.models.purchase import Purchase
from app.models.user import User
from app.repositories.purchase_repo import PurchaseRepository
from app.schemas.purchase import (
    PurchaseCreate,
    PurchaseRead,
    PurchaseStats,
    PurchaseStatusUpdate,
)

logger = logging.getLogger(__name__)

SUNDAY = 6


def to_purchase_read(purchase: Purchase) -> PurchaseRead:
    return PurchaseRead(
        id=purchase.id,
        user_id=purchase.user_id,
        username=purchase.username,
        delivery_date=purchase.delivery_date,
        delivery_time=purchase.delivery_time,
        delivery_location=purchase.delivery_location,
        product_name=purchase.product_name,
        quantity=purchase.quantity,
        message=purchase.message,
        status=purchase.status,
        created_at=purchase.created_at,
        updated_at=purchase.updated_at,
    )


class PurchaseService:
    """
    Legacy purchase requests: a named product delivered to a district on
    a chosen date and time slot. No stock is involved.
    """

    def __init__(self, repo: PurchaseRepository):
        self.repo = repo

    @staticmethod
    def _validate_delivery_date(delivery_date: date, today: date | None = None) -> None:
        today = today or date.today()
        if delivery_date < today:
            raise ValidationError(
                "Delivery date cannot be in the past",
                errors=[{"field": "date", "message": "Delivery date cannot be in the past"}],
            )
        if delivery_date.weekday() == SUNDAY:
            raise ValidationError(
                "Delivery is not available on Sundays",
                errors=[{"field": "date", "message": "Delivery is not available on Sundays"}],
            )

    def create_purchase(
        self,
        session: Session,
        user: User,
        payload: PurchaseCreate,
    ) -> PurchaseRead:
        self._validate_delivery_date(payload.delivery_date)

        purchase = Purchase(
            user_id=user.id,
            username=user.name,
            delivery_date=payload.delivery_date,
            delivery_time=payload.delivery_time,
            delivery_location=payload.delivery_location,
            product_name=payload.product_name,
            quantity=payload.quantity,
            message=payload.message,
            status="pending",
        )
        purchase = self.repo.create(session, purchase)
        logger.info("Purchase %s requested by %s", purchase.id, user.id)
        return to_purchase_read(purchase)

    def list_mine(self, session: Session, user: User) -> list[PurchaseRead]:
        return [to_purchase_read(p) for p in self.repo.list_for_user(session, user.id)]

    def list_for_username(
        self, session: Session, user: User, username: str
    ) -> list[PurchaseRead]:
        """
        Purchases filed under a username: the user's own, or anyone's for admins.
        """
        if username != user.name:
            authorize(user, Action.LIST_ALL)
        return [
            to_purchase_read(p) for p in self.repo.list_for_username(session, username)
        ]

    def list_all(self, session: Session, user: User) -> list[PurchaseRead]:
        authorize(user, Action.LIST_ALL)
        return [to_purchase_read(p) for p in self.repo.list_all(session)]

    def update_status(
        self,
        session: Session,
        user: User,
        purchase_id: uuid.UUID,
        payload: PurchaseStatusUpdate,
    ) -> PurchaseRead:
        purchase = self.repo.get_by_id(session, purchase_id)
        if not purchase:
            raise NotFoundError("Purchase not found")
        authorize(user, Action.UPDATE_STATUS, purchase)

        purchase.status = payload.status
        purchase.updated_at = datetime.now(timezone.utc)
        return to_purchase_read(self.repo.update(session, purchase))

    def delete_purchase(self, session: Session, user: User, purchase_id: uuid.UUID) -> None:
        authorize(user, Action.MANAGE_PURCHASES)
        purchase = self.repo.get_by_id(session, purchase_id)
        if not purchase:
            raise NotFoundError("Purchase not found")
        self.repo.delete(session, purchase)
        logger.info("Purchase %s deleted by %s", purchase_id, user.id)

    def stats(self, session: Session, user: User) -> PurchaseStats:
        """
        Store-wide counters for admins, the caller's own for everyone else.
        "Completed" means delivered.
        """
        if user.role == "admin":
            return PurchaseStats(
                role="admin",
                total_purchases=self.repo.count(session),
                unique_users=self.repo.count_users(session),
                pending_purchases=self.repo.count(session, status="pending"),
                completed_purchases=self.repo.count(session, status="delivered"),
            )
        return PurchaseStats(
            role="user",
            my_purchases=self.repo.count(session, user_id=user.id),
            pending_purchases=self.repo.count(session, user_id=user.id, status="pending"),
            completed_purchases=self.repo.count(
                session, user_id=user.id, status="delivered"
            ),
        )
