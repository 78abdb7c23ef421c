# app/routers/purchases.py
import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.core.auth import require_auth
from app.database import get_session
from app.models.user import User
from app.repositories.purchase_repo import PurchaseRepository
from app.schemas.common import MessageResponse
from app.schemas.purchase import (
    PurchaseCreate,
    PurchaseRead,
    PurchaseStats,
    PurchaseStatusUpdate,
)
from app.services.purchase_service import PurchaseService

router = APIRouter(prefix="/purchases", tags=["Purchases"])

repo = PurchaseRepository()
service = PurchaseService(repo)


@router.post("", response_model=PurchaseRead, status_code=status.HTTP_201_CREATED)
def create_purchase(
    payload: PurchaseCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    File a purchase request for delivery on a given date and time slot.
    Sundays and past dates are rejected.
    """
    return service.create_purchase(session, current_user, payload)


@router.get("/me", response_model=list[PurchaseRead])
def list_my_purchases(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    return service.list_mine(session, current_user)


@router.get("", response_model=list[PurchaseRead])
def list_all_purchases(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    List every purchase request (admin only).
    """
    return service.list_all(session, current_user)


@router.get("/stats", response_model=PurchaseStats, response_model_exclude_none=True)
def purchase_stats(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Purchase counters: store-wide for admins, your own otherwise.
    """
    return service.stats(session, current_user)


@router.get("/user/{username}", response_model=list[PurchaseRead])
def list_purchases_for_username(
    username: str,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    return service.list_for_username(session, current_user, username)


@router.put("/{purchase_id}/status", response_model=PurchaseRead)
def update_purchase_status(
    purchase_id: uuid.UUID,
    payload: PurchaseStatusUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Move a purchase request to a new status (admin only).
    """
    return service.update_status(session, current_user, purchase_id, payload)


@router.delete("/{purchase_id}", response_model=MessageResponse)
def delete_purchase(
    purchase_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    service.delete_purchase(session, current_user, purchase_id)
    return MessageResponse(message="Purchase deleted successfully")
