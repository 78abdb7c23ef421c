from datetime import date, timedelta

import pytest

from app.core.errors import AuthorizationError, NotFoundError, ValidationError
from app.repositories.purchase_repo import PurchaseRepository
from app.schemas.purchase import PurchaseCreate, PurchaseStatusUpdate
from app.services.purchase_service import PurchaseService

API = "/api/v1"


def _next_weekday(weekday: int) -> date:
    today = date.today()
    return today + timedelta(days=(weekday - today.weekday()) % 7 or 7)


@pytest.fixture
def purchase_service():
    return PurchaseService(PurchaseRepository())


def _payload(delivery_date: date, **overrides) -> PurchaseCreate:
    body = {
        "date": delivery_date.isoformat(),
        "deliveryTime": "10 AM",
        "deliveryLocation": "Kandy",
        "productName": "Laptop",
        "quantity": 2,
        "message": " ring twice ",
    }
    body.update(overrides)
    return PurchaseCreate.model_validate(body)


def test_create_purchase(session, purchase_service, make_user):
    user = make_user(name="alice")
    purchase = purchase_service.create_purchase(session, user, _payload(_next_weekday(0)))

    assert purchase.username == "alice"
    assert purchase.status == "pending"
    assert purchase.message == "ring twice"
    assert purchase.delivery_date.weekday() == 0


def test_sunday_and_past_dates_rejected(session, purchase_service, make_user):
    user = make_user()

    with pytest.raises(ValidationError) as exc:
        purchase_service.create_purchase(session, user, _payload(_next_weekday(6)))
    assert exc.value.errors[0]["field"] == "date"

    with pytest.raises(ValidationError):
        purchase_service.create_purchase(
            session, user, _payload(date.today() - timedelta(days=1))
        )


def test_listing_by_username(session, purchase_service, make_user):
    admin = make_user(role="admin")
    alice = make_user(name="alice")
    bob = make_user(name="bob")
    purchase_service.create_purchase(session, alice, _payload(_next_weekday(1)))
    purchase_service.create_purchase(session, bob, _payload(_next_weekday(2)))

    assert len(purchase_service.list_for_username(session, alice, "alice")) == 1
    assert len(purchase_service.list_for_username(session, admin, "bob")) == 1
    assert len(purchase_service.list_all(session, admin)) == 2
    with pytest.raises(AuthorizationError):
        purchase_service.list_for_username(session, alice, "bob")


def test_status_update_is_admin_only(session, purchase_service, make_user):
    admin = make_user(role="admin")
    alice = make_user()
    purchase = purchase_service.create_purchase(session, alice, _payload(_next_weekday(3)))

    with pytest.raises(AuthorizationError):
        purchase_service.update_status(
            session, alice, purchase.id, PurchaseStatusUpdate(status="confirmed")
        )
    updated = purchase_service.update_status(
        session, admin, purchase.id, PurchaseStatusUpdate(status="confirmed")
    )
    assert updated.status == "confirmed"


def test_purchase_endpoints(client, auth_headers):
    headers = auth_headers("alice")
    body = {
        "date": _next_weekday(4).isoformat(),
        "deliveryTime": "11 AM",
        "deliveryLocation": "Galle",
        "productName": "Camera",
        "quantity": 1,
    }

    resp = client.post(f"{API}/purchases", json=body, headers=headers)
    assert resp.status_code == 201
    assert resp.json()["date"] == body["date"]

    resp = client.post(
        f"{API}/purchases", json={**body, "deliveryLocation": "Atlantis"}, headers=headers
    )
    assert resp.status_code == 400

    mine = client.get(f"{API}/purchases/me", headers=headers).json()
    assert [p["productName"] for p in mine] == ["Camera"]


def test_delete_is_admin_only(session, purchase_service, make_user):
    admin = make_user(role="admin")
    alice = make_user()
    purchase = purchase_service.create_purchase(session, alice, _payload(_next_weekday(1)))

    with pytest.raises(AuthorizationError) as exc:
        purchase_service.delete_purchase(session, alice, purchase.id)
    assert exc.value.message == "Admin access required"

    purchase_service.delete_purchase(session, admin, purchase.id)
    assert purchase_service.list_mine(session, alice) == []
    with pytest.raises(NotFoundError):
        purchase_service.delete_purchase(session, admin, purchase.id)


def test_stats_are_scoped_by_role(session, purchase_service, make_user):
    admin = make_user(role="admin")
    alice = make_user()
    bob = make_user()
    first = purchase_service.create_purchase(session, alice, _payload(_next_weekday(1)))
    purchase_service.create_purchase(session, alice, _payload(_next_weekday(2)))
    purchase_service.create_purchase(session, bob, _payload(_next_weekday(3)))
    purchase_service.update_status(
        session, admin, first.id, PurchaseStatusUpdate(status="delivered")
    )

    overall = purchase_service.stats(session, admin)
    assert overall.role == "admin"
    assert overall.total_purchases == 3
    assert overall.unique_users == 2
    assert overall.pending_purchases == 2
    assert overall.completed_purchases == 1

    mine = purchase_service.stats(session, alice)
    assert mine.role == "user"
    assert mine.my_purchases == 2
    assert mine.pending_purchases == 1
    assert mine.completed_purchases == 1
    assert mine.total_purchases is None


def test_stats_and_delete_endpoints(client, auth_headers):
    alice = auth_headers("alice")
    admin = auth_headers("root", role="admin")
    body = {
        "date": _next_weekday(2).isoformat(),
        "deliveryTime": "12 PM",
        "deliveryLocation": "Matara",
        "productName": "Mouse",
        "quantity": 1,
    }
    purchase = client.post(f"{API}/purchases", json=body, headers=alice).json()

    assert client.get(f"{API}/purchases/stats", headers=alice).json() == {
        "role": "user",
        "myPurchases": 1,
        "pendingPurchases": 1,
        "completedPurchases": 0,
    }
    stats = client.get(f"{API}/purchases/stats", headers=admin).json()
    assert stats["totalPurchases"] == 1
    assert stats["uniqueUsers"] == 1

    resp = client.delete(f"{API}/purchases/{purchase['id']}", headers=alice)
    assert resp.status_code == 403

    resp = client.delete(f"{API}/purchases/{purchase['id']}", headers=admin)
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "message": "Purchase deleted successfully"}
    assert client.get(f"{API}/purchases/me", headers=alice).json() == []
