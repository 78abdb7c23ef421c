import pytest

from app.core.errors import AuthorizationError, NotFoundError
from app.repositories.user_repo import UserRepository
from app.schemas.user import UserRoleUpdate, UserUpdate
from app.services.user_service import UserService

API = "/api/v1"


@pytest.fixture
def user_service():
    return UserService(UserRepository())


def test_first_request_provisions_profile(client, auth_headers):
    resp = client.get(f"{API}/users/me", headers=auth_headers("alice"))

    assert resp.status_code == 200
    body = resp.json()
    assert body["id"] == "alice"
    assert body["email"] == "alice@example.com"
    assert body["name"] == "alice"
    assert body["role"] == "user"


def test_role_claim_sets_initial_role(client, auth_headers):
    resp = client.get(f"{API}/users/me", headers=auth_headers("root", role="admin"))
    assert resp.json()["role"] == "admin"


def test_profile_update(client, auth_headers):
    headers = auth_headers("alice")
    resp = client.patch(
        f"{API}/users/me",
        json={"name": "  Alice L. ", "contactNumber": "+44 20 7946 0000", "country": "UK"},
        headers=headers,
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["name"] == "Alice L."
    assert body["contactNumber"] == "+44 20 7946 0000"

    resp = client.patch(f"{API}/users/me", json={"email": "x@example.com"}, headers=headers)
    assert resp.status_code == 400


def test_role_management(session, user_service, make_user):
    admin = make_user(role="admin")
    alice = make_user()

    promoted = user_service.update_role(session, admin, alice.id, UserRoleUpdate(role="admin"))
    assert promoted.role == "admin"

    bob = make_user()
    with pytest.raises(AuthorizationError):
        user_service.update_role(session, bob, alice.id, UserRoleUpdate(role="user"))
    with pytest.raises(NotFoundError):
        user_service.update_role(session, admin, "ghost", UserRoleUpdate(role="user"))


def test_reading_other_users(session, user_service, make_user):
    admin = make_user(role="admin")
    alice = make_user()
    bob = make_user()

    assert user_service.get_user(session, alice, alice.id).id == alice.id
    assert user_service.get_user(session, admin, bob.id).id == bob.id
    with pytest.raises(AuthorizationError):
        user_service.get_user(session, alice, bob.id)
    with pytest.raises(AuthorizationError):
        user_service.list_users(session, alice, 0, 10)


def test_update_me_ignores_missing_fields(session, user_service, make_user):
    alice = make_user(name="Alice")
    updated = user_service.update_me(session, alice, UserUpdate(country="NZ"))
    assert updated.name == "Alice"
    assert updated.country == "NZ"
