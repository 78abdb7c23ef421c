import uuid

import pytest

from app.core.errors import AuthorizationError
from app.core.permissions import Action, authorize, is_allowed
from app.models.order import Order
from app.models.review import Review
from app.models.user import User


def _user(user_id, role="user"):
    return User(id=user_id, email=f"{user_id}@example.com", name=user_id, role=role)


def _order(owner_id):
    return Order(order_number="ORD-TEST-00001", user_id=owner_id)


def test_owner_may_read_and_cancel():
    alice = _user("alice")
    order = _order("alice")
    assert is_allowed(alice, Action.READ, order)
    assert is_allowed(alice, Action.CANCEL, order)
    assert not is_allowed(alice, Action.UPDATE_STATUS, order)


def test_stranger_is_denied():
    with pytest.raises(AuthorizationError) as exc:
        authorize(_user("bob"), Action.CANCEL, _order("alice"))
    assert exc.value.message == "You do not have access to this resource"


def test_admin_may_do_anything():
    admin = _user("root", role="admin")
    for action in Action:
        assert is_allowed(admin, action, _order("alice"))
        assert is_allowed(admin, action)


def test_admin_only_actions_without_resource():
    alice = _user("alice")
    assert is_allowed(alice, Action.CHECKOUT)
    assert is_allowed(alice, Action.MUTATE_CART)
    with pytest.raises(AuthorizationError) as exc:
        authorize(alice, Action.LIST_ALL)
    assert exc.value.message == "Admin access required"


def test_guest_is_denied():
    assert not is_allowed(None, Action.CHECKOUT)
    assert not is_allowed(None, Action.READ, _order("alice"))


def test_users_own_themselves():
    alice = _user("alice")
    assert is_allowed(alice, Action.READ, alice)
    assert not is_allowed(alice, Action.READ, _user("bob"))


def test_review_authoring_and_deletion():
    alice = _user("alice")
    review = Review(product_id=uuid.uuid4(), user_id="alice", username="alice", rating=5, comment="ok")
    assert is_allowed(alice, Action.WRITE_REVIEW)
    assert is_allowed(alice, Action.DELETE, review)
    assert not is_allowed(_user("bob"), Action.DELETE, review)
    with pytest.raises(AuthorizationError) as exc:
        authorize(alice, Action.MANAGE_PURCHASES)
    assert exc.value.message == "Admin access required"
