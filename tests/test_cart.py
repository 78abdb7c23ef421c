import uuid

import pytest

from app.core.errors import (
    AuthorizationError,
    CapacityError,
    NotFoundError,
    ValidationError,
)
from app.schemas.cart import CartItemCreate, CartItemUpdate


def test_empty_cart_is_not_persisted(session, cart_service, make_user):
    user = make_user()
    summary = cart_service.get_cart_summary(session, user)
    assert summary.items == []
    assert summary.total == 0
    assert cart_service.cart_repo.get_for_user(session, user.id) is None


def test_add_snapshots_product(session, cart_service, make_user, make_product):
    user = make_user()
    product = make_product(name="Lamp", price=12.5)

    summary = cart_service.add_to_cart(
        session, user, CartItemCreate(product_id=product.id, quantity=2)
    )

    assert summary.total_items == 2
    assert summary.total == 25.0
    line = summary.items[0]
    assert line.product_name == "Lamp"
    assert line.price == 12.5
    assert line.line_total == 25.0


def test_adding_same_product_merges_lines(session, cart_service, make_user, make_product):
    user = make_user()
    product = make_product()

    cart_service.add_to_cart(session, user, CartItemCreate(product_id=product.id, quantity=2))
    summary = cart_service.add_to_cart(
        session, user, CartItemCreate(product_id=product.id, quantity=3)
    )

    assert len(summary.items) == 1
    assert summary.items[0].quantity == 5


def test_sum_above_cap_is_rejected(session, cart_service, make_user, make_product):
    user = make_user()
    product = make_product(stock=500)

    cart_service.add_to_cart(session, user, CartItemCreate(product_id=product.id, quantity=60))
    with pytest.raises(CapacityError):
        cart_service.add_to_cart(
            session, user, CartItemCreate(product_id=product.id, quantity=50)
        )

    summary = cart_service.get_cart_summary(session, user)
    assert summary.items[0].quantity == 60


@pytest.mark.parametrize("quantity", [0, -1, 101])
def test_add_quantity_out_of_bounds(session, cart_service, make_user, make_product, quantity):
    user = make_user()
    product = make_product()
    with pytest.raises(ValidationError):
        cart_service.add_to_cart(
            session, user, CartItemCreate(product_id=product.id, quantity=quantity)
        )


def test_add_unknown_or_inactive_product(session, cart_service, make_user, make_product):
    user = make_user()
    with pytest.raises(NotFoundError):
        cart_service.add_to_cart(session, user, CartItemCreate(product_id=uuid.uuid4()))

    hidden = make_product(is_active=False)
    with pytest.raises(ValidationError):
        cart_service.add_to_cart(session, user, CartItemCreate(product_id=hidden.id))


def test_update_quantity_and_zero_removes(session, cart_service, make_user, make_product):
    user = make_user()
    product = make_product()
    summary = cart_service.add_to_cart(
        session, user, CartItemCreate(product_id=product.id, quantity=1)
    )
    item_id = summary.items[0].id

    summary = cart_service.update_quantity(session, user, item_id, CartItemUpdate(quantity=7))
    assert summary.items[0].quantity == 7

    with pytest.raises(ValidationError):
        cart_service.update_quantity(session, user, item_id, CartItemUpdate(quantity=101))

    summary = cart_service.update_quantity(session, user, item_id, CartItemUpdate(quantity=0))
    assert summary.items == []


def test_remove_and_clear(session, cart_service, make_user, make_product):
    user = make_user()
    a = make_product(name="A")
    b = make_product(name="B")
    cart_service.add_to_cart(session, user, CartItemCreate(product_id=a.id))
    summary = cart_service.add_to_cart(session, user, CartItemCreate(product_id=b.id))

    summary = cart_service.remove_item(session, user, summary.items[0].id)
    assert len(summary.items) == 1

    with pytest.raises(NotFoundError):
        cart_service.remove_item(session, user, uuid.uuid4())

    summary = cart_service.clear_cart(session, user)
    assert summary.items == []
    assert summary.total_items == 0


def test_missing_cart_for_update(session, cart_service, make_user):
    user = make_user()
    with pytest.raises(NotFoundError):
        cart_service.update_quantity(session, user, uuid.uuid4(), CartItemUpdate(quantity=2))


def test_guest_cannot_mutate(session, cart_service, make_product):
    product = make_product()
    with pytest.raises(AuthorizationError):
        cart_service.add_to_cart(session, None, CartItemCreate(product_id=product.id))
