import os
import uuid
from datetime import datetime, timedelta, timezone

# Settings are read (and cached) on first import of the app.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("AUTH_JWT_SECRET", "test-secret")

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlmodel import Session

from app.database import build_engine, create_db_and_tables, get_session
from app.main import app
from app.models.product import Product
from app.models.user import User
from app.repositories.cart_repo import CartRepository
from app.repositories.order_repo import OrderRepository
from app.repositories.product_repo import ProductRepository
from app.services.cart_service import CartService
from app.services.checkout_service import CheckoutService
from app.services.inventory_service import InventoryLedger
from app.services.order_service import OrderService


@pytest.fixture
def engine(tmp_path):
    # File-backed so several threads can use separate connections.
    eng = build_engine(f"sqlite:///{tmp_path / 'test.db'}")
    create_db_and_tables(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as s:
        yield s


@pytest.fixture
def client(engine):
    def _get_session():
        with Session(engine) as s:
            yield s

    app.dependency_overrides[get_session] = _get_session
    yield TestClient(app)
    app.dependency_overrides.clear()


# ---- factories ----


@pytest.fixture
def make_user(session):
    def _make(user_id: str | None = None, role: str = "user", name: str | None = None) -> User:
        user_id = user_id or f"user-{uuid.uuid4().hex[:8]}"
        user = User(
            id=user_id,
            email=f"{user_id}@example.com",
            name=name or user_id,
            role=role,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make


@pytest.fixture
def make_product(session):
    def _make(
        name: str = "Widget",
        stock: int = 10,
        price: float = 10.0,
        is_active: bool = True,
    ) -> Product:
        product = Product(
            name=name,
            slug=f"{name.lower().replace(' ', '-')}-{uuid.uuid4().hex[:6]}",
            price=price,
            stock_on_hand=stock,
            is_active=is_active,
        )
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    return _make


@pytest.fixture
def stock_of(session):
    def _stock(product_id: uuid.UUID) -> int:
        session.expire_all()
        return session.get(Product, product_id).stock_on_hand

    return _stock


@pytest.fixture
def address():
    return {
        "firstName": "Ada",
        "lastName": "Lovelace",
        "email": "ada@example.com",
        "phone": "+1 555 0100",
        "address": "12 Analytical Row",
        "city": "London",
        "district": "Camden",
        "postalCode": "NW1",
    }


# ---- services ----


@pytest.fixture
def ledger():
    return InventoryLedger(ProductRepository())


@pytest.fixture
def cart_service():
    return CartService(CartRepository(), ProductRepository())


@pytest.fixture
def checkout_service(ledger):
    return CheckoutService(CartRepository(), OrderRepository(), ledger)


@pytest.fixture
def order_service(ledger):
    return OrderService(OrderRepository(), ledger)


# ---- auth ----


def make_token(sub: str, role: str | None = None, **claims) -> str:
    payload = {
        "sub": sub,
        "email": f"{sub}@example.com",
        "exp": datetime.now(timezone.utc) + timedelta(hours=1),
        **claims,
    }
    if role is not None:
        payload["role"] = role
    return jwt.encode(payload, os.environ["AUTH_JWT_SECRET"], algorithm="HS256")


@pytest.fixture
def auth_headers():
    def _headers(sub: str = "alice", role: str | None = None) -> dict[str, str]:
        return {"Authorization": f"Bearer {make_token(sub, role=role)}"}

    return _headers
