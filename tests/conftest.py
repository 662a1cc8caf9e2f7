"""
Shared fixtures for the API and unit tests.

The settings object is built at import time, so the database URL and the
storage directory are pointed at a throw-away folder before any backend
module is imported.
"""
import itertools
import os
import tempfile
from pathlib import Path

_TMP = Path(tempfile.mkdtemp(prefix="shoppos-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP / 'test.db'}"
os.environ["STORAGE_DIR"] = str(_TMP / "storage")
os.environ["SECRET_KEY"] = "test-secret"
os.environ["POS_TAX_RATE"] = "0.07"
os.environ["LOYALTY_POINTS_PER_100"] = "1"

import pytest
from fastapi.testclient import TestClient

from database import Base, SessionLocal, engine
from main import app
from models.users import User
from utils.hashing import get_password_hash
from utils.tokenJWT import create_access_token

PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def reset_db():
    """Every test starts from empty tables."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def _create_user(email: str, role: str) -> User:
    session = SessionLocal()
    try:
        user = User(email=email, password_hash=get_password_hash(PASSWORD),
                    name=role.title(), role=role, active=True)
        session.add(user)
        session.commit()
        session.refresh(user)
        session.expunge(user)
        return user
    finally:
        session.close()


def _client_for(user: User) -> TestClient:
    token = create_access_token({"sub": user.email, "role": user.role})
    return TestClient(app, headers={"Authorization": f"Bearer {token}"})


@pytest.fixture
def client():
    """Client without credentials."""
    return TestClient(app)


@pytest.fixture
def admin_user():
    return _create_user("admin@example.com", "admin")


@pytest.fixture
def manager_user():
    return _create_user("manager@example.com", "manager")


@pytest.fixture
def cashier_user():
    return _create_user("cashier@example.com", "cashier")


@pytest.fixture
def admin_client(admin_user):
    return _client_for(admin_user)


@pytest.fixture
def manager_client(manager_user):
    return _client_for(manager_user)


@pytest.fixture
def cashier_client(cashier_user):
    return _client_for(cashier_user)


@pytest.fixture
def make_category(admin_client):
    counter = itertools.count(1)

    def _make(**overrides):
        data = {"name": f"Category {next(counter)}"}
        data.update(overrides)
        resp = admin_client.post("/api/categories", json=data)
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make


@pytest.fixture
def make_product(admin_client):
    """Creates a product through the API; price 100, cost 60, 10 in stock unless overridden."""
    counter = itertools.count(1)

    def _make(**overrides):
        n = next(counter)
        data = {
            "name": f"Product {n}",
            "sku": f"SKU-{n}",
            "price": 100.0,
            "cost": 60.0,
            "stock_quantity": 10,
            "alert_threshold": 2,
        }
        data.update(overrides)
        resp = admin_client.post("/api/products", json=data)
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make


@pytest.fixture
def make_customer(admin_client):
    counter = itertools.count(1)

    def _make(**overrides):
        n = next(counter)
        data = {"name": f"Customer {n}", "phone": f"98765000{n:02d}"}
        data.update(overrides)
        resp = admin_client.post("/api/customers", json=data)
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make


@pytest.fixture
def make_supplier(admin_client):
    counter = itertools.count(1)

    def _make(**overrides):
        data = {"name": f"Supplier {next(counter)}", "phone": "0201234567"}
        data.update(overrides)
        resp = admin_client.post("/api/suppliers", json=data)
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make


@pytest.fixture
def make_offer(admin_client):
    def _make(**overrides):
        data = {"name": "Offer", "offer_type": "percentage", "discount_value": 10}
        data.update(overrides)
        resp = admin_client.post("/api/offers", json=data)
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make


def stock_of(client: TestClient, product_id: int) -> int:
    resp = client.get(f"/api/products/{product_id}")
    assert resp.status_code == 200, resp.text
    return resp.json()["stock_quantity"]


@pytest.fixture
def product_stock(admin_client):
    return lambda product_id: stock_of(admin_client, product_id)
