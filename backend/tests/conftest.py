"""
Shared fixtures: an in-memory database per test, an API client bound to it and
a handful of factories for the records most tests need.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("JWT_SECRET", "test-secret-for-the-accounts-api-suite-0123456789")

from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from accounts_api.core.database import get_db, init_db
from accounts_api.core.rate_limit import default_rate_limiter
from accounts_api.core.security import create_user_token, get_password_hash
from accounts_api.main import app
from accounts_api.models import ChartOfAccount, Role, User

TEST_PASSWORD = "secret123"


@pytest.fixture(scope="session")
def password_hash():
    return get_password_hash(TEST_PASSWORD)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def reset_rate_limits():
    default_rate_limiter.reset()
    yield
    default_rate_limiter.reset()


# ==================== USERS ====================

def _make_user(db, password_hash, email, role):
    user = User(
        email=email,
        password_hash=password_hash,
        first_name="Test",
        last_name=role.title(),
        role=role,
        is_active=True
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def admin_user(db, password_hash):
    return _make_user(db, password_hash, "admin@example.com", Role.ADMIN)


@pytest.fixture
def regular_user(db, password_hash):
    return _make_user(db, password_hash, "user@example.com", Role.USER)


@pytest.fixture
def admin_headers(admin_user):
    return {"Authorization": f"Bearer {create_user_token(admin_user)}"}


@pytest.fixture
def auth_headers(regular_user):
    return {"Authorization": f"Bearer {create_user_token(regular_user)}"}


# ==================== RECORD FACTORIES ====================

@pytest.fixture
def make_supplier(client, auth_headers):
    def factory(name="Acme Supplies", **fields):
        response = client.post(
            "/api/ap/suppliers",
            json={"supplier_name": name, **fields},
            headers=auth_headers
        )
        assert response.status_code == 201, response.text
        return response.json()
    return factory


@pytest.fixture
def make_customer(client, auth_headers):
    def factory(name="Globex Corporation", **fields):
        response = client.post(
            "/api/parties",
            json={"party_name": name, **fields},
            headers=auth_headers
        )
        assert response.status_code == 201, response.text
        return response.json()
    return factory


@pytest.fixture
def make_ap_invoice(client, auth_headers):
    def factory(supplier_id, unit_price="1000.00", tax_rate="10", **fields):
        payload = {
            "supplier_id": supplier_id,
            "invoice_date": date(2024, 1, 15).isoformat(),
            "status": "PENDING",
            "lines": [{"item_name": "Widgets", "quantity": "1", "unit_price": unit_price, "tax_rate": tax_rate}],
            **fields
        }
        response = client.post("/api/ap/invoices", json=payload, headers=auth_headers)
        assert response.status_code == 201, response.text
        return response.json()
    return factory


@pytest.fixture
def make_ap_payment(client, auth_headers):
    def factory(supplier_id, total_amount="500.00", **fields):
        payload = {
            "supplier_id": supplier_id,
            "payment_date": date(2024, 2, 1).isoformat(),
            "total_amount": total_amount,
            **fields
        }
        response = client.post("/api/ap/payments", json=payload, headers=auth_headers)
        assert response.status_code == 201, response.text
        return response.json()
    return factory


@pytest.fixture
def accounts(db):
    """Cash and revenue accounts for journal lines"""
    cash = ChartOfAccount(account_code="1000", account_name="Cash", account_type="ASSET")
    revenue = ChartOfAccount(account_code="4000", account_name="Sales Revenue", account_type="REVENUE")
    db.add_all([cash, revenue])
    db.commit()
    return {"cash": cash.id, "revenue": revenue.id}
