from datetime import timedelta

import pytest

from accounts_api.core.exceptions import ValidationError
from accounts_api.core.security import create_access_token, parse_duration
from accounts_api.models import AuditLog
from accounts_api.services.audit_service import AuditAction
from accounts_api.services.user_service import validate_password
from conftest import TEST_PASSWORD

SIGNUP = {
    "email": "Jane.Doe@Example.com",
    "password": "abc123",
    "first_name": "Jane",
    "last_name": "Doe",
}


def test_signup_returns_token_and_user(client, db):
    response = client.post("/api/auth/signup", json=SIGNUP)
    assert response.status_code == 201, response.text
    body = response.json()
    assert body["success"] is True
    assert body["token"]
    assert body["user"]["email"] == "jane.doe@example.com"
    assert body["user"]["role"] == "user"

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['token']}"})
    assert me.status_code == 200
    assert me.json()["first_name"] == "Jane"

    db.expire_all()
    assert db.query(AuditLog).filter(AuditLog.action == AuditAction.USER_CREATED).count() == 1


def test_register_alias(client):
    response = client.post("/api/auth/register", json=SIGNUP)
    assert response.status_code == 201


def test_duplicate_signup_conflicts(client, db):
    assert client.post("/api/auth/signup", json=SIGNUP).status_code == 201
    response = client.post("/api/auth/signup", json=SIGNUP)
    assert response.status_code == 409
    assert response.json()["error"] == "ConflictError"

    db.expire_all()
    failures = db.query(AuditLog).filter(AuditLog.status == "failure").all()
    assert [log.action for log in failures] == [AuditAction.USER_CREATED]


@pytest.mark.parametrize("password", ["abc", "abcdefgh", "12345678", "a1" * 26])
def test_signup_rejects_weak_passwords(client, password):
    response = client.post("/api/auth/signup", json={**SIGNUP, "password": password})
    assert response.status_code == 400
    assert response.json()["error"] == "ValidationError"


def test_signup_rejects_invalid_email(client):
    response = client.post("/api/auth/signup", json={**SIGNUP, "email": "not-an-email"})
    assert response.status_code == 400
    assert response.json()["message"] == "Validation failed"
    assert response.json()["errors"][0]["field"] == "email"


def test_login(client, regular_user):
    response = client.post("/api/auth/login", json={"email": regular_user.email, "password": TEST_PASSWORD})
    assert response.status_code == 200, response.text
    body = response.json()
    assert body["message"] == "Login successful"
    assert body["user"]["last_login"] is not None


def test_login_with_wrong_password(client, regular_user, db):
    response = client.post("/api/auth/login", json={"email": regular_user.email, "password": "wrong999"})
    assert response.status_code == 401
    assert response.json() == {"success": False, "message": "Invalid credentials"}

    db.expire_all()
    assert db.query(AuditLog).filter(AuditLog.action == AuditAction.LOGIN_FAILED).count() == 1


def test_login_to_disabled_account(client, regular_user, db):
    regular_user.is_active = False
    db.commit()

    response = client.post("/api/auth/login", json={"email": regular_user.email, "password": TEST_PASSWORD})
    assert response.status_code == 403


def test_logout(client, auth_headers, db):
    response = client.post("/api/auth/logout", headers=auth_headers)
    assert response.status_code == 200

    db.expire_all()
    assert db.query(AuditLog).filter(AuditLog.action == AuditAction.LOGOUT).count() == 1


def test_missing_token_is_unauthorized(client):
    response = client.get("/api/parties")
    assert response.status_code == 401
    assert response.json()["message"] == "Access token required"


def test_invalid_token_is_forbidden(client):
    response = client.get("/api/parties", headers={"Authorization": "Bearer not.a.token"})
    assert response.status_code == 403
    assert response.json()["message"] == "Invalid or expired token"


def test_expired_token_is_forbidden(client, regular_user):
    token = create_access_token(
        {"userId": regular_user.id, "email": regular_user.email, "role": regular_user.role},
        expires_delta=timedelta(seconds=-1)
    )
    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 403


def test_token_for_deleted_user(client, regular_user, db):
    token = create_access_token({"userId": 9999, "email": "ghost@example.com", "role": "user"})
    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_admin_only_route(client, auth_headers, admin_headers, accounts):
    denied = client.delete(f"/api/chart-of-accounts/{accounts['cash']}", headers=auth_headers)
    assert denied.status_code == 403
    assert denied.json()["message"] == "Insufficient permissions"

    allowed = client.delete(f"/api/chart-of-accounts/{accounts['cash']}", headers=admin_headers)
    assert allowed.status_code == 200


def test_profile_update(client, auth_headers, regular_user):
    profile = client.get("/api/profile/me", headers=auth_headers).json()
    assert profile["email"] == regular_user.email
    assert profile["phone"] is None

    updated = client.put(
        "/api/profile/me",
        json={"first_name": "  Ada ", "phone": "+234 800 000 0000", "company": "Booklet Ltd", "email": "Ada@Example.com"},
        headers=auth_headers
    )
    assert updated.status_code == 200, updated.text
    body = updated.json()
    assert body["first_name"] == "Ada"
    assert body["email"] == "ada@example.com"
    assert body["company"] == "Booklet Ltd"
    assert client.get("/api/profile/me", headers=auth_headers).json()["phone"] == "+234 800 000 0000"


def test_profile_email_must_stay_unique(client, auth_headers, admin_user):
    response = client.put("/api/profile/me", json={"email": admin_user.email}, headers=auth_headers)
    assert response.status_code == 409


def test_profile_update_needs_fields(client, auth_headers):
    response = client.put("/api/profile/me", json={}, headers=auth_headers)
    assert response.status_code == 400
    assert response.json()["message"] == "No fields to update"


def test_health_is_public(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "OK"


@pytest.mark.parametrize("value,expected", [
    ("7d", timedelta(days=7)),
    ("12h", timedelta(hours=12)),
    ("30m", timedelta(minutes=30)),
    ("45s", timedelta(seconds=45)),
    ("3600", timedelta(seconds=3600)),
])
def test_parse_duration(value, expected):
    assert parse_duration(value) == expected


def test_parse_duration_rejects_garbage():
    with pytest.raises(ValueError):
        parse_duration("soon")


def test_validate_password():
    validate_password("abc123")
    with pytest.raises(ValidationError):
        validate_password("abcdef")
