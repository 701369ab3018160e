import pytest
from fastapi.testclient import TestClient

from app import app
from conftest import auth_headers, create_user, fetch_all, override_get_db
from core.get_db import get_db_async
from models.enums import UserRole
from models.models import User

client = TestClient(app)


@pytest.fixture(autouse=True)
def clean_overrides():
    app.dependency_overrides[get_db_async] = override_get_db
    yield
    app.dependency_overrides.clear()


def register_payload(email="student@test.com", role="student"):
    return {
        "email": email,
        "password": "password123",
        "first_name": "Mwila",
        "last_name": "Banda",
        "role": role,
    }


def test_register_student_is_approved():
    response = client.post("/api/auth/register", json=register_payload())

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["user"]["email"] == "student@test.com"
    assert body["user"]["approved"] is True
    assert "hashed_password" not in body["user"]


def test_register_normalizes_email():
    response = client.post(
        "/api/auth/register", json=register_payload(email="  Mixed@Test.COM ")
    )

    assert response.status_code == 201
    assert response.json()["user"]["email"] == "mixed@test.com"


def test_register_duplicate_email_returns_409():
    first = client.post("/api/auth/register", json=register_payload())
    second = client.post(
        "/api/auth/register", json=register_payload(email="STUDENT@test.com")
    )

    assert first.status_code == 201
    assert second.status_code == 409
    assert second.json()["detail"] == "Email already exists"
    assert len(fetch_all(User, User.email == "student@test.com")) == 1


def test_register_rejects_admin_role():
    response = client.post("/api/auth/register", json=register_payload(role="admin"))

    assert response.status_code == 400
    assert response.json()["error"] == "Validation failed"


def test_register_short_password_is_validation_error():
    payload = register_payload()
    payload["password"] = "123"
    response = client.post("/api/auth/register", json=payload)

    assert response.status_code == 400
    assert response.json()["success"] is False
    assert any(d["loc"][-1] == "password" for d in response.json()["details"])


def test_login_returns_token_and_cookie():
    create_user("student@test.com")

    response = client.post(
        "/api/auth/login",
        json={"email": "student@test.com", "password": "password123"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["approved"] is True
    assert body["token"]
    assert "access_token" in response.cookies


def test_login_invalid_credentials():
    create_user("student@test.com")

    response = client.post(
        "/api/auth/login", json={"email": "student@test.com", "password": "wrong"}
    )

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid credentials"


def test_unapproved_landlord_gets_no_token():
    client.post("/api/auth/register", json=register_payload("ll@test.com", "landlord"))

    response = client.post(
        "/api/auth/login", json={"email": "ll@test.com", "password": "password123"}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["approved"] is False
    assert body["token"] is None
    assert body["message"].startswith("Your account is pending approval")


def test_admin_approves_landlord_then_login_succeeds():
    create_user("admin@test.com", role=UserRole.ADMIN)
    landlord_id = create_user("ll@test.com", role=UserRole.LANDLORD, approved=False)
    admin = auth_headers(client, "admin@test.com")

    pending = client.get("/api/auth/landlords/pending", headers=admin)
    assert [u["id"] for u in pending.json()["data"]] == [landlord_id]

    response = client.patch(
        f"/api/auth/landlords/{landlord_id}/approve",
        json={"approved": True},
        headers=admin,
    )
    assert response.status_code == 200
    assert response.json()["user"]["approved"] is True

    login = client.post(
        "/api/auth/login", json={"email": "ll@test.com", "password": "password123"}
    )
    assert login.json()["token"]


def test_non_admin_gets_403_on_admin_routes():
    create_user("student@test.com")
    headers = auth_headers(client, "student@test.com")

    for method, url in [
        ("get", "/api/auth/landlords/pending"),
        ("get", "/api/auth/stats/user-types"),
        ("get", "/api/users/"),
        ("get", "/api/properties/admin/all"),
        ("post", "/api/properties/batch-geocode"),
    ]:
        response = getattr(client, method)(url, headers=headers)
        assert response.status_code == 403, url
        assert response.json()["detail"] == "Admin access required"


def test_missing_and_invalid_tokens_are_401():
    assert client.get("/api/auth/check-auth").status_code == 401

    response = client.get(
        "/api/auth/check-auth", headers={"Authorization": "Bearer not-a-token"}
    )
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid token"


def test_check_auth_returns_current_user():
    create_user("student@test.com")
    headers = auth_headers(client, "student@test.com")

    response = client.get("/api/auth/check-auth", headers=headers)

    assert response.status_code == 200
    assert response.json()["user"]["email"] == "student@test.com"


def test_approval_status_is_public():
    create_user("ll@test.com", role=UserRole.LANDLORD, approved=False)

    response = client.get("/api/auth/approval-status/ll@test.com")

    assert response.status_code == 200
    assert response.json()["approved"] is False
    assert client.get("/api/auth/approval-status/nobody@test.com").status_code == 404


def test_user_type_stats():
    create_user("admin@test.com", role=UserRole.ADMIN)
    create_user("s1@test.com")
    create_user("s2@test.com")
    create_user("ll@test.com", role=UserRole.LANDLORD)
    headers = auth_headers(client, "admin@test.com")

    response = client.get("/api/auth/stats/user-types", headers=headers)

    assert response.json()["data"] == {"student": 2, "landlord": 1, "admin": 1}
    assert response.json()["total"] == 4


def test_user_can_update_self_but_not_others():
    me = create_user("me@test.com")
    other = create_user("other@test.com")
    headers = auth_headers(client, "me@test.com")

    ok = client.patch(f"/api/users/{me}", json={"first_name": "chanda"}, headers=headers)
    assert ok.status_code == 200
    assert ok.json()["data"]["first_name"] == "Chanda"

    denied = client.patch(
        f"/api/users/{other}", json={"first_name": "X" * 3}, headers=headers
    )
    assert denied.status_code == 403


def test_deleted_user_token_is_rejected():
    user_id = create_user("me@test.com")
    headers = auth_headers(client, "me@test.com")

    assert client.delete(f"/api/users/{user_id}", headers=headers).status_code == 200
    assert client.get("/api/auth/check-auth", headers=headers).status_code == 401
