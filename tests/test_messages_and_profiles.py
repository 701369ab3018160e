import pytest
from fastapi.testclient import TestClient

from app import app
from conftest import auth_headers, create_user, fetch_all, override_get_db
from core.get_db import get_db_async
from models.enums import UserRole
from models.models import Message, StudentProfile

client = TestClient(app)


@pytest.fixture(autouse=True)
def clean_overrides():
    app.dependency_overrides[get_db_async] = override_get_db
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def users():
    student_id = create_user("student@test.com")
    landlord_id = create_user("ll@test.com", role=UserRole.LANDLORD)
    return {
        "student_id": student_id,
        "landlord_id": landlord_id,
        "student": auth_headers(client, "student@test.com"),
        "landlord": auth_headers(client, "ll@test.com"),
    }


def test_conversation_is_chronological(users):
    client.post(
        "/api/messages/",
        json={"receiver_id": users["landlord_id"], "content": " Is it still free? "},
        headers=users["student"],
    )
    client.post(
        "/api/messages/",
        json={"receiver_id": users["student_id"], "content": "Yes"},
        headers=users["landlord"],
    )

    thread = client.get(
        f"/api/messages/users/{users['landlord_id']}", headers=users["student"]
    ).json()["data"]

    assert [m["content"] for m in thread] == ["Is it still free?", "Yes"]
    inbox = client.get("/api/messages/", headers=users["landlord"]).json()["data"]
    assert len(inbox) == 2


def test_cannot_message_yourself(users):
    response = client.post(
        "/api/messages/",
        json={"receiver_id": users["student_id"], "content": "Hi me"},
        headers=users["student"],
    )

    assert response.status_code == 400
    assert fetch_all(Message) == []


def test_message_to_missing_user(users):
    response = client.post(
        "/api/messages/",
        json={"receiver_id": 999, "content": "Hello"},
        headers=users["student"],
    )

    assert response.status_code == 404


def test_only_receiver_marks_read(users):
    message_id = client.post(
        "/api/messages/",
        json={"receiver_id": users["landlord_id"], "content": "Hello"},
        headers=users["student"],
    ).json()["data"]["id"]

    sender = client.patch(f"/api/messages/{message_id}/read", headers=users["student"])
    receiver = client.patch(f"/api/messages/{message_id}/read", headers=users["landlord"])

    assert sender.status_code == 403
    assert receiver.json()["data"]["is_read"] is True


def test_student_profile_lifecycle(users):
    created = client.post(
        "/api/student-profiles/",
        json={"institution": "UNZA", "student_id_number": "2021001", "study_level": "Year 2"},
        headers=users["student"],
    )
    duplicate = client.post(
        "/api/student-profiles/", json={"institution": "CBU"}, headers=users["student"]
    )

    assert created.status_code == 201
    assert duplicate.status_code == 409
    assert duplicate.json()["detail"] == "Student profile already exists"

    me = client.get("/api/student-profiles/me", headers=users["student"]).json()["data"]
    assert me["institution"] == "UNZA"

    updated = client.put(
        f"/api/student-profiles/{me['id']}",
        json={"preferences": {"max_rent": 1500}},
        headers=users["student"],
    )
    assert updated.json()["data"]["preferences"] == {"max_rent": 1500}

    forbidden = client.get(f"/api/student-profiles/{me['id']}", headers=users["landlord"])
    assert forbidden.status_code == 403

    client.delete(f"/api/student-profiles/{me['id']}", headers=users["student"])
    assert fetch_all(StudentProfile) == []


def test_student_id_number_must_be_digits(users):
    response = client.post(
        "/api/student-profiles/",
        json={"student_id_number": "AB-12"},
        headers=users["student"],
    )

    assert response.status_code == 400


def test_landlords_cannot_create_student_profiles(users):
    response = client.post(
        "/api/student-profiles/", json={"institution": "UNZA"}, headers=users["landlord"]
    )

    assert response.status_code == 403
