import pytest
from fastapi.testclient import TestClient

from app import app
from conftest import (
    TestSessionLocal,
    auth_headers,
    create_user,
    fake_resolver,
    fetch_all,
    override_get_db,
)
from core.get_db import get_db_async
from geocoders.resolver import get_geocode_resolver
from models.enums import UserRole
from models.models import Inquiry, Notification, NotificationOutbox
from notifications.dispatcher import NotificationDispatcher, get_notification_dispatcher

client = TestClient(app)


@pytest.fixture(autouse=True)
def clean_overrides():
    dispatcher = NotificationDispatcher(session_factory=TestSessionLocal)
    app.dependency_overrides[get_db_async] = override_get_db
    app.dependency_overrides[get_geocode_resolver] = lambda: fake_resolver()
    app.dependency_overrides[get_notification_dispatcher] = lambda: dispatcher
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def setup():
    create_user("ll@test.com", role=UserRole.LANDLORD)
    student_id = create_user("student@test.com")
    landlord = auth_headers(client, "ll@test.com")
    student = auth_headers(client, "student@test.com")
    response = client.post(
        "/api/properties/",
        json={
            "title": "Shared room on Cairo Road",
            "property_type": "shared_room",
            "address": "Cairo Road, Lusaka",
            "monthly_rent": "650",
        },
        headers=landlord,
    )
    property_id = response.json()["data"]["id"]
    inquiry = client.post(
        "/api/inquiries/",
        json={"property_id": property_id, "message": "Is water included?"},
        headers=student,
    )
    return {
        "landlord": landlord,
        "student": student,
        "student_id": student_id,
        "property_id": property_id,
        "inquiry_id": inquiry.json()["data"]["id"],
    }


def test_create_inquiry_notifies_student(setup):
    inquiries = fetch_all(Inquiry)

    assert len(inquiries) == 1
    assert inquiries[0].status.value == "pending"
    assert inquiries[0].contact_preference.value == "any"
    created = fetch_all(Notification, Notification.type == "inquiry_created")
    assert len(created) == 1
    assert created[0].user_id == setup["student_id"]


def test_inquiry_for_missing_property(setup):
    response = client.post(
        "/api/inquiries/",
        json={"property_id": 999, "message": "Hello"},
        headers=setup["student"],
    )

    assert response.status_code == 404


def test_response_stamps_time_and_notifies(setup):
    response = client.put(
        f"/api/inquiries/{setup['inquiry_id']}",
        json={"status": "responded", "response_message": "Yes, water is included"},
        headers=setup["landlord"],
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "responded"
    assert data["responded_at"] is not None
    responded = fetch_all(Notification, Notification.type == "inquiry_responded")
    assert len(responded) == 1
    assert "Yes, water is included" in responded[0].content


def test_message_edit_sends_no_notification(setup):
    response = client.put(
        f"/api/inquiries/{setup['inquiry_id']}",
        json={"message": "Is water and power included?"},
        headers=setup["student"],
    )

    assert response.status_code == 200
    assert response.json()["data"]["message"] == "Is water and power included?"
    assert len(fetch_all(NotificationOutbox)) == 1


def test_student_cannot_change_status(setup):
    response = client.put(
        f"/api/inquiries/{setup['inquiry_id']}",
        json={"status": "closed"},
        headers=setup["student"],
    )

    assert response.status_code == 403


def test_delete_missing_inquiry_creates_no_notification(setup):
    response = client.delete("/api/inquiries/999", headers=setup["landlord"])

    assert response.status_code == 404
    assert fetch_all(Notification, Notification.type == "inquiry_deleted") == []
    assert len(fetch_all(NotificationOutbox)) == 1


def test_delete_inquiry(setup):
    response = client.delete(
        f"/api/inquiries/{setup['inquiry_id']}", headers=setup["student"]
    )

    assert response.status_code == 200
    assert fetch_all(Inquiry) == []
    assert len(fetch_all(Notification, Notification.type == "inquiry_deleted")) == 1


def test_property_inquiries_are_owner_only(setup):
    own = client.get(
        f"/api/inquiries/property/{setup['property_id']}", headers=setup["landlord"]
    )
    create_user("other@test.com", role=UserRole.LANDLORD)
    other = client.get(
        f"/api/inquiries/property/{setup['property_id']}",
        headers=auth_headers(client, "other@test.com"),
    )

    assert len(own.json()["data"]) == 1
    assert other.status_code == 403


def test_student_inquiries(setup):
    response = client.get(
        f"/api/inquiries/student/{setup['student_id']}", headers=setup["student"]
    )

    assert [i["id"] for i in response.json()["data"]] == [setup["inquiry_id"]]


def test_inquiry_notifications_endpoint(setup):
    body = client.get("/api/inquiries/notifications", headers=setup["student"]).json()

    assert [n["type"] for n in body["data"]] == ["inquiry_created"]
