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
from models.models import Booking, Notification, NotificationOutbox
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
            "title": "Room near CBU",
            "property_type": "single_room",
            "address": "Jambo Drive, Kitwe",
            "monthly_rent": "900",
        },
        headers=landlord,
    )
    return {
        "landlord": landlord,
        "student": student,
        "student_id": student_id,
        "property_id": response.json()["data"]["id"],
    }


def book(setup, **extra):
    payload = {"property_id": setup["property_id"], "move_in_date": "2027-01-15"}
    payload.update(extra)
    return client.post("/api/bookings/", json=payload, headers=setup["student"])


def test_student_booking_is_always_pending(setup):
    response = book(setup, status="approved")

    assert response.status_code == 201
    assert response.json()["data"]["status"] == "pending"
    created = fetch_all(Notification, Notification.user_id == setup["student_id"])
    assert [n.type for n in created] == ["booking_created"]


def test_landlord_cannot_create_booking(setup):
    response = client.post(
        "/api/bookings/",
        json={"property_id": setup["property_id"], "move_in_date": "2027-01-15"},
        headers=setup["landlord"],
    )

    assert response.status_code == 403


def test_booking_unavailable_property(setup):
    client.patch(
        f"/api/property-listing/{setup['property_id']}/unpublish",
        headers=setup["landlord"],
    )

    response = book(setup)

    assert response.status_code == 400
    assert fetch_all(Booking) == []


def test_approval_sends_one_status_notification(setup):
    booking_id = book(setup).json()["data"]["id"]

    response = client.put(
        f"/api/bookings/{booking_id}",
        json={"status": "approved"},
        headers=setup["landlord"],
    )

    assert response.status_code == 200
    assert response.json()["data"]["status"] == "approved"
    approved = fetch_all(Notification, Notification.type == "booking_approved")
    assert len(approved) == 1
    assert approved[0].user_id == setup["student_id"]
    assert f"#{setup['property_id']}" in approved[0].content
    assert "approved" in approved[0].content
    assert len(fetch_all(Notification, Notification.type == "booking_created")) == 1


def test_student_cannot_approve_own_booking(setup):
    booking_id = book(setup).json()["data"]["id"]

    response = client.put(
        f"/api/bookings/{booking_id}",
        json={"status": "approved"},
        headers=setup["student"],
    )

    assert response.status_code == 403
    assert fetch_all(Booking)[0].status.value == "pending"


def test_student_can_cancel(setup):
    booking_id = book(setup).json()["data"]["id"]

    response = client.put(
        f"/api/bookings/{booking_id}",
        json={"status": "cancelled"},
        headers=setup["student"],
    )

    assert response.json()["data"]["status"] == "cancelled"
    assert len(fetch_all(Notification, Notification.type == "booking_cancelled")) == 1


def test_null_update_fields_are_rejected(setup):
    booking_id = book(setup).json()["data"]["id"]

    codes = [
        client.put(
            f"/api/bookings/{booking_id}", json=body, headers=setup["landlord"]
        ).status_code
        for body in ({"move_in_date": None}, {"status": None}, {"move_in_date": None})
    ]

    assert codes == [400, 400, 400]
    response = client.put(
        f"/api/bookings/{booking_id}", json={"status": None}, headers=setup["landlord"]
    )
    assert response.json()["details"][0]["field"] == "status"
    booking = fetch_all(Booking)[0]
    assert booking.status.value == "pending"
    assert str(booking.move_in_date) == "2027-01-15"
    assert client.get("/api/property-listing/student-view").status_code == 200


def test_other_students_cannot_see_booking(setup):
    booking_id = book(setup).json()["data"]["id"]
    create_user("other@test.com")

    response = client.get(
        f"/api/bookings/{booking_id}", headers=auth_headers(client, "other@test.com")
    )

    assert response.status_code == 403


def test_list_bookings_by_role(setup):
    book(setup)
    create_user("other@test.com")

    mine = client.get("/api/bookings/", headers=setup["student"]).json()["data"]
    landlords = client.get("/api/bookings/", headers=setup["landlord"]).json()["data"]
    others = client.get(
        "/api/bookings/", headers=auth_headers(client, "other@test.com")
    ).json()["data"]

    assert len(mine) == 1
    assert len(landlords) == 1
    assert others == []


def test_delete_missing_booking_creates_no_outbox_entry(setup):
    response = client.delete("/api/bookings/999", headers=setup["landlord"])

    assert response.status_code == 404
    assert fetch_all(NotificationOutbox) == []


def test_delete_booking_notifies_student(setup):
    booking_id = book(setup).json()["data"]["id"]

    response = client.delete(f"/api/bookings/{booking_id}", headers=setup["landlord"])

    assert response.status_code == 200
    assert fetch_all(Booking) == []
    assert len(fetch_all(Notification, Notification.type == "booking_deleted")) == 1


def test_booking_notifications_endpoint(setup):
    booking_id = book(setup).json()["data"]["id"]
    client.put(
        f"/api/bookings/{booking_id}",
        json={"status": "rejected"},
        headers=setup["landlord"],
    )

    body = client.get("/api/bookings/notifications", headers=setup["student"]).json()

    assert {n["type"] for n in body["data"]} == {"booking_created", "booking_rejected"}
    assert body["unread_count"] == 2

    notification_id = body["data"][0]["id"]
    response = client.patch(
        f"/api/bookings/notifications/{notification_id}/read", headers=setup["student"]
    )
    assert response.status_code == 200
    assert (
        client.get("/api/bookings/notifications", headers=setup["student"]).json()[
            "unread_count"
        ]
        == 1
    )


def test_admin_books_for_student(setup):
    create_user("admin@test.com", role=UserRole.ADMIN)
    admin = auth_headers(client, "admin@test.com")

    payload = {"property_id": setup["property_id"], "move_in_date": "2027-01-15"}

    missing = client.post("/api/bookings/", json=payload, headers=admin)
    assert missing.status_code == 400

    response = client.post(
        "/api/bookings/",
        json={**payload, "student_id": setup["student_id"], "status": "approved"},
        headers=admin,
    )
    assert response.status_code == 201
    assert response.json()["data"]["student_id"] == setup["student_id"]
    assert response.json()["data"]["status"] == "approved"
