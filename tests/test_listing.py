import pytest
from fastapi.testclient import TestClient

from app import app
from conftest import auth_headers, create_user, fake_resolver, override_get_db
from core.get_db import get_db_async
from geocoders.resolver import get_geocode_resolver
from models.enums import UserRole

client = TestClient(app)

UNZA = "University of Zambia (UNZA)"
CBU = "Copperbelt University (CBU)"


@pytest.fixture(autouse=True)
def clean_overrides():
    app.dependency_overrides[get_db_async] = override_get_db
    app.dependency_overrides[get_geocode_resolver] = lambda: fake_resolver()
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def landlord():
    create_user("ll@test.com", role=UserRole.LANDLORD, first_name="Bwalya")
    return auth_headers(client, "ll@test.com")


def add_property(headers, bedrooms, rent="2000", university=UNZA, draft=False, **extra):
    payload = {
        "title": f"{bedrooms} bedroom place",
        "property_type": "apartment",
        "address": "Great East Road, Lusaka",
        "monthly_rent": rent,
        "target_university": university,
        "details": {"bedrooms": bedrooms, "bathrooms": 1},
    }
    payload.update(extra)
    url = "/api/properties/draft" if draft else "/api/properties/"
    response = client.post(url, json=payload, headers=headers)
    assert response.status_code == 201
    return response.json()["data"]["id"]


def test_bedroom_filter_is_exact_and_counts_all_matches(landlord):
    for bedrooms in (1, 2, 2, 3, 2):
        add_property(landlord, bedrooms)

    response = client.get(
        "/api/property-listing/student-view", params={"bedrooms": 2, "limit": 2}
    )

    data = response.json()["data"]
    assert response.json()["success"] is True
    assert data["total_count"] == 3
    assert len(data["properties"]) == 2
    assert data["has_more"] is True
    assert all(p["details"]["bedrooms"] == 2 for p in data["properties"])

    last_page = client.get(
        "/api/property-listing/student-view",
        params={"bedrooms": 2, "limit": 2, "offset": 2},
    ).json()["data"]
    assert len(last_page["properties"]) == 1
    assert last_page["has_more"] is False


def test_drafts_are_hidden_and_universities_listed(landlord):
    add_property(landlord, 1, university=UNZA)
    add_property(landlord, 1, university=CBU, draft=True)

    data = client.get("/api/property-listing/student-view").json()["data"]

    assert data["total_count"] == 1
    assert data["universities"] == [UNZA]


def test_price_and_university_filters(landlord):
    add_property(landlord, 1, rent="1000")
    add_property(landlord, 1, rent="3000")
    add_property(landlord, 1, rent="2000", university=CBU)

    data = client.get(
        "/api/property-listing/student-view",
        params={"min_price": 1500, "university": UNZA},
    ).json()["data"]

    assert [p["monthly_rent"] for p in data["properties"]] == [3000.0]


def test_bounding_box_filter(landlord):
    add_property(landlord, 1, address="Great East Road, Lusaka")
    add_property(landlord, 1, address="Jambo Drive, Kitwe")

    data = client.get(
        "/api/property-listing/student-view",
        params={"ne_lat": -15.0, "ne_lng": 29.0, "sw_lat": -16.0, "sw_lng": 28.0},
    ).json()["data"]

    assert data["total_count"] == 1
    assert data["properties"][0]["latitude"] == pytest.approx(-15.3875)


def test_map_only_projection(landlord):
    add_property(landlord, 2)

    prop = client.get(
        "/api/property-listing/student-view", params={"map_only": True}
    ).json()["data"]["properties"][0]

    assert set(prop) == {
        "property_id",
        "title",
        "address",
        "monthly_rent",
        "latitude",
        "longitude",
        "target_university",
        "image_url",
    }
    assert prop["image_url"] is None


def test_full_projection_includes_landlord_rating_and_inquiries(landlord):
    property_id = add_property(landlord, 2)
    create_user("student@test.com")
    student = auth_headers(client, "student@test.com")
    client.post(
        "/api/reviews/", json={"property_id": property_id, "rating": 4}, headers=student
    )
    client.post(
        "/api/inquiries/",
        json={"property_id": property_id, "message": "Is it free in May?"},
        headers=student,
    )

    prop = client.get("/api/property-listing/student-view").json()["data"]["properties"][0]

    assert prop["landlord"]["name"] == "Bwalya User"
    assert prop["landlord"]["response_time"] == "N/A"
    assert prop["average_rating"] == 4.0
    assert prop["inquiry_count"] == 1
    assert "distance" not in prop


def test_publish_and_unpublish(landlord):
    property_id = add_property(landlord, 1)

    response = client.patch(
        f"/api/property-listing/{property_id}/unpublish", headers=landlord
    )
    assert response.json()["property"] == {"property_id": property_id, "is_available": False}
    assert client.get("/api/property-listing/student-view").json()["data"]["total_count"] == 0

    client.patch(f"/api/property-listing/{property_id}/publish", headers=landlord)
    assert client.get("/api/property-listing/student-view").json()["data"]["total_count"] == 1


def test_details_aggregate(landlord):
    property_id = add_property(landlord, 3)
    for index, rating in enumerate((5, 4)):
        email = f"s{index}@test.com"
        create_user(email, first_name=f"Student{index}")
        client.post(
            "/api/reviews/",
            json={"property_id": property_id, "rating": rating, "comment": "ok"},
            headers=auth_headers(client, email),
        )

    data = client.get(f"/api/details/{property_id}").json()["data"]

    assert data["average_rating"] == 4.5
    assert data["review_count"] == 2
    assert len(data["reviews"]) == 2
    assert data["reviews"][0]["reviewer_name"].startswith("Student")
    assert data["details"]["bedrooms"] == 3


def test_details_missing_property():
    response = client.get("/api/details/999")

    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Property not found"}


def test_property_details_upsert(landlord):
    property_id = add_property(landlord, 1)

    response = client.put(
        f"/api/property-details/{property_id}",
        json={"bedrooms": 4, "furnished": True},
        headers=landlord,
    )

    assert response.status_code == 200
    details = client.get(f"/api/property-details/{property_id}").json()["data"]
    assert details["bedrooms"] == 4
    assert details["furnished"] is True
    assert details["bathrooms"] == 1
