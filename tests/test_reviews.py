import pytest
from fastapi.testclient import TestClient

from app import app
from conftest import auth_headers, create_user, fake_resolver, fetch_all, override_get_db
from core.get_db import get_db_async
from geocoders.resolver import get_geocode_resolver
from models.enums import UserRole
from models.models import Favorite, Review

client = TestClient(app)


@pytest.fixture(autouse=True)
def clean_overrides():
    app.dependency_overrides[get_db_async] = override_get_db
    app.dependency_overrides[get_geocode_resolver] = lambda: fake_resolver()
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def setup():
    create_user("ll@test.com", role=UserRole.LANDLORD)
    create_user("student@test.com")
    landlord = auth_headers(client, "ll@test.com")
    response = client.post(
        "/api/properties/",
        json={
            "title": "House near Mulungushi",
            "property_type": "house",
            "address": "Great East Road, Lusaka",
            "monthly_rent": "4000",
        },
        headers=landlord,
    )
    return {
        "landlord": landlord,
        "student": auth_headers(client, "student@test.com"),
        "property_id": response.json()["data"]["id"],
    }


def review(setup, headers=None, **extra):
    payload = {"property_id": setup["property_id"], "rating": 4, "comment": "Nice"}
    payload.update(extra)
    return client.post("/api/reviews/", json=payload, headers=headers or setup["student"])


def test_create_review(setup):
    response = review(setup)

    assert response.status_code == 201
    assert response.json()["data"]["rating"] == 4


@pytest.mark.parametrize("rating", [0, 6])
def test_rating_out_of_range(setup, rating):
    response = review(setup, rating=rating)

    assert response.status_code == 400
    assert response.json()["error"] == "Validation failed"
    assert fetch_all(Review) == []


def test_second_review_conflicts(setup):
    review(setup)

    response = review(setup, rating=1)

    assert response.status_code == 409
    assert response.json()["detail"] == "You have already reviewed this property"
    assert len(fetch_all(Review)) == 1


def test_review_missing_property(setup):
    response = review(setup, property_id=999)

    assert response.status_code == 404


def test_average_rating(setup):
    review(setup, rating=5)
    create_user("second@test.com")
    review(setup, headers=auth_headers(client, "second@test.com"), rating=2)

    body = client.get(f"/api/reviews/average/{setup['property_id']}").json()

    assert body["average_rating"] == 3.5
    assert body["review_count"] == 2


def test_average_without_reviews(setup):
    body = client.get(f"/api/reviews/average/{setup['property_id']}").json()

    assert body["average_rating"] is None
    assert body["review_count"] == 0


def test_only_reviewer_can_edit(setup):
    review_id = review(setup).json()["data"]["id"]

    forbidden = client.put(
        f"/api/reviews/{review_id}", json={"rating": 1}, headers=setup["landlord"]
    )
    allowed = client.put(
        f"/api/reviews/{review_id}", json={"rating": 2}, headers=setup["student"]
    )

    assert forbidden.status_code == 403
    assert allowed.json()["data"]["rating"] == 2


def test_delete_review(setup):
    review_id = review(setup).json()["data"]["id"]

    response = client.delete(f"/api/reviews/{review_id}", headers=setup["student"])

    assert response.status_code == 200
    assert fetch_all(Review) == []


def test_favorites(setup):
    payload = {"property_id": setup["property_id"]}

    created = client.post("/api/favorites/", json=payload, headers=setup["student"])
    duplicate = client.post("/api/favorites/", json=payload, headers=setup["student"])

    assert created.status_code == 201
    assert created.json()["data"]["property"]["title"] == "House near Mulungushi"
    assert duplicate.status_code == 409
    assert duplicate.json()["detail"] == "Property already in favorites"

    listed = client.get("/api/favorites/", headers=setup["student"]).json()["data"]
    assert len(listed) == 1


def test_remove_favorite_owner_only(setup):
    favorite_id = client.post(
        "/api/favorites/",
        json={"property_id": setup["property_id"]},
        headers=setup["student"],
    ).json()["data"]["id"]

    other = client.delete(f"/api/favorites/{favorite_id}", headers=setup["landlord"])
    own = client.delete(f"/api/favorites/{favorite_id}", headers=setup["student"])

    assert other.status_code == 404
    assert own.status_code == 200
    assert fetch_all(Favorite) == []
