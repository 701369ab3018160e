import pytest
from fastapi.testclient import TestClient

from app import app
from conftest import (
    KNOWN_PLACES,
    FakeGeocoder,
    auth_headers,
    create_user,
    fake_resolver,
    override_get_db,
)
from core.cache import NullCache
from core.get_db import get_db_async
from core.settings import settings
from geocoders.resolver import GeocodeResolver, get_geocode_resolver
from models.enums import UserRole

client = TestClient(app)


@pytest.fixture(autouse=True)
def clean_overrides():
    app.dependency_overrides[get_db_async] = override_get_db
    app.dependency_overrides[get_geocode_resolver] = lambda: fake_resolver()
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def landlord():
    create_user("ll@test.com", role=UserRole.LANDLORD)
    return auth_headers(client, "ll@test.com")


def property_payload(**overrides):
    payload = {
        "title": "Two bedroom flat near UNZA",
        "description": "Quiet, close to campus",
        "property_type": "apartment",
        "address": "Great East Road, Lusaka",
        "monthly_rent": "2500.00",
        "target_university": "University of Zambia (UNZA)",
        "details": {"bedrooms": 2, "bathrooms": 1, "amenities": ["wifi"]},
    }
    payload.update(overrides)
    return payload


def test_create_property_geocodes_address(landlord):
    response = client.post("/api/properties/", json=property_payload(), headers=landlord)

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["latitude"] == pytest.approx(-15.3875)
    assert data["longitude"] == pytest.approx(28.3228)
    assert data["details"]["bedrooms"] == 2
    assert data["details"]["amenities"] == ["wifi"]
    assert data["is_available"] is True


def test_create_property_without_geocode_match_keeps_null_coordinates(landlord):
    response = client.post(
        "/api/properties/",
        json=property_payload(address="Nowhere Street"),
        headers=landlord,
    )

    assert response.status_code == 201
    assert response.json()["data"]["latitude"] is None


def test_create_property_with_explicit_coordinates_skips_geocoder(landlord):
    resolver = fake_resolver()
    app.dependency_overrides[get_geocode_resolver] = lambda: resolver

    response = client.post(
        "/api/properties/",
        json=property_payload(latitude=-15.4, longitude=28.3),
        headers=landlord,
    )

    assert response.status_code == 201
    assert resolver.providers[0].calls == []


def test_create_property_rejects_out_of_range_coordinates(landlord):
    response = client.post(
        "/api/properties/",
        json=property_payload(latitude=95, longitude=28.3),
        headers=landlord,
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Latitude must be between -90 and 90"


def test_students_cannot_create_properties(landlord):
    create_user("student@test.com")
    student = auth_headers(client, "student@test.com")

    response = client.post("/api/properties/", json=property_payload(), headers=student)
    assert response.status_code == 403


def test_draft_is_not_available(landlord):
    response = client.post(
        "/api/properties/draft", json=property_payload(), headers=landlord
    )

    assert response.status_code == 201
    assert response.json()["data"]["is_available"] is False


def test_update_with_ungeocodable_address_returns_422(landlord):
    created = client.post("/api/properties/", json=property_payload(), headers=landlord)
    property_id = created.json()["data"]["id"]

    response = client.put(
        f"/api/properties/{property_id}",
        json={"address": "Unknown Place 404"},
        headers=landlord,
    )

    assert response.status_code == 422
    assert response.json()["detail"] == "Could not geocode address"


def test_update_with_new_address_moves_coordinates(landlord):
    created = client.post("/api/properties/", json=property_payload(), headers=landlord)
    property_id = created.json()["data"]["id"]

    response = client.put(
        f"/api/properties/{property_id}",
        json={"address": "Jambo Drive, Kitwe", "monthly_rent": "1800"},
        headers=landlord,
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["latitude"] == pytest.approx(-12.8024)
    assert data["monthly_rent"] == 1800.0


class FormattingGeocoder(FakeGeocoder):
    """Answers like a provider that rewrites the address it was given."""

    async def geocode(self, address):
        result = await super().geocode(address)
        if result.success:
            result.formatted_address = "Great East Rd, Lusaka, Zambia"
        return result


def test_address_is_stored_as_submitted(landlord):
    geocoder = FormattingGeocoder(places=KNOWN_PLACES)
    resolver = GeocodeResolver([geocoder], NullCache())
    app.dependency_overrides[get_geocode_resolver] = lambda: resolver

    created = client.post("/api/properties/", json=property_payload(), headers=landlord)
    property_id = created.json()["data"]["id"]
    assert created.json()["data"]["address"] == "Great East Road, Lusaka"

    response = client.put(
        f"/api/properties/{property_id}",
        json={"address": "great east road,  Lusaka", "title": "Renamed"},
        headers=landlord,
    )

    assert response.status_code == 200
    assert response.json()["data"]["address"] == "great east road,  Lusaka"
    assert response.json()["data"]["latitude"] == pytest.approx(-15.3875)
    assert geocoder.calls == ["Great East Road, Lusaka"]


def test_update_rejects_null_for_required_fields(landlord):
    created = client.post("/api/properties/", json=property_payload(), headers=landlord)
    property_id = created.json()["data"]["id"]

    for body in ({"title": None}, {"monthly_rent": None}, {"property_type": None}):
        response = client.put(
            f"/api/properties/{property_id}", json=body, headers=landlord
        )
        assert response.status_code == 400
        assert response.json()["details"][0]["field"] == next(iter(body))

    detail = client.get(f"/api/properties/{property_id}").json()["data"]
    assert detail["title"] == "Two bedroom flat near UNZA"


def test_only_owner_can_update_or_delete(landlord):
    created = client.post("/api/properties/", json=property_payload(), headers=landlord)
    property_id = created.json()["data"]["id"]
    create_user("other@test.com", role=UserRole.LANDLORD)
    other = auth_headers(client, "other@test.com")

    assert (
        client.put(
            f"/api/properties/{property_id}", json={"title": "Mine"}, headers=other
        ).status_code
        == 403
    )
    assert client.delete(f"/api/properties/{property_id}", headers=other).status_code == 403
    assert client.delete(f"/api/properties/{property_id}", headers=landlord).status_code == 200
    assert client.get(f"/api/properties/{property_id}").status_code == 404


def test_nearby_sorts_by_distance_and_respects_radius(landlord):
    client.post(
        "/api/properties/",
        json=property_payload(title="Far", address="Jambo Drive, Kitwe"),
        headers=landlord,
    )
    client.post(
        "/api/properties/",
        json=property_payload(title="Town", address="Cairo Road, Lusaka"),
        headers=landlord,
    )
    client.post(
        "/api/properties/",
        json=property_payload(title="Campus", address="Great East Road, Lusaka"),
        headers=landlord,
    )

    response = client.get(
        "/api/properties/nearby", params={"lat": -15.39, "lng": 28.32, "radius": 10}
    )

    titles = [p["title"] for p in response.json()["data"]]
    assert titles == ["Campus", "Town"]
    distances = [p["distance_km"] for p in response.json()["data"]]
    assert distances == sorted(distances)


def test_counts_stats_and_types(landlord):
    client.post("/api/properties/", json=property_payload(), headers=landlord)
    client.post(
        "/api/properties/draft",
        json=property_payload(property_type="house"),
        headers=landlord,
    )

    assert client.get("/api/properties/count").json()["data"] == {
        "total": 2,
        "available": 1,
    }
    stats = client.get("/api/properties/type-stats").json()["data"]
    assert stats["apartment"] == 1 and stats["house"] == 1
    assert "shared_room" in client.get("/api/properties/types").json()["data"]


def test_random_is_capped():
    assert client.get("/api/properties/random", params={"count": 51}).status_code == 400
    assert client.get("/api/properties/random").json()["data"] == []


def test_batch_geocode_reports_results(landlord, monkeypatch):
    client.post(
        "/api/properties/", json=property_payload(address="Nowhere A"), headers=landlord
    )
    client.post(
        "/api/properties/", json=property_payload(address="Nowhere B"), headers=landlord
    )
    create_user("admin@test.com", role=UserRole.ADMIN)
    admin = auth_headers(client, "admin@test.com")

    app.dependency_overrides[get_geocode_resolver] = lambda: fake_resolver(
        {"nowhere a": (-15.0, 28.0)}
    )
    monkeypatch.setattr(settings, "BATCH_GEOCODE_DELAY", 0)
    response = client.post("/api/properties/batch-geocode", headers=admin)

    body = response.json()
    assert body["total"] == 2
    assert body["succeeded"] == 1
    assert body["failed"] == 1
    assert body["errors"][0]["address"] == "Nowhere B"


def test_geocode_endpoint_returns_result(landlord):
    response = client.post(
        "/api/properties/geocode",
        json={"address": "Cairo Road, Lusaka"},
        headers=landlord,
    )

    assert response.json()["success"] is True
    assert response.json()["data"]["provider"] == "fake"
