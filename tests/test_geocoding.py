from types import SimpleNamespace

import httpx
import pytest
from geopy.exc import GeocoderTimedOut

from conftest import KNOWN_PLACES, FakeGeocoder, run
from core.cache import InMemoryTTLCache, NullCache
from core.coordinates import haversine_km, validate_coordinates
from geocoders.google_geocoder import GoogleGeocoder
from geocoders.mapbox_geocoder import MapboxGeocoder
from geocoders.nominatim_geocoder import NominatimGeocoder
from geocoders.resolver import GeocodeResolver


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_second_lookup_is_served_from_cache():
    provider = FakeGeocoder(places=KNOWN_PLACES)
    resolver = GeocodeResolver([provider], InMemoryTTLCache())

    first = run(resolver.resolve("Great East Road, Lusaka"))
    second = run(resolver.resolve("  great east road, lusaka "))

    assert first.success and not first.cached
    assert second.cached is True
    assert second.latitude == first.latitude
    assert len(provider.calls) == 1


def test_failures_are_not_cached():
    provider = FakeGeocoder(places={})
    resolver = GeocodeResolver([provider], InMemoryTTLCache())

    run(resolver.resolve("Unknown Street"))
    run(resolver.resolve("Unknown Street"))

    assert len(provider.calls) == 2


def test_chain_falls_through_in_order():
    first = FakeGeocoder(name="first", places={})
    second = FakeGeocoder(name="second", places=KNOWN_PLACES)
    third = FakeGeocoder(name="third", places=KNOWN_PLACES)
    resolver = GeocodeResolver([first, second, third], NullCache())

    result = run(resolver.resolve("Cairo Road, Lusaka"))

    assert result.provider == "second"
    assert first.calls == ["Cairo Road, Lusaka"]
    assert third.calls == []


def test_unconfigured_providers_are_skipped():
    keyless = FakeGeocoder(name="keyless", places=KNOWN_PLACES, available=False)
    fallback = FakeGeocoder(name="fallback", places=KNOWN_PLACES)
    resolver = GeocodeResolver([keyless, fallback], NullCache())

    result = run(resolver.resolve("Jambo Drive, Kitwe"))

    assert result.provider == "fallback"
    assert keyless.calls == []


def test_no_available_provider_reports_configuration():
    resolver = GeocodeResolver(
        [FakeGeocoder(name="google", available=False)], NullCache()
    )

    result = run(resolver.resolve("Cairo Road, Lusaka"))

    assert not result.success
    assert "google" in result.error


@pytest.mark.parametrize("address", ["", "   ", None])
def test_blank_address_contacts_no_provider(address):
    provider = FakeGeocoder(places=KNOWN_PLACES)
    resolver = GeocodeResolver([provider], NullCache())

    result = run(resolver.resolve(address))

    assert not result.success
    assert result.error == "Address is required"
    assert provider.calls == []


def test_provider_exception_becomes_failure():
    class Broken(FakeGeocoder):
        async def geocode(self, address):
            raise RuntimeError("boom")

    resolver = GeocodeResolver(
        [Broken(name="broken"), FakeGeocoder(places=KNOWN_PLACES)], NullCache()
    )

    assert run(resolver.resolve("Cairo Road, Lusaka")).success


def test_google_geocoder_parses_response():
    def handler(request):
        assert request.url.params["key"] == "test-key"
        assert request.url.params["address"] == "Cairo Road, Lusaka"
        return httpx.Response(
            200,
            json={
                "status": "OK",
                "results": [
                    {
                        "formatted_address": "Cairo Rd, Lusaka, Zambia",
                        "geometry": {"location": {"lat": -15.4167, "lng": 28.2833}},
                    }
                ],
            },
        )

    geocoder = GoogleGeocoder(api_key="test-key", transport=httpx.MockTransport(handler))

    result = run(geocoder.geocode("Cairo Road, Lusaka"))

    assert result.success
    assert result.provider == "google"
    assert result.formatted_address == "Cairo Rd, Lusaka, Zambia"
    assert result.longitude == pytest.approx(28.2833)


def test_google_geocoder_reports_api_status():
    transport = httpx.MockTransport(
        lambda request: httpx.Response(
            200, json={"status": "REQUEST_DENIED", "error_message": "bad key"}
        )
    )
    geocoder = GoogleGeocoder(api_key="test-key", transport=transport)

    result = run(geocoder.geocode("Cairo Road"))

    assert not result.success
    assert result.error == "Geocoding API error: REQUEST_DENIED - bad key"


def test_google_geocoder_http_error():
    transport = httpx.MockTransport(lambda request: httpx.Response(500))
    geocoder = GoogleGeocoder(api_key="test-key", transport=transport)

    result = run(geocoder.geocode("Cairo Road"))

    assert not result.success
    assert "500" in result.error


def test_google_without_key_is_unavailable():
    assert GoogleGeocoder(api_key="").available is False


def test_mapbox_geocoder_reads_center_as_lng_lat():
    def handler(request):
        assert request.url.params["access_token"] == "pk.test"
        return httpx.Response(
            200,
            json={
                "features": [
                    {"center": [28.2132, -12.8024], "place_name": "Jambo Drive, Kitwe"}
                ]
            },
        )

    geocoder = MapboxGeocoder(
        access_token="pk.test", transport=httpx.MockTransport(handler)
    )

    result = run(geocoder.geocode("Jambo Drive, Kitwe"))

    assert result.latitude == pytest.approx(-12.8024)
    assert result.longitude == pytest.approx(28.2132)


def test_mapbox_no_features():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"features": []}))
    geocoder = MapboxGeocoder(access_token="pk.test", transport=transport)

    assert run(geocoder.geocode("Nowhere")).error == "Mapbox returned no results"


def test_nominatim_geocoder_uses_geolocator():
    class Locator:
        def geocode(self, address, exactly_one=True):
            return SimpleNamespace(
                latitude=-15.3875, longitude=28.3228, address="Great East Rd"
            )

    result = run(NominatimGeocoder(geolocator=Locator()).geocode("Great East Road"))

    assert result.success
    assert result.provider == "nominatim"
    assert result.formatted_address == "Great East Rd"


def test_nominatim_timeout():
    class SlowLocator:
        def geocode(self, address, exactly_one=True):
            raise GeocoderTimedOut("slow")

    result = run(NominatimGeocoder(geolocator=SlowLocator()).geocode("Anywhere"))

    assert result.error == "Nominatim geocoding timed out"


def test_cache_entries_expire():
    clock = FakeClock()
    cache = InMemoryTTLCache(clock=clock)

    run(cache.set("k", {"latitude": 1.0}, ttl=60))
    assert run(cache.get("k")) == {"latitude": 1.0}

    clock.now += 61
    assert run(cache.get("k")) is None


def test_cache_sweep_drops_expired_entries():
    clock = FakeClock()
    cache = InMemoryTTLCache(sweep_interval=600, clock=clock)
    run(cache.set("short", {"v": 1}, ttl=10))
    run(cache.set("long", {"v": 2}, ttl=3600))

    clock.now += 601
    run(cache.set("other", {"v": 3}, ttl=3600))

    assert len(cache) == 2
    assert run(cache.get("long")) == {"v": 2}


@pytest.mark.parametrize(
    "lat, lng, valid",
    [
        (-15.4, 28.3, True),
        (90, 180, True),
        (91, 0, False),
        (0, -181, False),
        ("abc", 0, False),
        (float("nan"), 0, False),
        (float("inf"), 0, False),
        (None, 28.3, False),
        (True, 28.3, False),
    ],
)
def test_validate_coordinates(lat, lng, valid):
    assert validate_coordinates(lat, lng).valid is valid


def test_haversine_lusaka_to_kitwe():
    distance = haversine_km(-15.4167, 28.2833, -12.8024, 28.2132)

    assert 285 < distance < 295
