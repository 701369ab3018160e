import asyncio
import logging

from geopy.exc import GeocoderServiceError, GeocoderTimedOut
from geopy.geocoders import Nominatim

from core.settings import settings

from .geocode_result import GeocodeResult

logger = logging.getLogger(__name__)


class NominatimGeocoder:
    """OpenStreetMap lookup. Needs no key, so it is always attempted."""

    name = "nominatim"
    available = True

    def __init__(self, geolocator=None, timeout: float | None = None):
        self.timeout = timeout or settings.GEOCODE_TIMEOUT
        self.geolocator = geolocator or Nominatim(
            user_agent=settings.NOMINATIM_USER_AGENT, timeout=self.timeout
        )

    async def geocode(self, address: str) -> GeocodeResult:
        def _geocode():
            return self.geolocator.geocode(address, exactly_one=True)

        try:
            location = await asyncio.to_thread(_geocode)
        except GeocoderTimedOut:
            return GeocodeResult.failure("Nominatim geocoding timed out", self.name)
        except GeocoderServiceError as e:
            return GeocodeResult.failure(f"Nominatim geocoding failed: {e}", self.name)

        if not location:
            return GeocodeResult.failure("Nominatim returned no results", self.name)

        return GeocodeResult.ok(
            self.name, location.latitude, location.longitude, location.address
        )
