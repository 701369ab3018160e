import logging

import httpx

from core.settings import settings

from .geocode_result import GeocodeResult

logger = logging.getLogger(__name__)

GOOGLE_GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"


class GoogleGeocoder:
    name = "google"

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key if api_key is not None else settings.GOOGLE_MAPS_API_KEY
        self.timeout = timeout or settings.GEOCODE_TIMEOUT
        self.transport = transport

    @property
    def available(self) -> bool:
        return bool(self.api_key)

    async def geocode(self, address: str) -> GeocodeResult:
        params = {"address": address, "key": self.api_key}
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                resp = await client.get(GOOGLE_GEOCODE_URL, params=params)
            resp.raise_for_status()
            data = resp.json()
        except httpx.TimeoutException:
            return GeocodeResult.failure("Google geocoding timed out", self.name)
        except httpx.HTTPStatusError as e:
            return GeocodeResult.failure(
                f"Google geocoding returned HTTP {e.response.status_code}", self.name
            )
        except (httpx.HTTPError, ValueError) as e:
            return GeocodeResult.failure(f"Google geocoding failed: {e}", self.name)

        status = data.get("status")
        if status != "OK":
            error = f"Geocoding API error: {status}"
            if data.get("error_message"):
                error += f" - {data['error_message']}"
            return GeocodeResult.failure(error, self.name)

        results = data.get("results") or []
        if not results:
            return GeocodeResult.failure("Google returned no results", self.name)

        location = results[0]["geometry"]["location"]
        return GeocodeResult.ok(
            self.name,
            location["lat"],
            location["lng"],
            results[0].get("formatted_address"),
        )
