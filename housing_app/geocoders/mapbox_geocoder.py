import logging
import urllib.parse

import httpx

from core.settings import settings

from .geocode_result import GeocodeResult

logger = logging.getLogger(__name__)

MAPBOX_GEOCODE_URL = "https://api.mapbox.com/geocoding/v5/mapbox.places/{query}.json"


class MapboxGeocoder:
    name = "mapbox"

    def __init__(
        self,
        access_token: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.access_token = (
            access_token if access_token is not None else settings.MAPBOX_ACCESS_TOKEN
        )
        self.timeout = timeout or settings.GEOCODE_TIMEOUT
        self.transport = transport

    @property
    def available(self) -> bool:
        return bool(self.access_token)

    async def geocode(self, address: str) -> GeocodeResult:
        url = MAPBOX_GEOCODE_URL.format(query=urllib.parse.quote(address, safe=""))
        params = {"access_token": self.access_token, "limit": 1}
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                resp = await client.get(url, params=params)
            resp.raise_for_status()
            data = resp.json()
        except httpx.TimeoutException:
            return GeocodeResult.failure("Mapbox geocoding timed out", self.name)
        except httpx.HTTPStatusError as e:
            return GeocodeResult.failure(
                f"Mapbox geocoding returned HTTP {e.response.status_code}", self.name
            )
        except (httpx.HTTPError, ValueError) as e:
            return GeocodeResult.failure(f"Mapbox geocoding failed: {e}", self.name)

        features = data.get("features") or []
        if not features:
            return GeocodeResult.failure("Mapbox returned no results", self.name)

        lng, lat = features[0]["center"][:2]
        return GeocodeResult.ok(self.name, lat, lng, features[0].get("place_name"))
