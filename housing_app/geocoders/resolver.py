import logging
from typing import Iterable, Protocol

from fastapi import Request

from core.cache import GeocodeCache, build_geocode_cache
from core.settings import settings

from .geocode_result import GeocodeResult
from .google_geocoder import GoogleGeocoder
from .mapbox_geocoder import MapboxGeocoder
from .nominatim_geocoder import NominatimGeocoder

logger = logging.getLogger(__name__)


class Geocoder(Protocol):
    name: str

    @property
    def available(self) -> bool: ...

    async def geocode(self, address: str) -> GeocodeResult: ...


class GeocodeResolver:
    """Tries each provider in order and returns the first success.

    Every provider has its own cache namespace, so a hit for one provider
    never masks a configuration change for another.
    """

    def __init__(
        self,
        providers: Iterable[Geocoder],
        cache: GeocodeCache,
        ttl: int | None = None,
    ):
        self.providers = list(providers)
        self.cache = cache
        self.ttl = ttl or settings.GEOCODE_CACHE_TTL

    @staticmethod
    def cache_key(provider_name: str, address: str) -> str:
        return f"{provider_name}:{address.strip().lower()}"

    async def resolve(self, address: str | None) -> GeocodeResult:
        if not address or not address.strip():
            return GeocodeResult.failure("Address is required")

        query = address.strip()
        last_error = None
        unavailable = []

        for provider in self.providers:
            if not provider.available:
                unavailable.append(provider.name)
                continue

            key = self.cache_key(provider.name, query)
            hit = await self.cache.get(key)
            if hit:
                logger.info("Geocode cache hit for %r via %s", query, provider.name)
                result = GeocodeResult.from_dict(hit)
                result.cached = True
                return result

            logger.debug("Geocoding %r via %s", query, provider.name)
            try:
                result = await provider.geocode(query)
            except Exception as e:
                logger.exception("Geocoder %s raised for %r", provider.name, query)
                result = GeocodeResult.failure(str(e), provider.name)

            if result.success:
                await self.cache.set(key, result.to_dict(), self.ttl)
                return result

            logger.info(
                "Geocoder %s failed for %r: %s", provider.name, query, result.error
            )
            last_error = result.error or last_error

        if last_error is None:
            if unavailable:
                last_error = f"No geocoding provider configured ({', '.join(unavailable)})"
            else:
                last_error = "No geocoding providers available"
        return GeocodeResult.failure(last_error)


def default_providers() -> list:
    return [GoogleGeocoder(), NominatimGeocoder(), MapboxGeocoder()]


def build_geocode_resolver(cache: GeocodeCache | None = None) -> GeocodeResolver:
    return GeocodeResolver(
        providers=default_providers(),
        cache=cache if cache is not None else build_geocode_cache(),
    )


def get_geocode_resolver(request: Request) -> GeocodeResolver:
    resolver = getattr(request.app.state, "geocode_resolver", None)
    if resolver is None:
        resolver = build_geocode_resolver()
        request.app.state.geocode_resolver = resolver
    return resolver
