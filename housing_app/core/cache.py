import asyncio
import json
import logging
import time
import urllib.parse
from typing import Any, Callable, Optional, Protocol

import httpx
import redis.asyncio as redis
from tenacity import retry, stop_after_attempt, wait_exponential

from .settings import settings

logger = logging.getLogger(__name__)


class GeocodeCache(Protocol):
    async def get(self, key: str) -> Optional[dict]: ...

    async def set(self, key: str, value: dict, ttl: int) -> None: ...

    async def delete(self, key: str) -> bool: ...


class InMemoryTTLCache:
    """Process-local cache with per-entry expiry.

    Expired entries are dropped lazily on read and by a sweep that runs at
    most once every ``sweep_interval`` seconds.
    """

    def __init__(
        self,
        sweep_interval: float = 600,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._store: dict[str, tuple[float, dict]] = {}
        self._lock = asyncio.Lock()
        self._clock = clock
        self.sweep_interval = sweep_interval
        self._last_sweep = clock()

    async def connect(self) -> None:
        return None

    async def get(self, key: str) -> Optional[dict]:
        async with self._lock:
            self._maybe_sweep()
            entry = self._store.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if expires_at <= self._clock():
                del self._store[key]
                return None
            return dict(value)

    async def set(self, key: str, value: dict, ttl: int) -> None:
        async with self._lock:
            self._maybe_sweep()
            self._store[key] = (self._clock() + ttl, dict(value))

    async def delete(self, key: str) -> bool:
        async with self._lock:
            return self._store.pop(key, None) is not None

    async def sweep(self) -> int:
        async with self._lock:
            return self._sweep()

    def __len__(self) -> int:
        return len(self._store)

    def _maybe_sweep(self) -> None:
        if self._clock() - self._last_sweep >= self.sweep_interval:
            self._sweep()

    def _sweep(self) -> int:
        now = self._clock()
        expired = [k for k, (expires_at, _) in self._store.items() if expires_at <= now]
        for key in expired:
            del self._store[key]
        self._last_sweep = now
        if expired:
            logger.debug("Swept %d expired geocode cache entries", len(expired))
        return len(expired)


class NullCache:
    async def connect(self) -> None:
        return None

    async def get(self, key: str) -> Optional[dict]:
        return None

    async def set(self, key: str, value: dict, ttl: int) -> None:
        return None

    async def delete(self, key: str) -> bool:
        return False


class RedisTTLCache:
    def __init__(self, url: str, namespace: str = "geocode"):
        self.client = redis.from_url(url, decode_responses=True)
        self.namespace = namespace

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    @retry(
        stop=stop_after_attempt(2), wait=wait_exponential(multiplier=1, min=1, max=10)
    )
    async def connect(self) -> None:
        logger.info("Connecting to Redis geocode cache...")
        await self.client.ping()
        logger.info("Connected to Redis geocode cache.")

    async def close(self) -> None:
        await self.client.aclose()

    async def get(self, key: str) -> Optional[dict]:
        try:
            data = await self.client.get(self._key(key))
        except redis.RedisError as e:
            logger.error("Redis GET failed for %s", key, exc_info=e)
            return None
        return _loads(data, key)

    async def set(self, key: str, value: dict, ttl: int) -> None:
        try:
            await self.client.set(self._key(key), json.dumps(value), ex=ttl)
        except redis.RedisError as e:
            logger.error("Redis SET failed for %s", key, exc_info=e)

    async def delete(self, key: str) -> bool:
        try:
            return bool(await self.client.delete(self._key(key)))
        except redis.RedisError as e:
            logger.error("Redis DELETE failed for %s", key, exc_info=e)
            return False


class UpstashTTLCache:
    def __init__(self, url: str, token: str, namespace: str = "geocode"):
        if not url or not token:
            raise ValueError("Missing Upstash Redis environment variables")
        self.redis_url = url.rstrip("/")
        self.namespace = namespace
        self.headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

    def _encoded(self, key: str) -> str:
        return urllib.parse.quote(f"{self.namespace}:{key}", safe="")

    @retry(
        stop=stop_after_attempt(2), wait=wait_exponential(multiplier=1, min=1, max=10)
    )
    async def connect(self) -> None:
        async with httpx.AsyncClient(timeout=10) as client:
            logger.info("Connecting to Upstash Redis...")
            res = await client.get(f"{self.redis_url}/ping", headers=self.headers)
            if res.status_code == 200 and res.json().get("result") == "PONG":
                logger.info("Connected to Upstash Redis.")
                return
            raise ConnectionError("Upstash Redis ping failed.")

    async def get(self, key: str) -> Optional[dict]:
        try:
            async with httpx.AsyncClient(timeout=10) as client:
                res = await client.get(
                    f"{self.redis_url}/get/{self._encoded(key)}", headers=self.headers
                )
            if res.status_code != 200:
                return None
            return _loads(res.json().get("result"), key)
        except httpx.HTTPError as e:
            logger.error("Network error during Upstash GET:", exc_info=e)
            return None

    async def set(self, key: str, value: dict, ttl: int) -> None:
        try:
            async with httpx.AsyncClient(timeout=10) as client:
                res = await client.post(
                    f"{self.redis_url}/set/{self._encoded(key)}?ex={ttl}",
                    headers=self.headers,
                    content=json.dumps(value),
                )
            if res.status_code != 200:
                logger.error("Upstash SET failed (%s) for %s", res.status_code, key)
        except httpx.HTTPError as e:
            logger.error("Network error during Upstash SET:", exc_info=e)

    async def delete(self, key: str) -> bool:
        try:
            async with httpx.AsyncClient(timeout=10) as client:
                res = await client.post(
                    f"{self.redis_url}/del/{self._encoded(key)}", headers=self.headers
                )
            return res.status_code == 200
        except httpx.HTTPError as e:
            logger.error("Upstash DELETE error:", exc_info=e)
            return False


def _loads(data: Any, key: str) -> Optional[dict]:
    if not data:
        return None
    try:
        return json.loads(data)
    except (TypeError, json.JSONDecodeError):
        logger.error("Invalid JSON format in cache key: %s", key)
        return None


def build_geocode_cache(backend: str | None = None):
    backend = (backend or settings.GEOCODE_CACHE_BACKEND or "memory").lower()
    if backend == "redis" and settings.REDIS_URL:
        return RedisTTLCache(settings.REDIS_URL)
    if backend == "upstash" and settings.UPSTASH_REDIS_URL:
        return UpstashTTLCache(settings.UPSTASH_REDIS_URL, settings.UPSTASH_REDIS_TOKEN)
    if backend == "none":
        return NullCache()
    if backend not in {"memory", "redis", "upstash"}:
        logger.warning("Unknown geocode cache backend %r, using memory", backend)
    return InMemoryTTLCache(sweep_interval=settings.GEOCODE_CACHE_SWEEP_SECONDS)
