import asyncio
import os
import tempfile

_DB_DIR = tempfile.mkdtemp(prefix="housing-tests-")
TEST_DATABASE_URL = f"sqlite+aiosqlite:///{os.path.join(_DB_DIR, 'test.db')}"

os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["OUTBOX_POLL_SECONDS"] = "0"
os.environ["GEOCODE_CACHE_BACKEND"] = "none"
os.environ.pop("GOOGLE_MAPS_API_KEY", None)
os.environ.pop("MAPBOX_ACCESS_TOKEN", None)

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from core.breaker import breaker, cloudinary_breaker
from core.cache import NullCache
from core.get_db import Base, enable_sqlite_foreign_keys
from geocoders.geocode_result import GeocodeResult
from geocoders.resolver import GeocodeResolver
from models import models  # noqa: F401
from models.enums import UserRole
from models.models import User

test_engine = create_async_engine(TEST_DATABASE_URL, poolclass=NullPool)
enable_sqlite_foreign_keys(test_engine)
TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

PASSWORD = "password123"


async def override_get_db():
    session = TestSessionLocal()
    try:
        yield session
    finally:
        await session.close()


class FakeGeocoder:
    """Resolves addresses from a fixed table and counts lookups."""

    def __init__(self, name="fake", places=None, available=True):
        self.name = name
        self.places = places or {}
        self.available = available
        self.calls = []

    async def geocode(self, address):
        self.calls.append(address)
        hit = self.places.get(address.lower())
        if hit is None:
            return GeocodeResult.failure(f"{self.name} found nothing", self.name)
        lat, lng = hit
        return GeocodeResult.ok(self.name, lat, lng, address)


KNOWN_PLACES = {
    "great east road, lusaka": (-15.3875, 28.3228),
    "cairo road, lusaka": (-15.4167, 28.2833),
    "jambo drive, kitwe": (-12.8024, 28.2132),
}


def fake_resolver(places=None):
    return GeocodeResolver(
        [FakeGeocoder(places=places if places is not None else KNOWN_PLACES)],
        NullCache(),
    )


def run(coro):
    return asyncio.run(coro)


async def _reset_schema():
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture(autouse=True)
def fresh_database():
    run(_reset_schema())
    breaker.reset()
    cloudinary_breaker.reset()
    yield


def create_user(email, role=UserRole.STUDENT, approved=True, first_name="Test", last_name="User"):
    async def _create():
        async with TestSessionLocal() as db:
            user = User(
                email=email,
                first_name=first_name,
                last_name=last_name,
                role=role,
                approved=approved,
            )
            user.set_password(PASSWORD)
            db.add(user)
            await db.commit()
            return user.id

    return run(_create())


def auth_headers(client, email, password=PASSWORD):
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    token = response.json()["token"]
    return {"Authorization": f"Bearer {token}"}


def fetch_all(model, *conditions):
    async def _fetch():
        from sqlalchemy import select

        async with TestSessionLocal() as db:
            result = await db.execute(select(model).where(*conditions))
            return list(result.scalars().all())

    return run(_fetch())
