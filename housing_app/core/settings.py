import os
from typing import List

from dotenv import load_dotenv
from pydantic_settings import BaseSettings

from .url_parser import parser

load_dotenv()


class Settings(BaseSettings):
    PROJECT_NAME: str = "STUDENT HOUSING MARKETPLACE"
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./housing.db")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    SECRET_KEY: str = os.getenv("SECRET_KEY", "change-me-in-production")
    ALGORITHM: str = os.getenv("ALGORITHM", "HS256")
    ACCESS_EXPIRE_HOURS: int = 24
    SECURE_COOKIES: bool = False  # must be false on localhost
    ALLOWED_HOSTS_RAW: str = os.getenv("ALLOWED_HOSTS", "")

    GOOGLE_MAPS_API_KEY: str | None = os.getenv("GOOGLE_MAPS_API_KEY")
    MAPBOX_ACCESS_TOKEN: str | None = os.getenv("MAPBOX_ACCESS_TOKEN")
    NOMINATIM_USER_AGENT: str = os.getenv(
        "NOMINATIM_USER_AGENT", "student-housing-marketplace/1.0 (geocoding)"
    )
    GEOCODE_TIMEOUT: float = 10
    GEOCODE_CACHE_TTL: int = 3600
    GEOCODE_CACHE_BACKEND: str = os.getenv("GEOCODE_CACHE_BACKEND", "memory")
    REDIS_URL: str | None = os.getenv("REDIS_URL")
    UPSTASH_REDIS_TOKEN: str | None = os.getenv("UPSTASH_REDIS_REST_TOKEN")
    UPSTASH_REDIS_URL: str | None = os.getenv("UPSTASH_REDIS_REST_URL")
    GEOCODE_CACHE_SWEEP_SECONDS: int = 600
    BATCH_GEOCODE_DELAY: float = 0.3

    CLOUDINARY_CLOUD_NAME: str | None = os.getenv("CLOUDINARY_CLOUD_NAME")
    CLOUDINARY_API_KEY: str | None = os.getenv("CLOUDINARY_API_KEY")
    CLOUDINARY_SECRET_KEY: str | None = os.getenv("CLOUDINARY_SECRET_KEY")
    MAX_IMAGE_SIZE: int = 5 * 1024 * 1024

    OUTBOX_POLL_SECONDS: int = 30
    OUTBOX_MAX_ATTEMPTS: int = 5
    OUTBOX_BATCH_SIZE: int = 100

    @property
    def ALLOWED_HOSTS(self) -> List[str]:
        return parser.parse_url_list(self.ALLOWED_HOSTS_RAW, "ALLOWED_HOSTS")

    class Config:
        env_file = ".env"
        extra = "ignore"
        case_sensitive = False


settings = Settings()
