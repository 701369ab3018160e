import logging
from typing import List
from urllib.parse import parse_qsl, urlencode

logger = logging.getLogger(__name__)

ASYNC_DRIVERS = {
    "postgres": "postgresql+asyncpg",
    "postgresql": "postgresql+asyncpg",
    "postgresql+psycopg2": "postgresql+asyncpg",
    "sqlite": "sqlite+aiosqlite",
}


class URLParser:
    def parse_url_list(self, raw_value: str, name: str) -> List[str]:
        """Comma separated origins; entries without an http(s) scheme are dropped."""
        items = [v.strip().rstrip("/") for v in (raw_value or "").split(",") if v.strip()]
        valid_items = [v for v in items if v.startswith(("http://", "https://"))]
        if len(valid_items) < len(items):
            logger.warning(
                "Ignored %d invalid entr(y/ies) in %s",
                len(items) - len(valid_items),
                name,
            )
        return valid_items

    def async_database_url(self, url: str) -> str:
        scheme, sep, rest = url.partition("://")
        if not sep:
            return url
        driver = ASYNC_DRIVERS.get(scheme, scheme)
        if driver != scheme:
            logger.info("Using %s driver for %s URL", driver, scheme)

        location, _, query = rest.partition("?")
        if query and driver.endswith("asyncpg"):
            # asyncpg rejects libpq's sslmode, it takes ssl instead
            params = [
                ("ssl", "disable" if value == "disable" else "require")
                if key == "sslmode"
                else (key, value)
                for key, value in parse_qsl(query, keep_blank_values=True)
            ]
            query = urlencode(params)

        return f"{driver}://{location}" + (f"?{query}" if query else "")


parser = URLParser()
