import asyncio
import logging
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI

from geocoders.resolver import build_geocode_resolver
from notifications.dispatcher import notification_dispatcher

from .cache import build_geocode_cache
from .cloudinary_setup import cloudinary_client
from .settings import settings

logger = logging.getLogger("startup")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Waiting for application startup...")

    try:
        logger.info("Connecting to Cloudinary")
        await cloudinary_client.connect()
        logger.info("Cloudinary connected.")
    except Exception:
        logger.exception("Cannot connect to Cloudinary")

    cache = build_geocode_cache()
    try:
        await cache.connect()
        logger.info("Geocode cache ready (%s).", type(cache).__name__)
    except Exception:
        logger.exception("Geocode cache connection failed")
    app.state.geocode_resolver = build_geocode_resolver(cache)

    outbox_task = None
    try:
        if settings.OUTBOX_POLL_SECONDS > 0:
            outbox_task = asyncio.create_task(
                notification_dispatcher.run_forever(settings.OUTBOX_POLL_SECONDS)
            )
            logger.info(
                "Notification outbox loop started (every %ss).",
                settings.OUTBOX_POLL_SECONDS,
            )
    except Exception:
        logger.exception("Failed to start notification outbox loop")

    logger.info("Application startup complete.")

    yield

    if outbox_task is not None:
        outbox_task.cancel()
        with suppress(asyncio.CancelledError):
            await outbox_task

    try:
        close = getattr(cache, "close", None)
        if close is not None:
            await close()
    except Exception:
        logger.exception("Failed to close geocode cache")
