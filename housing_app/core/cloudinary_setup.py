import asyncio
import logging

import cloudinary
import cloudinary.api
import cloudinary.uploader

from core.breaker import cloudinary_breaker
from core.settings import settings

logger = logging.getLogger(__name__)

PROPERTY_IMAGE_FOLDER = "property_images"
ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/webp", "image/gif"}


class CloudinaryClient:
    def __init__(self):
        cloudinary.config(
            cloud_name=settings.CLOUDINARY_CLOUD_NAME,
            api_key=settings.CLOUDINARY_API_KEY,
            api_secret=settings.CLOUDINARY_SECRET_KEY,
            secure=True,
        )

    @property
    def configured(self) -> bool:
        return bool(
            settings.CLOUDINARY_CLOUD_NAME
            and settings.CLOUDINARY_API_KEY
            and settings.CLOUDINARY_SECRET_KEY
        )

    async def connect(self) -> bool:
        if not self.configured:
            raise ConnectionError("Cloudinary credentials are not configured")
        info = await asyncio.to_thread(cloudinary.api.ping)
        return info.get("status") == "ok"

    async def upload_image(
        self, content: bytes, folder: str = PROPERTY_IMAGE_FOLDER
    ) -> dict:
        async def handler():
            return await asyncio.to_thread(
                cloudinary.uploader.upload,
                content,
                folder=folder,
                resource_type="image",
            )

        result = await cloudinary_breaker.call(handler)
        logger.info("Uploaded image %s to Cloudinary", result.get("public_id"))
        return result

    async def delete_image(self, public_id: str) -> dict:
        async def handler():
            return await asyncio.to_thread(
                cloudinary.uploader.destroy,
                public_id,
                resource_type="image",
                invalidate=True,
            )

        return await cloudinary_breaker.call(handler)

    async def safe_delete_image(self, public_id: str | None) -> None:
        if not public_id:
            return
        try:
            await self.delete_image(public_id)
        except Exception:
            logger.exception("Failed to delete Cloudinary image %s", public_id)


cloudinary_client = CloudinaryClient()
