import logging

from fastapi import HTTPException, UploadFile
from fastapi.responses import JSONResponse

from core.breaker import breaker
from core.check_permission import CheckRolePermission
from core.cloudinary_setup import (
    ALLOWED_IMAGE_TYPES,
    PROPERTY_IMAGE_FOLDER,
    cloudinary_client,
)
from core.mapper import ORMMapper
from core.settings import settings
from repos.property_image_repo import PropertyImageRepo
from repos.property_repo import PropertyRepo
from schemas.schema import PropertyImageOut

logger = logging.getLogger(__name__)


class PropertyImageService:
    def __init__(self, db, client=None):
        self.repo: PropertyImageRepo = PropertyImageRepo(db)
        self.property_repo: PropertyRepo = PropertyRepo(db)
        self.permission: CheckRolePermission = CheckRolePermission()
        self.mapper: ORMMapper = ORMMapper()
        self.client = client or cloudinary_client

    async def _owned_property(self, property_id: int, current_user):
        prop = await self.property_repo.get_by_id(property_id)
        if not prop:
            raise HTTPException(status_code=404, detail="Property not found")
        await self.permission.check_owner_or_admin(
            current_user,
            prop.landlord_id,
            detail="You are not allowed to manage images for this property",
        )
        return prop

    async def _owned_image(self, image_id: int, current_user):
        image = await self.repo.get_one(image_id)
        if not image:
            raise HTTPException(status_code=404, detail="Image not found")
        await self.permission.check_owner_or_admin(
            current_user,
            image.property.landlord_id,
            detail="You are not allowed to manage images for this property",
        )
        return image

    async def upload(
        self, property_id: int, file: UploadFile, is_primary: bool, current_user
    ):
        async def handler():
            await self._owned_property(property_id, current_user)
            if file.content_type not in ALLOWED_IMAGE_TYPES:
                raise HTTPException(
                    status_code=400, detail="Only image files are allowed"
                )
            content = await file.read()
            if not content:
                raise HTTPException(status_code=400, detail="Uploaded file is empty")
            if len(content) > settings.MAX_IMAGE_SIZE:
                raise HTTPException(
                    status_code=400,
                    detail=f"File too large. Maximum size is "
                    f"{settings.MAX_IMAGE_SIZE // (1024 * 1024)}MB",
                )

            uploaded = await self.client.upload_image(
                content, folder=PROPERTY_IMAGE_FOLDER
            )
            image = await self.repo.create(
                property_id=property_id,
                image_url=uploaded["secure_url"],
                public_id=uploaded.get("public_id"),
                is_primary=is_primary,
            )
            logger.info("Image %s added to property %s", image.id, property_id)
            return JSONResponse(
                {"success": True, "data": self.mapper.dump(image, PropertyImageOut)},
                status_code=201,
            )

        return await breaker.call(handler)

    async def for_property(self, property_id: int):
        async def handler():
            images = await self.repo.for_property(property_id)
            return {"success": True, "data": self.mapper.dump_many(images, PropertyImageOut)}

        return await breaker.call(handler)

    async def for_landlord(self, landlord_id: int):
        async def handler():
            images = await self.repo.for_landlord(landlord_id)
            data = [
                self.mapper.dump(
                    image, PropertyImageOut, property_title=image.property.title
                )
                for image in images
            ]
            return {"success": True, "data": data}

        return await breaker.call(handler)

    async def set_primary(self, image_id: int, current_user):
        async def handler():
            image = await self._owned_image(image_id, current_user)
            image = await self.repo.set_primary(image)
            return {"success": True, "data": self.mapper.dump(image, PropertyImageOut)}

        return await breaker.call(handler)

    async def delete(self, image_id: int, current_user):
        async def handler():
            image = await self._owned_image(image_id, current_user)
            public_id = image.public_id
            await self.repo.delete_one(image_id)
            await self.client.safe_delete_image(public_id)
            return {"success": True, "message": "Image deleted"}

        return await breaker.call(handler)
