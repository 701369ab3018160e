from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi_utils.cbv import cbv
from sqlalchemy.ext.asyncio import AsyncSession

from core.get_current_user import require_landlord
from core.get_db import get_db_async
from core.safe_handler import safe_handler
from models.models import User
from services.property_image_service import PropertyImageService

router = APIRouter(tags=["Property Images"])


@cbv(router)
class PropertyImageRoutes:
    @router.post("/", status_code=201)
    @safe_handler
    async def upload(
        self,
        property_id: int = Form(...),
        is_primary: bool = Form(False),
        file: UploadFile = File(...),
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(require_landlord),
    ):
        return await PropertyImageService(db).upload(
            property_id=property_id,
            file=file,
            is_primary=is_primary,
            current_user=current_user,
        )

    @router.get("/property/{property_id}")
    @safe_handler
    async def for_property(
        self,
        property_id: int,
        db: AsyncSession = Depends(get_db_async),
    ):
        return await PropertyImageService(db).for_property(property_id)

    @router.get("/landlord/{landlord_id}")
    @safe_handler
    async def for_landlord(
        self,
        landlord_id: int,
        db: AsyncSession = Depends(get_db_async),
    ):
        return await PropertyImageService(db).for_landlord(landlord_id)

    @router.patch("/{image_id}/primary")
    @safe_handler
    async def set_primary(
        self,
        image_id: int,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(require_landlord),
    ):
        return await PropertyImageService(db).set_primary(image_id, current_user)

    @router.delete("/{image_id}")
    @safe_handler
    async def delete(
        self,
        image_id: int,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(require_landlord),
    ):
        return await PropertyImageService(db).delete(image_id, current_user)
