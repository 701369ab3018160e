from fastapi import APIRouter, Depends
from fastapi_utils.cbv import cbv
from sqlalchemy.ext.asyncio import AsyncSession

from core.get_current_user import require_landlord
from core.get_db import get_db_async
from core.safe_handler import safe_handler
from models.models import User
from schemas.schema import PropertyDetailsUpdate
from services.property_details_service import PropertyDetailsService

router = APIRouter(tags=["Property Details"])


@cbv(router)
class PropertyDetailsRoutes:
    @router.get("/{property_id}")
    @safe_handler
    async def get(
        self,
        property_id: int,
        db: AsyncSession = Depends(get_db_async),
    ):
        return await PropertyDetailsService(db).get_details(property_id)

    @router.put("/{property_id}")
    @safe_handler
    async def upsert(
        self,
        property_id: int,
        data: PropertyDetailsUpdate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(require_landlord),
    ):
        return await PropertyDetailsService(db).upsert_details(
            property_id, data, current_user
        )
