from fastapi import APIRouter, Depends
from fastapi_utils.cbv import cbv
from sqlalchemy.ext.asyncio import AsyncSession

from core.get_db import get_db_async
from core.safe_handler import safe_handler
from services.details_service import DetailsService

router = APIRouter(tags=["Property Details View"])


@cbv(router)
class DetailsRoutes:
    @router.get("/{property_id}")
    @safe_handler
    async def get(
        self,
        property_id: int,
        db: AsyncSession = Depends(get_db_async),
    ):
        return await DetailsService(db).property_details(property_id)
