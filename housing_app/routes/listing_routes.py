from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi_utils.cbv import cbv
from sqlalchemy.ext.asyncio import AsyncSession

from core.get_current_user import require_landlord
from core.get_db import get_db_async
from core.safe_handler import safe_handler
from models.enums import PropertyType, University
from models.models import User
from repos.property_repo import ListingFilters
from services.listing_service import ListingService

router = APIRouter(tags=["Property Listing"])


@cbv(router)
class ListingRoutes:
    @router.get("/student-view")
    @safe_handler
    async def student_view(
        self,
        limit: int = Query(10, gt=0, le=100),
        offset: int = Query(0, ge=0),
        property_type: Optional[PropertyType] = None,
        min_price: Optional[float] = Query(None, ge=0),
        max_price: Optional[float] = Query(None, ge=0),
        bedrooms: Optional[int] = Query(None, ge=0),
        university: Optional[University] = None,
        ne_lat: Optional[float] = Query(None, ge=-90, le=90),
        ne_lng: Optional[float] = Query(None, ge=-180, le=180),
        sw_lat: Optional[float] = Query(None, ge=-90, le=90),
        sw_lng: Optional[float] = Query(None, ge=-180, le=180),
        map_only: bool = False,
        db: AsyncSession = Depends(get_db_async),
    ):
        filters = ListingFilters(
            property_type=property_type,
            min_price=min_price,
            max_price=max_price,
            bedrooms=bedrooms,
            university=university.value if university else None,
            ne_lat=ne_lat,
            ne_lng=ne_lng,
            sw_lat=sw_lat,
            sw_lng=sw_lng,
        )
        return await ListingService(db).student_view(
            filters, limit=limit, offset=offset, map_only=map_only
        )

    @router.patch("/{property_id}/publish")
    @safe_handler
    async def publish(
        self,
        property_id: int,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(require_landlord),
    ):
        return await ListingService(db).set_published(property_id, True, current_user)

    @router.patch("/{property_id}/unpublish")
    @safe_handler
    async def unpublish(
        self,
        property_id: int,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(require_landlord),
    ):
        return await ListingService(db).set_published(property_id, False, current_user)
