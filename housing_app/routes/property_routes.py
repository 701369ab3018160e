from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi_utils.cbv import cbv
from sqlalchemy.ext.asyncio import AsyncSession

from core.get_current_user import get_current_user, require_admin, require_landlord
from core.get_db import get_db_async
from core.safe_handler import safe_handler
from geocoders.resolver import GeocodeResolver, get_geocode_resolver
from models.models import User
from schemas.schema import GeocodeRequest, PropertyCreate, PropertyUpdate
from services.property_service import PropertyService

router = APIRouter(tags=["Property Management"])


@cbv(router=router)
class PropertyRoutes:
    @router.post("/", status_code=201)
    @safe_handler
    async def create(
        self,
        data: PropertyCreate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(require_landlord),
        resolver: GeocodeResolver = Depends(get_geocode_resolver),
    ):
        return await PropertyService(db).create_property(
            data=data, current_user=current_user, resolver=resolver
        )

    @router.post("/draft", status_code=201)
    @safe_handler
    async def create_draft(
        self,
        data: PropertyCreate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(require_landlord),
        resolver: GeocodeResolver = Depends(get_geocode_resolver),
    ):
        return await PropertyService(db).create_draft(
            data=data, current_user=current_user, resolver=resolver
        )

    @router.get("/")
    @safe_handler
    async def list_properties(
        self,
        page: int = Query(1, ge=1),
        per_page: int = Query(20, ge=1, le=100),
        landlord_id: Optional[int] = None,
        db: AsyncSession = Depends(get_db_async),
    ):
        return await PropertyService(db).list_properties(
            page=page, per_page=per_page, landlord_id=landlord_id
        )

    @router.post("/geocode")
    @safe_handler
    async def geocode(
        self,
        data: GeocodeRequest,
        db: AsyncSession = Depends(get_db_async),
        _: User = Depends(get_current_user),
        resolver: GeocodeResolver = Depends(get_geocode_resolver),
    ):
        return await PropertyService(db).geocode(data.address, resolver)

    @router.post("/batch-geocode")
    @safe_handler
    async def batch_geocode(
        self,
        db: AsyncSession = Depends(get_db_async),
        _: User = Depends(require_admin),
        resolver: GeocodeResolver = Depends(get_geocode_resolver),
    ):
        return await PropertyService(db).batch_geocode(resolver)

    @router.get("/random")
    @safe_handler
    async def random_properties(
        self,
        count: int = Query(6, ge=1, le=50),
        db: AsyncSession = Depends(get_db_async),
    ):
        return await PropertyService(db).random_properties(count)

    @router.get("/nearby")
    @safe_handler
    async def nearby(
        self,
        lat: float,
        lng: float,
        radius: float = Query(5, gt=0),
        db: AsyncSession = Depends(get_db_async),
    ):
        return await PropertyService(db).nearby(lat, lng, radius)

    @router.get("/count")
    @safe_handler
    async def count(self, db: AsyncSession = Depends(get_db_async)):
        return await PropertyService(db).counts()

    @router.get("/type-stats")
    @safe_handler
    async def type_stats(self, db: AsyncSession = Depends(get_db_async)):
        return await PropertyService(db).type_stats()

    @router.get("/types")
    @safe_handler
    async def property_types(self, db: AsyncSession = Depends(get_db_async)):
        return await PropertyService(db).property_types()

    @router.get("/admin/all")
    @safe_handler
    async def admin_all(
        self,
        page: int = Query(1, ge=1),
        per_page: int = Query(20, ge=1, le=100),
        db: AsyncSession = Depends(get_db_async),
        _: User = Depends(require_admin),
    ):
        return await PropertyService(db).admin_all(page=page, per_page=per_page)

    @router.get("/{property_id}")
    @safe_handler
    async def get_property(
        self,
        property_id: int,
        db: AsyncSession = Depends(get_db_async),
    ):
        return await PropertyService(db).get_property(property_id)

    @router.put("/{property_id}")
    @safe_handler
    async def update(
        self,
        property_id: int,
        data: PropertyUpdate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(require_landlord),
        resolver: GeocodeResolver = Depends(get_geocode_resolver),
    ):
        return await PropertyService(db).update_property(
            property_id=property_id,
            data=data,
            current_user=current_user,
            resolver=resolver,
        )

    @router.delete("/{property_id}")
    @safe_handler
    async def delete_property(
        self,
        property_id: int,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(require_landlord),
    ):
        return await PropertyService(db).delete_property(
            property_id=property_id, current_user=current_user
        )
