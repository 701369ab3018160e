from fastapi import APIRouter, Depends
from fastapi_utils.cbv import cbv
from sqlalchemy.ext.asyncio import AsyncSession

from core.get_current_user import get_current_user
from core.get_db import get_db_async
from core.safe_handler import safe_handler
from models.models import User
from schemas.schema import ReviewCreate, ReviewUpdate
from services.review_service import ReviewService

router = APIRouter(tags=["Reviews"])


@cbv(router)
class ReviewRoutes:
    @router.post("/", status_code=201)
    @safe_handler
    async def create(
        self,
        data: ReviewCreate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await ReviewService(db).create_review(data, current_user)

    @router.get("/property/{property_id}")
    @safe_handler
    async def for_property(
        self,
        property_id: int,
        db: AsyncSession = Depends(get_db_async),
    ):
        return await ReviewService(db).for_property(property_id)

    @router.get("/average/{property_id}")
    @safe_handler
    async def average(
        self,
        property_id: int,
        db: AsyncSession = Depends(get_db_async),
    ):
        return await ReviewService(db).average(property_id)

    @router.put("/{review_id}")
    @safe_handler
    async def update(
        self,
        review_id: int,
        data: ReviewUpdate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await ReviewService(db).update_review(review_id, data, current_user)

    @router.delete("/{review_id}")
    @safe_handler
    async def delete(
        self,
        review_id: int,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await ReviewService(db).delete_review(review_id, current_user)
