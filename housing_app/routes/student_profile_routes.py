from fastapi import APIRouter, Depends, Query
from fastapi_utils.cbv import cbv
from sqlalchemy.ext.asyncio import AsyncSession

from core.get_current_user import get_current_user, require_admin, require_student
from core.get_db import get_db_async
from core.safe_handler import safe_handler
from models.models import User
from schemas.schema import StudentProfileCreate, StudentProfileUpdate
from services.student_profile_service import StudentProfileService

router = APIRouter(tags=["Student Profiles"])


@cbv(router)
class StudentProfileRoutes:
    @router.post("/", status_code=201)
    @safe_handler
    async def create(
        self,
        data: StudentProfileCreate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(require_student),
    ):
        return await StudentProfileService(db).create_profile(data, current_user)

    @router.get("/")
    @safe_handler
    async def list_profiles(
        self,
        page: int = Query(1, ge=1),
        per_page: int = Query(50, ge=1, le=100),
        db: AsyncSession = Depends(get_db_async),
        _: User = Depends(require_admin),
    ):
        return await StudentProfileService(db).list_profiles(page, per_page)

    @router.get("/me")
    @safe_handler
    async def me(
        self,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await StudentProfileService(db).my_profile(current_user)

    @router.get("/{profile_id}")
    @safe_handler
    async def get_profile(
        self,
        profile_id: int,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await StudentProfileService(db).get_profile(profile_id, current_user)

    @router.put("/{profile_id}")
    @safe_handler
    async def update(
        self,
        profile_id: int,
        data: StudentProfileUpdate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await StudentProfileService(db).update_profile(
            profile_id, data, current_user
        )

    @router.delete("/{profile_id}")
    @safe_handler
    async def delete(
        self,
        profile_id: int,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await StudentProfileService(db).delete_profile(profile_id, current_user)
