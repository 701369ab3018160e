from fastapi import APIRouter, Depends
from fastapi_utils.cbv import cbv
from sqlalchemy.ext.asyncio import AsyncSession

from core.get_current_user import get_current_user, require_admin
from core.get_db import get_db_async
from core.safe_handler import safe_handler
from models.models import User
from schemas.schema import LandlordApproval, UserCreate, UserLoginInput
from services.auth_service import AuthService

router = APIRouter(tags=["User Authentication"])


@cbv(router)
class UserRoutes:
    @router.post("/register", status_code=201)
    @safe_handler
    async def register(
        self,
        data: UserCreate,
        db: AsyncSession = Depends(get_db_async),
    ):
        return await AuthService(db).register(data)

    @router.post("/login")
    @safe_handler
    async def login(
        self,
        data: UserLoginInput,
        db: AsyncSession = Depends(get_db_async),
    ):
        return await AuthService(db).login(data)

    @router.patch("/landlords/{landlord_id}/approve")
    @safe_handler
    async def approve_landlord(
        self,
        landlord_id: int,
        data: LandlordApproval,
        db: AsyncSession = Depends(get_db_async),
        _: User = Depends(require_admin),
    ):
        return await AuthService(db).set_landlord_approval(landlord_id, data.approved)

    @router.get("/landlords/pending")
    @safe_handler
    async def pending_landlords(
        self,
        db: AsyncSession = Depends(get_db_async),
        _: User = Depends(require_admin),
    ):
        return await AuthService(db).pending_landlords()

    @router.get("/approval-status/{email}")
    @safe_handler
    async def approval_status(
        self,
        email: str,
        db: AsyncSession = Depends(get_db_async),
    ):
        return await AuthService(db).approval_status(email)

    @router.get("/check-auth")
    @safe_handler
    async def check_auth(
        self,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await AuthService(db).check_auth(current_user)

    @router.get("/students/{student_id}")
    @safe_handler
    async def get_student(
        self,
        student_id: int,
        db: AsyncSession = Depends(get_db_async),
        _: User = Depends(get_current_user),
    ):
        return await AuthService(db).get_student(student_id)

    @router.get("/stats/user-types")
    @safe_handler
    async def user_type_stats(
        self,
        db: AsyncSession = Depends(get_db_async),
        _: User = Depends(require_admin),
    ):
        return await AuthService(db).user_type_stats()
