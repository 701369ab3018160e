from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi_utils.cbv import cbv
from sqlalchemy.ext.asyncio import AsyncSession

from core.get_current_user import get_current_user, require_admin
from core.get_db import get_db_async
from core.safe_handler import safe_handler
from models.enums import UserRole
from models.models import User
from schemas.schema import UserUpdate
from services.user_service import UserService

router = APIRouter(tags=["Users"])


@cbv(router)
class UserManagementRoutes:
    @router.get("/")
    @safe_handler
    async def list_users(
        self,
        role: Optional[UserRole] = None,
        page: int = Query(1, ge=1),
        per_page: int = Query(20, ge=1, le=100),
        db: AsyncSession = Depends(get_db_async),
        _: User = Depends(require_admin),
    ):
        return await UserService(db).list_users(role=role, page=page, per_page=per_page)

    @router.get("/{user_id}")
    @safe_handler
    async def get_user(
        self,
        user_id: int,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await UserService(db).get_user(user_id, current_user)

    @router.patch("/{user_id}")
    @safe_handler
    async def update_user(
        self,
        user_id: int,
        data: UserUpdate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await UserService(db).update_user(user_id, data, current_user)

    @router.delete("/{user_id}")
    @safe_handler
    async def delete_user(
        self,
        user_id: int,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await UserService(db).delete_user(user_id, current_user)
