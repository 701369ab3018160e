from fastapi import Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.models import User

from .check_permission import CheckRolePermission
from .get_db import get_db_async
from .validators import jwt_protect

permission = CheckRolePermission()


async def get_current_user(
    user_id: int = Depends(jwt_protect), db: AsyncSession = Depends(get_db_async)
) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalars().first()

    if not user:
        raise HTTPException(status_code=401, detail="Not authenticated")

    return user


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    await permission.check_admin(current_user)
    return current_user


async def require_landlord(current_user: User = Depends(get_current_user)) -> User:
    await permission.check_landlord(current_user)
    return current_user


async def require_student(current_user: User = Depends(get_current_user)) -> User:
    await permission.check_student(current_user)
    return current_user
