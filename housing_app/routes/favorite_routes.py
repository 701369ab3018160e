from fastapi import APIRouter, Depends
from fastapi_utils.cbv import cbv
from sqlalchemy.ext.asyncio import AsyncSession

from core.get_current_user import get_current_user
from core.get_db import get_db_async
from core.safe_handler import safe_handler
from models.models import User
from schemas.schema import FavoriteCreate
from services.favorite_service import FavoriteService

router = APIRouter(tags=["Favorites"])


@cbv(router)
class FavoriteRoutes:
    @router.post("/", status_code=201)
    @safe_handler
    async def add(
        self,
        data: FavoriteCreate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await FavoriteService(db).add_favorite(data, current_user)

    @router.get("/")
    @safe_handler
    async def list_favorites(
        self,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await FavoriteService(db).list_favorites(current_user)

    @router.delete("/{favorite_id}")
    @safe_handler
    async def remove(
        self,
        favorite_id: int,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await FavoriteService(db).remove_favorite(favorite_id, current_user)
