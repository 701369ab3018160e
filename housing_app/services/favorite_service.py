from fastapi import HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from core.breaker import breaker
from core.mapper import ORMMapper
from repos.favorite_repo import FavoriteRepo
from repos.property_repo import PropertyRepo
from schemas.schema import FavoriteOut

ALREADY_FAVORITED = "Property already in favorites"


class FavoriteService:
    def __init__(self, db):
        self.repo: FavoriteRepo = FavoriteRepo(db)
        self.property_repo: PropertyRepo = PropertyRepo(db)
        self.mapper: ORMMapper = ORMMapper()

    async def add_favorite(self, data, current_user):
        async def handler():
            if not await self.property_repo.get_by_id(data.property_id):
                raise HTTPException(status_code=404, detail="Property not found")
            if await self.repo.get_for_user(current_user.id, data.property_id):
                raise HTTPException(status_code=409, detail=ALREADY_FAVORITED)
            try:
                favorite = await self.repo.create(current_user.id, data.property_id)
            except IntegrityError:
                raise HTTPException(status_code=409, detail=ALREADY_FAVORITED)
            return JSONResponse(
                {"success": True, "data": self.mapper.dump(favorite, FavoriteOut)},
                status_code=201,
            )

        return await breaker.call(handler)

    async def list_favorites(self, current_user):
        async def handler():
            favorites = await self.repo.for_user(current_user.id)
            return {"success": True, "data": self.mapper.dump_many(favorites, FavoriteOut)}

        return await breaker.call(handler)

    async def remove_favorite(self, favorite_id: int, current_user):
        async def handler():
            favorite = await self.repo.get_one(favorite_id)
            if not favorite or favorite.user_id != current_user.id:
                raise HTTPException(status_code=404, detail="Favorite not found")
            await self.repo.delete_one(favorite_id)
            return {"success": True, "message": "Removed from favorites"}

        return await breaker.call(handler)
