from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload

from models.models import Favorite


class FavoriteRepo:
    def __init__(self, db):
        self.db = db

    async def get_one(self, favorite_id: int) -> Optional[Favorite]:
        result = await self.db.execute(
            select(Favorite)
            .options(selectinload(Favorite.property))
            .where(Favorite.id == favorite_id)
        )
        return result.scalar_one_or_none()

    async def get_for_user(self, user_id: int, property_id: int) -> Optional[Favorite]:
        result = await self.db.execute(
            select(Favorite).where(
                Favorite.user_id == user_id, Favorite.property_id == property_id
            )
        )
        return result.scalar_one_or_none()

    async def for_user(self, user_id: int) -> list[Favorite]:
        result = await self.db.execute(
            select(Favorite)
            .options(selectinload(Favorite.property))
            .where(Favorite.user_id == user_id)
            .order_by(Favorite.created_at.desc(), Favorite.id.desc())
        )
        return list(result.scalars().all())

    async def create(self, user_id: int, property_id: int) -> Favorite:
        favorite = Favorite(user_id=user_id, property_id=property_id)
        self.db.add(favorite)
        try:
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise
        return await self.get_one(favorite.id)

    async def delete_one(self, favorite_id: int) -> bool:
        try:
            result = await self.db.execute(
                delete(Favorite).where(Favorite.id == favorite_id)
            )
            await self.db.commit()
            return result.rowcount > 0
        except SQLAlchemyError:
            await self.db.rollback()
            raise
