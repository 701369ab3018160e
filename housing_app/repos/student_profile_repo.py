from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from models.models import StudentProfile


class StudentProfileRepo:
    def __init__(self, db):
        self.db = db

    async def get_one(self, profile_id: int) -> Optional[StudentProfile]:
        result = await self.db.execute(
            select(StudentProfile).where(StudentProfile.id == profile_id)
        )
        return result.scalar_one_or_none()

    async def get_by_user(self, user_id: int) -> Optional[StudentProfile]:
        result = await self.db.execute(
            select(StudentProfile).where(StudentProfile.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def list_all(self, offset: int = 0, limit: int = 50) -> list[StudentProfile]:
        result = await self.db.execute(
            select(StudentProfile).order_by(StudentProfile.id).offset(offset).limit(limit)
        )
        return list(result.scalars().all())

    async def save(self, profile: StudentProfile) -> StudentProfile:
        self.db.add(profile)
        try:
            await self.db.commit()
            await self.db.refresh(profile)
            return profile
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def delete_one(self, profile_id: int) -> bool:
        try:
            result = await self.db.execute(
                delete(StudentProfile).where(StudentProfile.id == profile_id)
            )
            await self.db.commit()
            return result.rowcount > 0
        except SQLAlchemyError:
            await self.db.rollback()
            raise
