from typing import Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload

from models.models import Review


class ReviewRepo:
    def __init__(self, db):
        self.db = db

    async def get_one(self, review_id: int) -> Optional[Review]:
        result = await self.db.execute(select(Review).where(Review.id == review_id))
        return result.scalar_one_or_none()

    async def get_for_reviewer(self, property_id: int, reviewer_id: int):
        result = await self.db.execute(
            select(Review).where(
                Review.property_id == property_id, Review.reviewer_id == reviewer_id
            )
        )
        return result.scalar_one_or_none()

    async def for_property(
        self, property_id: int, limit: Optional[int] = None, with_reviewer=False
    ) -> list[Review]:
        stmt = select(Review).where(Review.property_id == property_id)
        if with_reviewer:
            stmt = stmt.options(selectinload(Review.reviewer))
        stmt = stmt.order_by(Review.created_at.desc(), Review.id.desc())
        if limit:
            stmt = stmt.limit(limit)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def average(self, property_id: int) -> tuple[Optional[float], int]:
        result = await self.db.execute(
            select(func.avg(Review.rating), func.count(Review.id)).where(
                Review.property_id == property_id
            )
        )
        avg, count = result.one()
        return (round(float(avg), 2) if avg is not None else None), count

    async def save(self, review: Review) -> Review:
        self.db.add(review)
        try:
            await self.db.commit()
            await self.db.refresh(review)
            return review
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def delete_one(self, review_id: int) -> bool:
        try:
            result = await self.db.execute(delete(Review).where(Review.id == review_id))
            await self.db.commit()
            return result.rowcount > 0
        except SQLAlchemyError:
            await self.db.rollback()
            raise
