import logging

from fastapi import HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from core.breaker import breaker
from core.check_permission import CheckRolePermission
from core.mapper import ORMMapper
from models.models import Review
from repos.property_repo import PropertyRepo
from repos.review_repo import ReviewRepo
from schemas.schema import ReviewOut

logger = logging.getLogger(__name__)

DUPLICATE_REVIEW = "You have already reviewed this property"


class ReviewService:
    def __init__(self, db):
        self.repo: ReviewRepo = ReviewRepo(db)
        self.property_repo: PropertyRepo = PropertyRepo(db)
        self.permission: CheckRolePermission = CheckRolePermission()
        self.mapper: ORMMapper = ORMMapper()

    async def _get_owned(self, review_id: int, current_user) -> Review:
        review = await self.repo.get_one(review_id)
        if not review:
            raise HTTPException(status_code=404, detail="Review not found")
        await self.permission.check_owner_or_admin(
            current_user,
            review.reviewer_id,
            detail="You can only modify your own reviews",
        )
        return review

    async def create_review(self, data, current_user):
        async def handler():
            if not await self.property_repo.get_by_id(data.property_id):
                raise HTTPException(status_code=404, detail="Property not found")
            if await self.repo.get_for_reviewer(data.property_id, current_user.id):
                raise HTTPException(status_code=409, detail=DUPLICATE_REVIEW)

            review = Review(
                property_id=data.property_id,
                reviewer_id=current_user.id,
                rating=data.rating,
                comment=data.comment,
            )
            try:
                review = await self.repo.save(review)
            except IntegrityError:
                raise HTTPException(status_code=409, detail=DUPLICATE_REVIEW)
            return JSONResponse(
                {"success": True, "data": self.mapper.dump(review, ReviewOut)},
                status_code=201,
            )

        return await breaker.call(handler)

    async def for_property(self, property_id: int):
        async def handler():
            reviews = await self.repo.for_property(property_id)
            return {"success": True, "data": self.mapper.dump_many(reviews, ReviewOut)}

        return await breaker.call(handler)

    async def average(self, property_id: int):
        async def handler():
            average, count = await self.repo.average(property_id)
            return {
                "success": True,
                "property_id": property_id,
                "average_rating": average,
                "review_count": count,
            }

        return await breaker.call(handler)

    async def update_review(self, review_id: int, data, current_user):
        async def handler():
            review = await self._get_owned(review_id, current_user)
            update_data = data.model_dump(exclude_unset=True)
            if not update_data:
                raise HTTPException(status_code=400, detail="No fields to update")
            for key, value in update_data.items():
                setattr(review, key, value)
            review = await self.repo.save(review)
            return {"success": True, "data": self.mapper.dump(review, ReviewOut)}

        return await breaker.call(handler)

    async def delete_review(self, review_id: int, current_user):
        async def handler():
            await self._get_owned(review_id, current_user)
            await self.repo.delete_one(review_id)
            return {"success": True, "message": "Review deleted"}

        return await breaker.call(handler)
