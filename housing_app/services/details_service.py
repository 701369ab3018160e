from fastapi.responses import JSONResponse

from core.breaker import breaker
from repos.property_repo import PropertyRepo
from repos.review_repo import ReviewRepo

from .listing_service import full_projection

RECENT_REVIEW_LIMIT = 10


class DetailsService:
    def __init__(self, db):
        self.repo: PropertyRepo = PropertyRepo(db)
        self.review_repo: ReviewRepo = ReviewRepo(db)

    async def property_details(self, property_id: int):
        async def handler():
            prop = await self.repo.get_property_with_relations(property_id)
            if not prop:
                return JSONResponse(
                    {"success": False, "error": "Property not found"}, status_code=404
                )

            average, count = await self.review_repo.average(property_id)
            inquiries = await self.repo.inquiry_counts([property_id])
            reviews = await self.review_repo.for_property(
                property_id, limit=RECENT_REVIEW_LIMIT, with_reviewer=True
            )

            data = full_projection(
                prop, rating=average, inquiry_count=inquiries.get(property_id, 0)
            )
            data["review_count"] = count
            data["reviews"] = [
                {
                    "id": r.id,
                    "rating": r.rating,
                    "comment": r.comment,
                    "reviewer_id": r.reviewer_id,
                    "reviewer_name": r.reviewer.full_name if r.reviewer else None,
                    "created_at": r.created_at.isoformat() if r.created_at else None,
                }
                for r in reviews
            ]
            return {"success": True, "data": data}

        return await breaker.call(handler)
