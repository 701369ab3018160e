import logging

from fastapi import HTTPException

from core.breaker import breaker
from core.check_permission import CheckRolePermission
from repos.property_repo import ListingFilters, PropertyRepo

logger = logging.getLogger(__name__)


def _float(value):
    return float(value) if value is not None else None


def map_projection(prop) -> dict:
    return {
        "property_id": prop.id,
        "title": prop.title,
        "address": prop.address,
        "monthly_rent": _float(prop.monthly_rent),
        "latitude": _float(prop.latitude),
        "longitude": _float(prop.longitude),
        "target_university": prop.target_university,
        "image_url": prop.primary_image_url,
    }


def full_projection(prop, rating=None, inquiry_count: int = 0) -> dict:
    payload = map_projection(prop)
    details = prop.details
    landlord = prop.landlord
    payload.update(
        {
            "description": prop.description,
            "property_type": prop.property_type.value,
            "is_available": prop.is_available,
            "created_at": prop.created_at.isoformat() if prop.created_at else None,
            "details": {
                "bedrooms": details.bedrooms,
                "bathrooms": details.bathrooms,
                "square_meters": details.square_meters,
                "furnished": details.furnished,
                "amenities": details.amenities or [],
                "rules": details.rules or [],
            }
            if details
            else None,
            "images": [
                {"id": image.id, "image_url": image.image_url, "is_primary": image.is_primary}
                for image in prop.images
            ],
            "landlord": {
                "id": landlord.id,
                "name": landlord.full_name,
                "email": landlord.email,
                "phone_number": landlord.phone_number,
                "response_rate": 0,
                "response_time": "N/A",
            }
            if landlord
            else None,
            "average_rating": rating,
            "inquiry_count": inquiry_count,
        }
    )
    return payload


class ListingService:
    def __init__(self, db):
        self.repo: PropertyRepo = PropertyRepo(db)
        self.permission: CheckRolePermission = CheckRolePermission()

    async def student_view(
        self, filters: ListingFilters, limit: int, offset: int, map_only: bool = False
    ):
        async def handler():
            properties, total = await self.repo.search_listing(
                filters, offset=offset, limit=limit, map_only=map_only
            )
            universities = await self.repo.available_universities()

            if map_only:
                data = [map_projection(p) for p in properties]
            else:
                ids = [p.id for p in properties]
                ratings = await self.repo.rating_stats(ids)
                inquiries = await self.repo.inquiry_counts(ids)
                data = [
                    full_projection(
                        p,
                        rating=ratings.get(p.id, (None, 0))[0],
                        inquiry_count=inquiries.get(p.id, 0),
                    )
                    for p in properties
                ]

            logger.debug("Listing returned %s of %s properties", len(data), total)
            return {
                "success": True,
                "data": {
                    "properties": data,
                    "total_count": total,
                    "has_more": offset + len(data) < total,
                    "universities": universities,
                },
            }

        return await breaker.call(handler)

    async def set_published(self, property_id: int, published: bool, current_user):
        async def handler():
            prop = await self.repo.get_by_id(property_id)
            if not prop:
                raise HTTPException(status_code=404, detail="Property not found")
            await self.permission.check_owner_or_admin(
                current_user,
                prop.landlord_id,
                detail="You are not allowed to modify this property",
            )
            await self.repo.update(prop, is_available=published)
            logger.info(
                "Property %s %s", property_id, "published" if published else "unpublished"
            )
            return {
                "success": True,
                "message": "Property published" if published else "Property unpublished",
                "property": {"property_id": prop.id, "is_available": prop.is_available},
            }

        return await breaker.call(handler)
