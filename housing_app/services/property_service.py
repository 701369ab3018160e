import asyncio
import logging
from decimal import Decimal
from typing import Optional

from fastapi import HTTPException
from fastapi.responses import JSONResponse

from core.breaker import breaker
from core.check_permission import CheckRolePermission
from core.coordinates import haversine_km, validate_coordinates
from core.mapper import ORMMapper
from core.paginate import PaginatePage
from core.settings import settings
from models.enums import PropertyType
from models.models import Property
from repos.property_repo import PropertyRepo
from schemas.schema import PropertyDetailsOut, PropertyImageOut, PropertyOut

logger = logging.getLogger(__name__)


def to_decimal(value: Optional[float]) -> Optional[Decimal]:
    if value is None:
        return None
    return Decimal(str(round(float(value), 7)))


def _normalize_address(value: Optional[str]) -> str:
    return " ".join((value or "").split()).casefold()


def property_payload(prop: Property, with_relations: bool = False) -> dict:
    payload = PropertyOut.model_validate(prop).model_dump(mode="json")
    if with_relations:
        payload["details"] = (
            PropertyDetailsOut.model_validate(prop.details).model_dump(mode="json")
            if prop.details
            else None
        )
        payload["images"] = [
            PropertyImageOut.model_validate(image).model_dump(mode="json")
            for image in prop.images
        ]
        payload["primary_image_url"] = prop.primary_image_url
    return payload


class PropertyService:
    def __init__(self, db):
        self.repo: PropertyRepo = PropertyRepo(db)
        self.paginate: PaginatePage = PaginatePage()
        self.permission: CheckRolePermission = CheckRolePermission()
        self.mapper: ORMMapper = ORMMapper()

    async def check_owner(self, property_id: int, current_user) -> Property:
        prop = await self.repo.get_by_id(property_id)
        if not prop:
            raise HTTPException(status_code=404, detail="Property not found")
        await self.permission.check_owner_or_admin(
            current_user,
            prop.landlord_id,
            detail="You are not allowed to modify this property",
        )
        return prop

    @staticmethod
    def _checked_coordinates(latitude, longitude) -> tuple[Decimal, Decimal]:
        check = validate_coordinates(latitude, longitude)
        if not check.valid:
            raise HTTPException(status_code=400, detail=check.error)
        return to_decimal(latitude), to_decimal(longitude)

    async def _create(self, data, current_user, resolver, is_available: bool):
        values = data.model_dump(exclude={"details", "latitude", "longitude"})
        values["is_available"] = is_available
        if data.target_university is not None:
            values["target_university"] = data.target_university.value

        if data.latitude is not None or data.longitude is not None:
            values["latitude"], values["longitude"] = self._checked_coordinates(
                data.latitude, data.longitude
            )
        else:
            result = await resolver.resolve(data.address)
            if result.success:
                values["latitude"] = to_decimal(result.latitude)
                values["longitude"] = to_decimal(result.longitude)
            else:
                logger.info(
                    "Creating property without coordinates for %r: %s",
                    data.address,
                    result.error,
                )

        details = data.details.model_dump() if data.details is not None else None
        prop = await self.repo.create(
            Property(landlord_id=current_user.id, **values), details=details
        )
        prop = await self.repo.get_property_with_relations(prop.id)
        logger.info("Property %s created by user %s", prop.id, current_user.id)
        return JSONResponse(
            {
                "success": True,
                "message": "Property created" if is_available else "Draft saved",
                "data": property_payload(prop, with_relations=True),
            },
            status_code=201,
        )

    async def create_property(self, data, current_user, resolver):
        async def handler():
            return await self._create(data, current_user, resolver, data.is_available)

        return await breaker.call(handler)

    async def create_draft(self, data, current_user, resolver):
        async def handler():
            return await self._create(data, current_user, resolver, False)

        return await breaker.call(handler)

    async def list_properties(
        self, page: int = 1, per_page: int = 20, landlord_id: Optional[int] = None
    ):
        async def handler():
            items, total = await self.repo.list_properties(
                offset=self.paginate.offset(page, per_page),
                limit=per_page,
                landlord_id=landlord_id,
            )
            return self.paginate.envelope(
                self.mapper.dump_many(items, PropertyOut), total, page, per_page
            )

        return await breaker.call(handler)

    async def get_property(self, property_id: int):
        async def handler():
            prop = await self.repo.get_property_with_relations(property_id)
            if not prop:
                raise HTTPException(status_code=404, detail="Property not found")
            return {"success": True, "data": property_payload(prop, with_relations=True)}

        return await breaker.call(handler)

    async def update_property(self, property_id: int, data, current_user, resolver):
        async def handler():
            prop = await self.check_owner(property_id, current_user)
            update_data = data.model_dump(exclude_unset=True)
            if not update_data:
                raise HTTPException(status_code=400, detail="No fields to update")

            if "target_university" in update_data and data.target_university:
                update_data["target_university"] = data.target_university.value

            lat = update_data.pop("latitude", None)
            lng = update_data.pop("longitude", None)
            if lat is not None or lng is not None:
                update_data["latitude"], update_data["longitude"] = (
                    self._checked_coordinates(lat, lng)
                )
            elif "address" in update_data and _normalize_address(
                update_data["address"]
            ) != _normalize_address(prop.address):
                result = await resolver.resolve(update_data["address"])
                if not result.success:
                    logger.info(
                        "Geocoding failed for property %s: %s", property_id, result.error
                    )
                    raise HTTPException(
                        status_code=422, detail="Could not geocode address"
                    )
                update_data["latitude"] = to_decimal(result.latitude)
                update_data["longitude"] = to_decimal(result.longitude)

            await self.repo.update(prop, **update_data)
            prop = await self.repo.get_property_with_relations(property_id)
            return {
                "success": True,
                "message": "Property updated",
                "data": property_payload(prop, with_relations=True),
            }

        return await breaker.call(handler)

    async def delete_property(self, property_id: int, current_user):
        async def handler():
            await self.check_owner(property_id, current_user)
            await self.repo.delete(property_id)
            logger.info("Property %s deleted by user %s", property_id, current_user.id)
            return {"success": True, "message": "Property deleted"}

        return await breaker.call(handler)

    async def geocode(self, address: str, resolver):
        result = await resolver.resolve(address)
        return {"success": result.success, "data": result.to_dict()}

    async def batch_geocode(self, resolver, delay: Optional[float] = None):
        async def handler():
            pause = settings.BATCH_GEOCODE_DELAY if delay is None else delay
            pending = [
                (p.id, p.address) for p in await self.repo.missing_coordinates()
            ]
            succeeded = 0
            errors = []

            for index, (property_id, address) in enumerate(pending):
                if index:
                    await asyncio.sleep(pause)
                result = await resolver.resolve(address)
                if not result.success:
                    errors.append(
                        {"property_id": property_id, "address": address, "error": result.error}
                    )
                    continue
                prop = await self.repo.get_by_id(property_id)
                await self.repo.update(
                    prop,
                    latitude=to_decimal(result.latitude),
                    longitude=to_decimal(result.longitude),
                )
                succeeded += 1

            logger.info(
                "Batch geocode finished: %s of %s succeeded", succeeded, len(pending)
            )
            return {
                "success": True,
                "total": len(pending),
                "succeeded": succeeded,
                "failed": len(errors),
                "errors": errors[:10],
            }

        return await breaker.call(handler)

    async def random_properties(self, count: int = 6):
        async def handler():
            items = await self.repo.random_available(count)
            data = []
            for prop in items:
                payload = property_payload(prop)
                payload["image_url"] = prop.primary_image_url
                data.append(payload)
            return {"success": True, "data": data}

        return await breaker.call(handler)

    async def nearby(self, lat: float, lng: float, radius: float = 5):
        async def handler():
            check = validate_coordinates(lat, lng)
            if not check.valid:
                raise HTTPException(status_code=400, detail=check.error)
            if radius <= 0:
                raise HTTPException(status_code=400, detail="Radius must be positive")

            delta = radius / 111
            candidates = await self.repo.within_box(
                lat - delta, lat + delta, lng - delta, lng + delta
            )
            results = []
            for prop in candidates:
                distance = haversine_km(
                    lat, lng, float(prop.latitude), float(prop.longitude)
                )
                if distance <= radius:
                    payload = property_payload(prop)
                    payload["distance_km"] = round(distance, 2)
                    results.append(payload)
            results.sort(key=lambda item: item["distance_km"])
            return {"success": True, "data": results, "count": len(results)}

        return await breaker.call(handler)

    async def counts(self):
        async def handler():
            return {"success": True, "data": await self.repo.counts()}

        return await breaker.call(handler)

    async def type_stats(self):
        async def handler():
            return {"success": True, "data": await self.repo.type_stats()}

        return await breaker.call(handler)

    async def property_types(self):
        return {"success": True, "data": [t.value for t in PropertyType]}

    async def admin_all(self, page: int = 1, per_page: int = 20):
        async def handler():
            items, total = await self.repo.list_properties(
                offset=self.paginate.offset(page, per_page),
                limit=per_page,
                include_drafts=True,
                with_landlord=True,
            )
            data = []
            for prop in items:
                payload = property_payload(prop)
                payload["landlord_email"] = prop.landlord.email if prop.landlord else None
                data.append(payload)
            return self.paginate.envelope(data, total, page, per_page)

        return await breaker.call(handler)
