from fastapi import HTTPException

from core.breaker import breaker
from core.check_permission import CheckRolePermission
from core.mapper import ORMMapper
from repos.property_details_repo import PropertyDetailsRepo
from repos.property_repo import PropertyRepo
from schemas.schema import PropertyDetailsOut


class PropertyDetailsService:
    def __init__(self, db):
        self.repo: PropertyDetailsRepo = PropertyDetailsRepo(db)
        self.property_repo: PropertyRepo = PropertyRepo(db)
        self.permission: CheckRolePermission = CheckRolePermission()
        self.mapper: ORMMapper = ORMMapper()

    async def get_details(self, property_id: int):
        async def handler():
            if not await self.property_repo.get_by_id(property_id):
                raise HTTPException(status_code=404, detail="Property not found")
            details = await self.repo.get_for_property(property_id)
            if not details:
                raise HTTPException(status_code=404, detail="Property details not found")
            return {"success": True, "data": self.mapper.dump(details, PropertyDetailsOut)}

        return await breaker.call(handler)

    async def upsert_details(self, property_id: int, data, current_user):
        async def handler():
            prop = await self.property_repo.get_by_id(property_id)
            if not prop:
                raise HTTPException(status_code=404, detail="Property not found")
            await self.permission.check_owner_or_admin(
                current_user,
                prop.landlord_id,
                detail="You are not allowed to modify this property",
            )
            details = await self.repo.upsert(
                property_id, **data.model_dump(exclude_unset=True)
            )
            return {"success": True, "data": self.mapper.dump(details, PropertyDetailsOut)}

        return await breaker.call(handler)
