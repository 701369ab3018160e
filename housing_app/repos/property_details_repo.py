from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from models.models import PropertyDetails


class PropertyDetailsRepo:
    def __init__(self, db):
        self.db = db

    async def get_for_property(self, property_id: int) -> Optional[PropertyDetails]:
        result = await self.db.execute(
            select(PropertyDetails).where(PropertyDetails.property_id == property_id)
        )
        return result.scalar_one_or_none()

    async def upsert(self, property_id: int, **values) -> PropertyDetails:
        details = await self.get_for_property(property_id)
        if details is None:
            details = PropertyDetails(
                property_id=property_id,
                bedrooms=0,
                bathrooms=0,
                furnished=False,
                amenities=[],
                rules=[],
            )
            self.db.add(details)
        for key, value in values.items():
            setattr(details, key, value)
        try:
            await self.db.commit()
            await self.db.refresh(details)
            return details
        except SQLAlchemyError:
            await self.db.rollback()
            raise
