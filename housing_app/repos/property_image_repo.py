from typing import Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload

from models.models import Property, PropertyImage


class PropertyImageRepo:
    def __init__(self, db):
        self.db = db

    async def get_one(self, image_id: int) -> Optional[PropertyImage]:
        result = await self.db.execute(
            select(PropertyImage)
            .options(selectinload(PropertyImage.property))
            .where(PropertyImage.id == image_id)
        )
        return result.scalar_one_or_none()

    async def for_property(self, property_id: int) -> list[PropertyImage]:
        result = await self.db.execute(
            select(PropertyImage)
            .where(PropertyImage.property_id == property_id)
            .order_by(PropertyImage.is_primary.desc(), PropertyImage.id)
        )
        return list(result.scalars().all())

    async def for_landlord(self, landlord_id: int) -> list[PropertyImage]:
        result = await self.db.execute(
            select(PropertyImage)
            .join(Property, Property.id == PropertyImage.property_id)
            .options(selectinload(PropertyImage.property))
            .where(Property.landlord_id == landlord_id)
            .order_by(PropertyImage.property_id, PropertyImage.id)
        )
        return list(result.scalars().all())

    async def create(
        self,
        property_id: int,
        image_url: str,
        public_id: Optional[str],
        is_primary: bool,
    ) -> PropertyImage:
        try:
            if is_primary:
                await self._unset_primary(property_id)
            image = PropertyImage(
                property_id=property_id,
                image_url=image_url,
                public_id=public_id,
                is_primary=is_primary,
            )
            self.db.add(image)
            await self.db.commit()
            await self.db.refresh(image)
            return image
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def set_primary(self, image: PropertyImage) -> PropertyImage:
        try:
            await self._unset_primary(image.property_id)
            image.is_primary = True
            await self.db.commit()
            await self.db.refresh(image)
            return image
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def delete_one(self, image_id: int) -> bool:
        try:
            result = await self.db.execute(
                delete(PropertyImage).where(PropertyImage.id == image_id)
            )
            await self.db.commit()
            return result.rowcount > 0
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def _unset_primary(self, property_id: int):
        await self.db.execute(
            update(PropertyImage)
            .where(
                PropertyImage.property_id == property_id,
                PropertyImage.is_primary.is_(True),
            )
            .values(is_primary=False)
            .execution_options(synchronize_session="fetch")
        )
