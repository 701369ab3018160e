from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload

from models.enums import PropertyType
from models.models import Inquiry, Property, PropertyDetails, Review


@dataclass
class ListingFilters:
    property_type: Optional[PropertyType] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    bedrooms: Optional[int] = None
    university: Optional[str] = None
    ne_lat: Optional[float] = None
    ne_lng: Optional[float] = None
    sw_lat: Optional[float] = None
    sw_lng: Optional[float] = None

    @property
    def has_bounds(self) -> bool:
        return None not in (self.ne_lat, self.ne_lng, self.sw_lat, self.sw_lng)


class PropertyRepo:
    def __init__(self, db):
        self.db = db

    async def get_by_id(self, property_id: int) -> Optional[Property]:
        result = await self.db.execute(
            select(Property).where(Property.id == property_id)
        )
        return result.scalar_one_or_none()

    async def get_property_with_relations(self, property_id: int) -> Optional[Property]:
        result = await self.db.execute(
            select(Property)
            .options(
                selectinload(Property.details),
                selectinload(Property.images),
                selectinload(Property.landlord),
            )
            .where(Property.id == property_id)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def list_properties(
        self,
        offset: int = 0,
        limit: int = 20,
        landlord_id: Optional[int] = None,
        include_drafts: bool = True,
        with_landlord: bool = False,
    ) -> tuple[list[Property], int]:
        conditions = []
        if landlord_id is not None:
            conditions.append(Property.landlord_id == landlord_id)
        if not include_drafts:
            conditions.append(Property.is_available.is_(True))

        stmt = select(Property).where(*conditions)
        if with_landlord:
            stmt = stmt.options(selectinload(Property.landlord))
        result = await self.db.execute(
            stmt.order_by(Property.id.desc()).offset(offset).limit(limit)
        )
        total = (
            await self.db.execute(select(func.count(Property.id)).where(*conditions))
        ).scalar_one()
        return list(result.scalars().all()), total

    async def create(
        self, prop: Property, details: Optional[dict] = None
    ) -> Property:
        self.db.add(prop)
        try:
            if details is not None:
                await self.db.flush()
                self.db.add(PropertyDetails(property_id=prop.id, **details))
            await self.db.commit()
            await self.db.refresh(prop)
            return prop
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def update(self, prop: Property, **values) -> Property:
        for key, value in values.items():
            setattr(prop, key, value)
        try:
            await self.db.commit()
            await self.db.refresh(prop)
            return prop
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def delete(self, property_id: int) -> bool:
        try:
            result = await self.db.execute(
                delete(Property).where(Property.id == property_id)
            )
            await self.db.commit()
            return result.rowcount > 0
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def missing_coordinates(self) -> list[Property]:
        result = await self.db.execute(
            select(Property)
            .where(or_(Property.latitude.is_(None), Property.longitude.is_(None)))
            .order_by(Property.id)
        )
        return list(result.scalars().all())

    async def random_available(self, count: int) -> list[Property]:
        result = await self.db.execute(
            select(Property)
            .options(selectinload(Property.images))
            .where(Property.is_available.is_(True))
            .order_by(func.random())
            .limit(count)
        )
        return list(result.scalars().all())

    async def within_box(
        self, min_lat: float, max_lat: float, min_lng: float, max_lng: float
    ) -> list[Property]:
        result = await self.db.execute(
            select(Property).where(
                Property.latitude.is_not(None),
                Property.longitude.is_not(None),
                Property.latitude.between(min_lat, max_lat),
                Property.longitude.between(min_lng, max_lng),
            )
        )
        return list(result.scalars().all())

    async def counts(self) -> dict[str, int]:
        total = (await self.db.execute(select(func.count(Property.id)))).scalar_one()
        available = (
            await self.db.execute(
                select(func.count(Property.id)).where(Property.is_available.is_(True))
            )
        ).scalar_one()
        return {"total": total, "available": available}

    async def type_stats(self) -> dict[str, int]:
        result = await self.db.execute(
            select(Property.property_type, func.count(Property.id)).group_by(
                Property.property_type
            )
        )
        stats = {p.value: 0 for p in PropertyType}
        for property_type, count in result.all():
            stats[PropertyType(property_type).value] = count
        return stats

    def _listing_conditions(self, filters: ListingFilters) -> list:
        conditions = [Property.is_available.is_(True)]
        if filters.property_type is not None:
            conditions.append(Property.property_type == filters.property_type)
        if filters.min_price is not None:
            conditions.append(Property.monthly_rent >= Decimal(str(filters.min_price)))
        if filters.max_price is not None:
            conditions.append(Property.monthly_rent <= Decimal(str(filters.max_price)))
        if filters.university:
            conditions.append(Property.target_university == filters.university)
        if filters.has_bounds:
            conditions.append(
                Property.latitude.between(
                    min(filters.ne_lat, filters.sw_lat),
                    max(filters.ne_lat, filters.sw_lat),
                )
            )
            conditions.append(
                Property.longitude.between(
                    min(filters.ne_lng, filters.sw_lng),
                    max(filters.ne_lng, filters.sw_lng),
                )
            )
        if filters.bedrooms is not None:
            conditions.append(PropertyDetails.bedrooms == filters.bedrooms)
        return conditions

    async def search_listing(
        self,
        filters: ListingFilters,
        offset: int,
        limit: int,
        map_only: bool = False,
    ) -> tuple[list[Property], int]:
        conditions = self._listing_conditions(filters)

        stmt = select(Property)
        count_stmt = select(func.count(Property.id)).select_from(Property)
        if filters.bedrooms is not None:
            stmt = stmt.join(PropertyDetails, PropertyDetails.property_id == Property.id)
            count_stmt = count_stmt.join(
                PropertyDetails, PropertyDetails.property_id == Property.id
            )

        if map_only:
            stmt = stmt.options(selectinload(Property.images))
        else:
            stmt = stmt.options(
                selectinload(Property.details),
                selectinload(Property.images),
                selectinload(Property.landlord),
            )

        result = await self.db.execute(
            stmt.where(*conditions)
            .order_by(Property.created_at.desc(), Property.id.desc())
            .offset(offset)
            .limit(limit)
        )
        total = (await self.db.execute(count_stmt.where(*conditions))).scalar_one()
        return list(result.scalars().all()), total

    async def available_universities(self) -> list[str]:
        result = await self.db.execute(
            select(Property.target_university)
            .where(
                Property.is_available.is_(True),
                Property.target_university.is_not(None),
            )
            .distinct()
            .order_by(Property.target_university)
        )
        return [u for u in result.scalars().all() if u]

    async def rating_stats(self, property_ids: list[int]) -> dict[int, tuple]:
        if not property_ids:
            return {}
        result = await self.db.execute(
            select(Review.property_id, func.avg(Review.rating), func.count(Review.id))
            .where(Review.property_id.in_(property_ids))
            .group_by(Review.property_id)
        )
        return {
            pid: (round(float(avg), 2) if avg is not None else None, count)
            for pid, avg, count in result.all()
        }

    async def inquiry_counts(self, property_ids: list[int]) -> dict[int, int]:
        if not property_ids:
            return {}
        result = await self.db.execute(
            select(Inquiry.property_id, func.count(Inquiry.id))
            .where(Inquiry.property_id.in_(property_ids))
            .group_by(Inquiry.property_id)
        )
        return {pid: count for pid, count in result.all()}
