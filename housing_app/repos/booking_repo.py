from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload

from models.enums import BookingStatus
from models.models import Booking, NotificationOutbox, Property

from .outbox_repo import OutboxRepo


class BookingRepo:
    def __init__(self, db):
        self.db = db
        self.outbox = OutboxRepo(db)

    async def get_one(self, booking_id: int) -> Optional[Booking]:
        result = await self.db.execute(
            select(Booking)
            .options(selectinload(Booking.property))
            .where(Booking.id == booking_id)
        )
        return result.scalar_one_or_none()

    async def list_bookings(
        self,
        student_id: Optional[int] = None,
        landlord_id: Optional[int] = None,
        status: Optional[BookingStatus] = None,
    ) -> list[Booking]:
        stmt = select(Booking)
        if landlord_id is not None:
            stmt = stmt.join(Property, Property.id == Booking.property_id).where(
                Property.landlord_id == landlord_id
            )
        if student_id is not None:
            stmt = stmt.where(Booking.student_id == student_id)
        if status is not None:
            stmt = stmt.where(Booking.status == status)
        result = await self.db.execute(
            stmt.order_by(Booking.created_at.desc(), Booking.id.desc())
        )
        return list(result.scalars().all())

    async def create(
        self, booking: Booking, notification
    ) -> tuple[Booking, NotificationOutbox]:
        self.db.add(booking)
        entry = self.outbox.stage(booking.student_id, notification)
        return await self._commit(booking, entry)

    async def update(
        self, booking: Booking, values: dict, notification
    ) -> tuple[Booking, NotificationOutbox]:
        for key, value in values.items():
            setattr(booking, key, value)
        entry = self.outbox.stage(booking.student_id, notification)
        return await self._commit(booking, entry)

    async def delete(self, booking: Booking, notification) -> NotificationOutbox:
        entry = self.outbox.stage(booking.student_id, notification)
        await self.db.delete(booking)
        try:
            await self.db.commit()
            return entry
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def _commit(self, booking: Booking, entry: NotificationOutbox):
        try:
            await self.db.commit()
            await self.db.refresh(booking)
            return booking, entry
        except SQLAlchemyError:
            await self.db.rollback()
            raise
