from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload

from models.enums import InquiryStatus
from models.models import Inquiry, NotificationOutbox, Property

from .outbox_repo import OutboxRepo


class InquiryRepo:
    def __init__(self, db):
        self.db = db
        self.outbox = OutboxRepo(db)

    async def get_one(self, inquiry_id: int) -> Optional[Inquiry]:
        result = await self.db.execute(
            select(Inquiry)
            .options(selectinload(Inquiry.property))
            .where(Inquiry.id == inquiry_id)
        )
        return result.scalar_one_or_none()

    async def list_inquiries(
        self,
        student_id: Optional[int] = None,
        landlord_id: Optional[int] = None,
        property_id: Optional[int] = None,
        status: Optional[InquiryStatus] = None,
    ) -> list[Inquiry]:
        stmt = select(Inquiry)
        if landlord_id is not None:
            stmt = stmt.join(Property, Property.id == Inquiry.property_id).where(
                Property.landlord_id == landlord_id
            )
        if student_id is not None:
            stmt = stmt.where(Inquiry.student_id == student_id)
        if property_id is not None:
            stmt = stmt.where(Inquiry.property_id == property_id)
        if status is not None:
            stmt = stmt.where(Inquiry.status == status)
        result = await self.db.execute(
            stmt.order_by(Inquiry.created_at.desc(), Inquiry.id.desc())
        )
        return list(result.scalars().all())

    async def create(
        self, inquiry: Inquiry, notification
    ) -> tuple[Inquiry, NotificationOutbox]:
        self.db.add(inquiry)
        entry = self.outbox.stage(inquiry.student_id, notification)
        return await self._commit(inquiry, entry)

    async def update(
        self, inquiry: Inquiry, values: dict, notification=None
    ) -> tuple[Inquiry, Optional[NotificationOutbox]]:
        for key, value in values.items():
            setattr(inquiry, key, value)
        entry = None
        if notification is not None:
            entry = self.outbox.stage(inquiry.student_id, notification)
        return await self._commit(inquiry, entry)

    async def delete(self, inquiry: Inquiry, notification) -> NotificationOutbox:
        entry = self.outbox.stage(inquiry.student_id, notification)
        await self.db.delete(inquiry)
        try:
            await self.db.commit()
            return entry
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def _commit(self, inquiry: Inquiry, entry: Optional[NotificationOutbox]):
        try:
            await self.db.commit()
            await self.db.refresh(inquiry)
            return inquiry, entry
        except SQLAlchemyError:
            await self.db.rollback()
            raise
