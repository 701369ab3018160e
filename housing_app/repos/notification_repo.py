from typing import Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError

from models.models import Notification


class NotificationRepo:
    def __init__(self, db):
        self.db = db

    async def get_one(self, notification_id: int) -> Optional[Notification]:
        result = await self.db.execute(
            select(Notification).where(Notification.id == notification_id)
        )
        return result.scalar_one_or_none()

    async def get_by_outbox_id(self, outbox_id: int) -> Optional[Notification]:
        result = await self.db.execute(
            select(Notification).where(Notification.outbox_id == outbox_id)
        )
        return result.scalar_one_or_none()

    async def for_user(
        self,
        user_id: int,
        type_prefix: Optional[str] = None,
        unread_only: bool = False,
    ) -> list[Notification]:
        stmt = select(Notification).where(Notification.user_id == user_id)
        if type_prefix:
            stmt = stmt.where(Notification.type.startswith(type_prefix))
        if unread_only:
            stmt = stmt.where(Notification.is_read.is_(False))
        result = await self.db.execute(
            stmt.order_by(Notification.created_at.desc(), Notification.id.desc())
        )
        return list(result.scalars().all())

    async def mark_read(self, notification: Notification) -> Notification:
        notification.is_read = True
        try:
            await self.db.commit()
            await self.db.refresh(notification)
            return notification
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def mark_all_read(self, user_id: int) -> int:
        try:
            result = await self.db.execute(
                update(Notification)
                .where(Notification.user_id == user_id, Notification.is_read.is_(False))
                .values(is_read=True)
            )
            await self.db.commit()
            return result.rowcount
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def delete_one(self, notification_id: int) -> bool:
        try:
            result = await self.db.execute(
                delete(Notification).where(Notification.id == notification_id)
            )
            await self.db.commit()
            return result.rowcount > 0
        except SQLAlchemyError:
            await self.db.rollback()
            raise
