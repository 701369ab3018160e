from typing import Iterable, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError

from models.enums import OutboxStatus
from models.models import NotificationOutbox, utcnow


class OutboxRepo:
    def __init__(self, db):
        self.db = db

    def stage(self, user_id: int, template) -> NotificationOutbox:
        """Add an outbox row to the current transaction without committing."""
        entry = NotificationOutbox(
            user_id=user_id,
            title=template.title,
            content=template.content,
            type=template.type,
            status=OutboxStatus.PENDING,
            attempts=0,
        )
        self.db.add(entry)
        return entry

    async def enqueue(self, user_id: int, template) -> NotificationOutbox:
        entry = self.stage(user_id, template)
        try:
            await self.db.commit()
            return entry
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def pending(
        self, ids: Optional[Iterable[int]] = None, limit: int = 100
    ) -> list[NotificationOutbox]:
        stmt = select(NotificationOutbox).where(
            NotificationOutbox.status == OutboxStatus.PENDING
        )
        if ids is not None:
            stmt = stmt.where(NotificationOutbox.id.in_(list(ids)))
        result = await self.db.execute(
            stmt.order_by(NotificationOutbox.id)
            .limit(limit)
            .with_for_update(skip_locked=True)
        )
        return list(result.scalars().all())

    async def get(self, entry_id: int) -> Optional[NotificationOutbox]:
        result = await self.db.execute(
            select(NotificationOutbox).where(NotificationOutbox.id == entry_id)
        )
        return result.scalar_one_or_none()

    async def mark_delivered(self, entry_id: int) -> None:
        try:
            await self.db.execute(
                update(NotificationOutbox)
                .where(NotificationOutbox.id == entry_id)
                .values(
                    status=OutboxStatus.DELIVERED,
                    attempts=NotificationOutbox.attempts + 1,
                    delivered_at=utcnow(),
                    last_error=None,
                )
            )
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def record_failure(self, entry_id: int, error: str, max_attempts: int) -> None:
        try:
            await self.db.execute(
                update(NotificationOutbox)
                .where(NotificationOutbox.id == entry_id)
                .values(
                    attempts=NotificationOutbox.attempts + 1,
                    last_error=error[:2000],
                )
            )
            await self.db.execute(
                update(NotificationOutbox)
                .where(
                    NotificationOutbox.id == entry_id,
                    NotificationOutbox.attempts >= max_attempts,
                )
                .values(status=OutboxStatus.FAILED)
            )
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise
