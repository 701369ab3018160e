import asyncio
import logging
from typing import Iterable, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from core.get_db import AsyncSessionLocal
from core.settings import settings
from models.models import Notification
from repos.notification_repo import NotificationRepo
from repos.outbox_repo import OutboxRepo

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Moves pending outbox rows into the notifications table.

    Delivery runs in its own session because it happens after the request
    session has been closed. A notification is keyed by its outbox id, so
    replaying an entry never produces a second row.
    """

    def __init__(
        self,
        session_factory=None,
        max_attempts: Optional[int] = None,
        batch_size: Optional[int] = None,
    ):
        self.session_factory = session_factory or AsyncSessionLocal
        self.max_attempts = max_attempts or settings.OUTBOX_MAX_ATTEMPTS
        self.batch_size = batch_size or settings.OUTBOX_BATCH_SIZE

    async def dispatch(self, ids: Optional[Iterable[int]] = None) -> int:
        if ids is not None:
            ids = [i for i in ids if i is not None]
            if not ids:
                return 0

        delivered = 0
        async with self.session_factory() as db:
            outbox = OutboxRepo(db)
            notifications = NotificationRepo(db)
            entries = [
                (e.id, e.user_id, e.title, e.content, e.type)
                for e in await outbox.pending(ids=ids, limit=self.batch_size)
            ]

            for entry_id, user_id, title, content, type_ in entries:
                try:
                    existing = await notifications.get_by_outbox_id(entry_id)
                    if existing is None:
                        db.add(
                            Notification(
                                user_id=user_id,
                                title=title,
                                content=content,
                                type=type_,
                                outbox_id=entry_id,
                            )
                        )
                        await db.flush()
                    await outbox.mark_delivered(entry_id)
                    delivered += 1
                except IntegrityError:
                    await db.rollback()
                    logger.info("Outbox entry %s was already delivered", entry_id)
                    await outbox.mark_delivered(entry_id)
                    delivered += 1
                except SQLAlchemyError as e:
                    await db.rollback()
                    logger.exception("Failed to deliver outbox entry %s", entry_id)
                    await outbox.record_failure(entry_id, str(e), self.max_attempts)

        if delivered:
            logger.info("Delivered %s notification(s)", delivered)
        return delivered

    async def dispatch_pending(self) -> int:
        return await self.dispatch(None)

    async def run_forever(self, interval: Optional[float] = None) -> None:
        interval = interval or settings.OUTBOX_POLL_SECONDS
        while True:
            try:
                await self.dispatch_pending()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Outbox dispatch loop iteration failed")
            await asyncio.sleep(interval)

    async def safe_dispatch(self, ids: Iterable[int]) -> None:
        try:
            await self.dispatch(ids)
        except Exception:
            logger.exception("Background notification dispatch failed")


notification_dispatcher = NotificationDispatcher()


def get_notification_dispatcher() -> NotificationDispatcher:
    return notification_dispatcher


def schedule_dispatch(background_tasks, dispatcher, *entries) -> list[int]:
    """Queue delivery of committed outbox entries to run after the response."""
    ids = [entry.id for entry in entries if entry is not None]
    if ids and background_tasks is not None and dispatcher is not None:
        background_tasks.add_task(dispatcher.safe_dispatch, ids)
    return ids
