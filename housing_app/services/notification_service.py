import logging
from typing import Optional

from fastapi import BackgroundTasks, HTTPException
from fastapi.responses import JSONResponse

from core.breaker import breaker
from core.mapper import ORMMapper
from notifications.dispatcher import schedule_dispatch
from notifications.templates import NotificationTemplate
from repos.notification_repo import NotificationRepo
from repos.outbox_repo import OutboxRepo
from repos.user_repo import UserRepo
from schemas.schema import NotificationOut

logger = logging.getLogger(__name__)


class NotificationService:
    def __init__(self, db, background_tasks: BackgroundTasks = None, dispatcher=None):
        self.repo: NotificationRepo = NotificationRepo(db)
        self.outbox: OutboxRepo = OutboxRepo(db)
        self.user_repo: UserRepo = UserRepo(db)
        self.mapper: ORMMapper = ORMMapper()
        self.background_tasks = background_tasks
        self.dispatcher = dispatcher

    async def _get_owned(self, notification_id: int, current_user):
        notification = await self.repo.get_one(notification_id)
        if not notification or notification.user_id != current_user.id:
            raise HTTPException(status_code=404, detail="Notification not found")
        return notification

    async def list_notifications(
        self,
        current_user,
        unread_only: bool = False,
        type_prefix: Optional[str] = None,
    ):
        async def handler():
            items = await self.repo.for_user(
                current_user.id, type_prefix=type_prefix, unread_only=unread_only
            )
            return {
                "success": True,
                "data": self.mapper.dump_many(items, NotificationOut),
                "unread_count": sum(1 for n in items if not n.is_read),
            }

        return await breaker.call(handler)

    async def mark_read(
        self, notification_id: int, current_user, type_prefix: Optional[str] = None
    ):
        async def handler():
            notification = await self._get_owned(notification_id, current_user)
            if type_prefix and not (notification.type or "").startswith(type_prefix):
                raise HTTPException(status_code=404, detail="Notification not found")
            notification = await self.repo.mark_read(notification)
            return {"success": True, "data": self.mapper.dump(notification, NotificationOut)}

        return await breaker.call(handler)

    async def mark_all_read(self, current_user):
        async def handler():
            updated = await self.repo.mark_all_read(current_user.id)
            return {"success": True, "updated": updated}

        return await breaker.call(handler)

    async def delete_notification(self, notification_id: int, current_user):
        async def handler():
            await self._get_owned(notification_id, current_user)
            await self.repo.delete_one(notification_id)
            return {"success": True, "message": "Notification deleted"}

        return await breaker.call(handler)

    async def send(self, data):
        async def handler():
            if not await self.user_repo.by_id(data.user_id):
                raise HTTPException(status_code=404, detail="User not found")
            entry = await self.outbox.enqueue(
                data.user_id,
                NotificationTemplate(data.title, data.content, data.type),
            )
            ids = schedule_dispatch(self.background_tasks, self.dispatcher, entry)
            logger.info("Queued manual notification for user %s", data.user_id)
            return JSONResponse(
                {"success": True, "message": "Notification queued", "outbox_ids": ids},
                status_code=202,
            )

        return await breaker.call(handler)
