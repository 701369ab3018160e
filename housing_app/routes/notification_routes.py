from fastapi import APIRouter, BackgroundTasks, Depends
from fastapi_utils.cbv import cbv
from sqlalchemy.ext.asyncio import AsyncSession

from core.get_current_user import get_current_user, require_admin
from core.get_db import get_db_async
from core.safe_handler import safe_handler
from models.models import User
from notifications.dispatcher import NotificationDispatcher, get_notification_dispatcher
from schemas.schema import NotificationCreate
from services.notification_service import NotificationService

router = APIRouter(tags=["Notifications"])


@cbv(router)
class NotificationRoutes:
    @router.get("/")
    @safe_handler
    async def list_notifications(
        self,
        unread_only: bool = False,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await NotificationService(db).list_notifications(
            current_user, unread_only=unread_only
        )

    @router.post("/", status_code=202)
    @safe_handler
    async def send(
        self,
        data: NotificationCreate,
        background_tasks: BackgroundTasks,
        db: AsyncSession = Depends(get_db_async),
        _: User = Depends(require_admin),
        dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
    ):
        return await NotificationService(db, background_tasks, dispatcher).send(data)

    @router.patch("/read-all")
    @safe_handler
    async def mark_all_read(
        self,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await NotificationService(db).mark_all_read(current_user)

    @router.patch("/{notification_id}/read")
    @safe_handler
    async def mark_read(
        self,
        notification_id: int,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await NotificationService(db).mark_read(notification_id, current_user)

    @router.delete("/{notification_id}")
    @safe_handler
    async def delete(
        self,
        notification_id: int,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await NotificationService(db).delete_notification(
            notification_id, current_user
        )
