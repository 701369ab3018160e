from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends
from fastapi_utils.cbv import cbv
from sqlalchemy.ext.asyncio import AsyncSession

from core.get_current_user import get_current_user, require_student
from core.get_db import get_db_async
from core.safe_handler import safe_handler
from models.enums import BookingStatus
from models.models import User
from notifications.dispatcher import NotificationDispatcher, get_notification_dispatcher
from schemas.schema import BookingCreate, BookingUpdate
from services.booking_service import BookingService
from services.notification_service import NotificationService

router = APIRouter(tags=["Bookings"])


@cbv(router)
class BookingRoutes:
    @router.post("/", status_code=201)
    @safe_handler
    async def create(
        self,
        data: BookingCreate,
        background_tasks: BackgroundTasks,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(require_student),
        dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
    ):
        return await BookingService(db, background_tasks, dispatcher).create_booking(
            data, current_user
        )

    @router.get("/")
    @safe_handler
    async def list_bookings(
        self,
        status: Optional[BookingStatus] = None,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await BookingService(db).list_bookings(current_user, status=status)

    @router.get("/notifications")
    @safe_handler
    async def notifications(
        self,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await NotificationService(db).list_notifications(
            current_user, type_prefix="booking_"
        )

    @router.patch("/notifications/{notification_id}/read")
    @safe_handler
    async def mark_notification_read(
        self,
        notification_id: int,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await NotificationService(db).mark_read(
            notification_id, current_user, type_prefix="booking_"
        )

    @router.get("/{booking_id}")
    @safe_handler
    async def get_booking(
        self,
        booking_id: int,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await BookingService(db).get_booking(booking_id, current_user)

    @router.put("/{booking_id}")
    @safe_handler
    async def update(
        self,
        booking_id: int,
        data: BookingUpdate,
        background_tasks: BackgroundTasks,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
        dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
    ):
        return await BookingService(db, background_tasks, dispatcher).update_booking(
            booking_id, data, current_user
        )

    @router.delete("/{booking_id}")
    @safe_handler
    async def delete(
        self,
        booking_id: int,
        background_tasks: BackgroundTasks,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
        dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
    ):
        return await BookingService(db, background_tasks, dispatcher).delete_booking(
            booking_id, current_user
        )
