from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends
from fastapi_utils.cbv import cbv
from sqlalchemy.ext.asyncio import AsyncSession

from core.get_current_user import get_current_user, require_student
from core.get_db import get_db_async
from core.safe_handler import safe_handler
from models.enums import InquiryStatus
from models.models import User
from notifications.dispatcher import NotificationDispatcher, get_notification_dispatcher
from schemas.schema import InquiryCreate, InquiryUpdate
from services.inquiry_service import InquiryService
from services.notification_service import NotificationService

router = APIRouter(tags=["Inquiries"])


@cbv(router)
class InquiryRoutes:
    @router.post("/", status_code=201)
    @safe_handler
    async def create(
        self,
        data: InquiryCreate,
        background_tasks: BackgroundTasks,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(require_student),
        dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
    ):
        return await InquiryService(db, background_tasks, dispatcher).create_inquiry(
            data, current_user
        )

    @router.get("/")
    @safe_handler
    async def list_inquiries(
        self,
        status: Optional[InquiryStatus] = None,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await InquiryService(db).list_inquiries(current_user, status=status)

    @router.get("/notifications")
    @safe_handler
    async def notifications(
        self,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await NotificationService(db).list_notifications(
            current_user, type_prefix="inquiry_"
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
            notification_id, current_user, type_prefix="inquiry_"
        )

    @router.get("/property/{property_id}")
    @safe_handler
    async def for_property(
        self,
        property_id: int,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await InquiryService(db).for_property(property_id, current_user)

    @router.get("/student/{student_id}")
    @safe_handler
    async def for_student(
        self,
        student_id: int,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await InquiryService(db).for_student(student_id, current_user)

    @router.get("/{inquiry_id}")
    @safe_handler
    async def get_inquiry(
        self,
        inquiry_id: int,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await InquiryService(db).get_inquiry(inquiry_id, current_user)

    @router.put("/{inquiry_id}")
    @safe_handler
    async def update(
        self,
        inquiry_id: int,
        data: InquiryUpdate,
        background_tasks: BackgroundTasks,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
        dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
    ):
        return await InquiryService(db, background_tasks, dispatcher).update_inquiry(
            inquiry_id, data, current_user
        )

    @router.delete("/{inquiry_id}")
    @safe_handler
    async def delete(
        self,
        inquiry_id: int,
        background_tasks: BackgroundTasks,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
        dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
    ):
        return await InquiryService(db, background_tasks, dispatcher).delete_inquiry(
            inquiry_id, current_user
        )
