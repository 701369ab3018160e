from fastapi import APIRouter, Depends
from fastapi_utils.cbv import cbv
from sqlalchemy.ext.asyncio import AsyncSession

from core.get_current_user import get_current_user
from core.get_db import get_db_async
from core.safe_handler import safe_handler
from models.models import User
from schemas.schema import MessageCreate
from services.message_service import MessageService

router = APIRouter(tags=["Messages"])


@cbv(router)
class MessageRoutes:
    @router.post("/", status_code=201)
    @safe_handler
    async def send(
        self,
        data: MessageCreate,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await MessageService(db).send_message(data, current_user)

    @router.get("/")
    @safe_handler
    async def my_messages(
        self,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await MessageService(db).my_messages(current_user)

    @router.get("/users/{user_id}")
    @safe_handler
    async def conversation(
        self,
        user_id: int,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await MessageService(db).conversation(user_id, current_user)

    @router.patch("/{message_id}/read")
    @safe_handler
    async def mark_read(
        self,
        message_id: int,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await MessageService(db).mark_read(message_id, current_user)
