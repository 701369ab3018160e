from typing import Optional

from sqlalchemy import and_, or_, select
from sqlalchemy.exc import SQLAlchemyError

from models.models import Message


class MessageRepo:
    def __init__(self, db):
        self.db = db

    async def get_one(self, message_id: int) -> Optional[Message]:
        result = await self.db.execute(select(Message).where(Message.id == message_id))
        return result.scalar_one_or_none()

    async def for_user(self, user_id: int) -> list[Message]:
        result = await self.db.execute(
            select(Message)
            .where(or_(Message.sender_id == user_id, Message.receiver_id == user_id))
            .order_by(Message.created_at.desc(), Message.id.desc())
        )
        return list(result.scalars().all())

    async def conversation(self, user_id: int, other_id: int) -> list[Message]:
        result = await self.db.execute(
            select(Message)
            .where(
                or_(
                    and_(Message.sender_id == user_id, Message.receiver_id == other_id),
                    and_(Message.sender_id == other_id, Message.receiver_id == user_id),
                )
            )
            .order_by(Message.created_at, Message.id)
        )
        return list(result.scalars().all())

    async def save(self, message: Message) -> Message:
        self.db.add(message)
        try:
            await self.db.commit()
            await self.db.refresh(message)
            return message
        except SQLAlchemyError:
            await self.db.rollback()
            raise
