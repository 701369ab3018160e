from fastapi import HTTPException
from fastapi.responses import JSONResponse

from core.breaker import breaker
from core.mapper import ORMMapper
from models.models import Message
from repos.message_repo import MessageRepo
from repos.property_repo import PropertyRepo
from repos.user_repo import UserRepo
from schemas.schema import MessageOut


class MessageService:
    def __init__(self, db):
        self.repo: MessageRepo = MessageRepo(db)
        self.user_repo: UserRepo = UserRepo(db)
        self.property_repo: PropertyRepo = PropertyRepo(db)
        self.mapper: ORMMapper = ORMMapper()

    async def send_message(self, data, current_user):
        async def handler():
            if data.receiver_id == current_user.id:
                raise HTTPException(
                    status_code=400, detail="You cannot send a message to yourself"
                )
            if not await self.user_repo.by_id(data.receiver_id):
                raise HTTPException(status_code=404, detail="Receiver not found")
            if data.property_id is not None and not await self.property_repo.get_by_id(
                data.property_id
            ):
                raise HTTPException(status_code=404, detail="Property not found")

            message = await self.repo.save(
                Message(
                    sender_id=current_user.id,
                    receiver_id=data.receiver_id,
                    property_id=data.property_id,
                    content=data.content.strip(),
                )
            )
            return JSONResponse(
                {"success": True, "data": self.mapper.dump(message, MessageOut)},
                status_code=201,
            )

        return await breaker.call(handler)

    async def my_messages(self, current_user):
        async def handler():
            messages = await self.repo.for_user(current_user.id)
            return {"success": True, "data": self.mapper.dump_many(messages, MessageOut)}

        return await breaker.call(handler)

    async def conversation(self, other_id: int, current_user):
        async def handler():
            messages = await self.repo.conversation(current_user.id, other_id)
            return {"success": True, "data": self.mapper.dump_many(messages, MessageOut)}

        return await breaker.call(handler)

    async def mark_read(self, message_id: int, current_user):
        async def handler():
            message = await self.repo.get_one(message_id)
            if not message:
                raise HTTPException(status_code=404, detail="Message not found")
            if message.receiver_id != current_user.id:
                raise HTTPException(
                    status_code=403, detail="Only the receiver can mark a message read"
                )
            message.is_read = True
            message = await self.repo.save(message)
            return {"success": True, "data": self.mapper.dump(message, MessageOut)}

        return await breaker.call(handler)
