import logging
from typing import Optional

from fastapi import BackgroundTasks, HTTPException
from fastapi.responses import JSONResponse

from core.breaker import breaker
from core.check_permission import CheckRolePermission
from core.mapper import ORMMapper
from models.enums import InquiryStatus, UserRole
from models.models import Inquiry, utcnow
from notifications.dispatcher import schedule_dispatch
from notifications.templates import (
    inquiry_created,
    inquiry_deleted,
    inquiry_status_changed,
)
from repos.inquiry_repo import InquiryRepo
from repos.property_repo import PropertyRepo
from schemas.schema import InquiryOut

logger = logging.getLogger(__name__)


class InquiryService:
    def __init__(self, db, background_tasks: BackgroundTasks = None, dispatcher=None):
        self.repo: InquiryRepo = InquiryRepo(db)
        self.property_repo: PropertyRepo = PropertyRepo(db)
        self.permission: CheckRolePermission = CheckRolePermission()
        self.mapper: ORMMapper = ORMMapper()
        self.background_tasks = background_tasks
        self.dispatcher = dispatcher

    def _schedule(self, *entries):
        schedule_dispatch(self.background_tasks, self.dispatcher, *entries)

    async def _get_for_participant(self, inquiry_id: int, current_user) -> Inquiry:
        inquiry = await self.repo.get_one(inquiry_id)
        if not inquiry:
            raise HTTPException(status_code=404, detail="Inquiry not found")
        if self.permission.is_admin(current_user):
            return inquiry
        if current_user.id not in (inquiry.student_id, inquiry.property.landlord_id):
            raise HTTPException(
                status_code=403, detail="You are not allowed to access this inquiry"
            )
        return inquiry

    async def create_inquiry(self, data, current_user):
        async def handler():
            prop = await self.property_repo.get_by_id(data.property_id)
            if not prop:
                raise HTTPException(status_code=404, detail="Property not found")

            inquiry = Inquiry(
                property_id=prop.id,
                student_id=current_user.id,
                message=data.message.strip(),
                contact_preference=data.contact_preference,
                status=InquiryStatus.PENDING,
            )
            inquiry, entry = await self.repo.create(inquiry, inquiry_created(prop.id))
            self._schedule(entry)
            logger.info("Inquiry %s created for property %s", inquiry.id, prop.id)
            return JSONResponse(
                {"success": True, "data": self.mapper.dump(inquiry, InquiryOut)},
                status_code=201,
            )

        return await breaker.call(handler)

    async def list_inquiries(self, current_user, status: Optional[InquiryStatus] = None):
        async def handler():
            if current_user.role == UserRole.ADMIN:
                items = await self.repo.list_inquiries(status=status)
            elif current_user.role == UserRole.LANDLORD:
                items = await self.repo.list_inquiries(
                    landlord_id=current_user.id, status=status
                )
            else:
                items = await self.repo.list_inquiries(
                    student_id=current_user.id, status=status
                )
            return {"success": True, "data": self.mapper.dump_many(items, InquiryOut)}

        return await breaker.call(handler)

    async def get_inquiry(self, inquiry_id: int, current_user):
        async def handler():
            inquiry = await self._get_for_participant(inquiry_id, current_user)
            return {"success": True, "data": self.mapper.dump(inquiry, InquiryOut)}

        return await breaker.call(handler)

    async def for_property(self, property_id: int, current_user):
        async def handler():
            prop = await self.property_repo.get_by_id(property_id)
            if not prop:
                raise HTTPException(status_code=404, detail="Property not found")
            await self.permission.check_owner_or_admin(current_user, prop.landlord_id)
            items = await self.repo.list_inquiries(property_id=property_id)
            return {"success": True, "data": self.mapper.dump_many(items, InquiryOut)}

        return await breaker.call(handler)

    async def for_student(self, student_id: int, current_user):
        async def handler():
            await self.permission.check_owner_or_admin(current_user, student_id)
            items = await self.repo.list_inquiries(student_id=student_id)
            return {"success": True, "data": self.mapper.dump_many(items, InquiryOut)}

        return await breaker.call(handler)

    async def update_inquiry(self, inquiry_id: int, data, current_user):
        async def handler():
            inquiry = await self._get_for_participant(inquiry_id, current_user)
            update_data = data.model_dump(exclude_unset=True)
            if not update_data:
                raise HTTPException(status_code=400, detail="No fields to update")

            is_manager = (
                self.permission.is_admin(current_user)
                or current_user.id == inquiry.property.landlord_id
            )
            if not is_manager and set(update_data) - {"message"}:
                raise HTTPException(
                    status_code=403,
                    detail="Students can only edit the inquiry message",
                )

            notification = None
            if "status" in update_data:
                status = update_data["status"]
                if status == InquiryStatus.RESPONDED:
                    update_data["responded_at"] = utcnow()
                notification = inquiry_status_changed(
                    status,
                    inquiry.property_id,
                    update_data.get("response_message", inquiry.response_message),
                )

            inquiry, entry = await self.repo.update(inquiry, update_data, notification)
            self._schedule(entry)
            return {"success": True, "data": self.mapper.dump(inquiry, InquiryOut)}

        return await breaker.call(handler)

    async def delete_inquiry(self, inquiry_id: int, current_user):
        async def handler():
            inquiry = await self._get_for_participant(inquiry_id, current_user)
            entry = await self.repo.delete(inquiry, inquiry_deleted(inquiry.property_id))
            self._schedule(entry)
            logger.info("Inquiry %s deleted", inquiry_id)
            return {"success": True, "message": "Inquiry deleted"}

        return await breaker.call(handler)
