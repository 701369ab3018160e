import logging
from typing import Optional

from fastapi import BackgroundTasks, HTTPException
from fastapi.responses import JSONResponse

from core.breaker import breaker
from core.check_permission import CheckRolePermission
from core.mapper import ORMMapper
from models.enums import BookingStatus, UserRole
from models.models import Booking
from notifications.dispatcher import schedule_dispatch
from notifications.templates import booking_notification
from repos.booking_repo import BookingRepo
from repos.property_repo import PropertyRepo
from repos.user_repo import UserRepo
from schemas.schema import BookingOut

logger = logging.getLogger(__name__)


class BookingService:
    def __init__(self, db, background_tasks: BackgroundTasks = None, dispatcher=None):
        self.repo: BookingRepo = BookingRepo(db)
        self.property_repo: PropertyRepo = PropertyRepo(db)
        self.user_repo: UserRepo = UserRepo(db)
        self.permission: CheckRolePermission = CheckRolePermission()
        self.mapper: ORMMapper = ORMMapper()
        self.background_tasks = background_tasks
        self.dispatcher = dispatcher

    def _schedule(self, *entries):
        schedule_dispatch(self.background_tasks, self.dispatcher, *entries)

    async def _get_for_participant(self, booking_id: int, current_user) -> Booking:
        booking = await self.repo.get_one(booking_id)
        if not booking:
            raise HTTPException(status_code=404, detail="Booking not found")
        if self.permission.is_admin(current_user):
            return booking
        if current_user.id not in (booking.student_id, booking.property.landlord_id):
            raise HTTPException(
                status_code=403, detail="You are not allowed to access this booking"
            )
        return booking

    async def create_booking(self, data, current_user):
        async def handler():
            prop = await self.property_repo.get_by_id(data.property_id)
            if not prop:
                raise HTTPException(status_code=404, detail="Property not found")
            if not prop.is_available:
                raise HTTPException(
                    status_code=400, detail="Property is not available for booking"
                )

            status = BookingStatus.PENDING
            student_id = current_user.id
            if self.permission.is_admin(current_user):
                status = data.status
                if data.student_id is None:
                    raise HTTPException(status_code=400, detail="student_id is required")
                student = await self.user_repo.by_id(data.student_id)
                if not student or student.role != UserRole.STUDENT:
                    raise HTTPException(status_code=404, detail="Student not found")
                student_id = student.id

            booking = Booking(
                property_id=prop.id,
                student_id=student_id,
                move_in_date=data.move_in_date,
                status=status,
            )
            booking, entry = await self.repo.create(
                booking, booking_notification("created", prop.id)
            )
            self._schedule(entry)
            logger.info("Booking %s created for property %s", booking.id, prop.id)
            return JSONResponse(
                {"success": True, "data": self.mapper.dump(booking, BookingOut)},
                status_code=201,
            )

        return await breaker.call(handler)

    async def list_bookings(self, current_user, status: Optional[BookingStatus] = None):
        async def handler():
            if current_user.role == UserRole.ADMIN:
                bookings = await self.repo.list_bookings(status=status)
            elif current_user.role == UserRole.LANDLORD:
                bookings = await self.repo.list_bookings(
                    landlord_id=current_user.id, status=status
                )
            else:
                bookings = await self.repo.list_bookings(
                    student_id=current_user.id, status=status
                )
            return {"success": True, "data": self.mapper.dump_many(bookings, BookingOut)}

        return await breaker.call(handler)

    async def get_booking(self, booking_id: int, current_user):
        async def handler():
            booking = await self._get_for_participant(booking_id, current_user)
            return {"success": True, "data": self.mapper.dump(booking, BookingOut)}

        return await breaker.call(handler)

    async def update_booking(self, booking_id: int, data, current_user):
        async def handler():
            booking = await self._get_for_participant(booking_id, current_user)
            update_data = data.model_dump(exclude_unset=True)
            if not update_data:
                raise HTTPException(status_code=400, detail="No fields to update")

            is_manager = (
                self.permission.is_admin(current_user)
                or current_user.id == booking.property.landlord_id
            )
            if not is_manager:
                new_status = update_data.get("status")
                if new_status is not None and new_status != BookingStatus.CANCELLED:
                    raise HTTPException(
                        status_code=403,
                        detail="Students can only cancel a booking or change the move-in date",
                    )

            event = update_data.get("status") or "updated"
            booking, entry = await self.repo.update(
                booking,
                update_data,
                booking_notification(event, booking.property_id),
            )
            self._schedule(entry)
            logger.info("Booking %s updated: %s", booking.id, sorted(update_data))
            return {"success": True, "data": self.mapper.dump(booking, BookingOut)}

        return await breaker.call(handler)

    async def delete_booking(self, booking_id: int, current_user):
        async def handler():
            booking = await self._get_for_participant(booking_id, current_user)
            entry = await self.repo.delete(
                booking, booking_notification("deleted", booking.property_id)
            )
            self._schedule(entry)
            logger.info("Booking %s deleted", booking_id)
            return {"success": True, "message": "Booking deleted"}

        return await breaker.call(handler)

