from dataclasses import dataclass
from typing import Optional

from models.enums import BookingStatus, InquiryStatus


@dataclass(frozen=True)
class NotificationTemplate:
    title: str
    content: str
    type: Optional[str] = None


BOOKING_TITLES = {
    "created": "Booking Submitted",
    BookingStatus.PENDING.value: "Booking Pending",
    BookingStatus.APPROVED.value: "Booking Approved",
    BookingStatus.REJECTED.value: "Booking Rejected",
    BookingStatus.CANCELLED.value: "Booking Cancelled",
    "updated": "Booking Updated",
    "deleted": "Booking Deleted",
}

BOOKING_CONTENT = {
    "created": "Your booking for property #{pid} has been submitted and is pending approval.",
    BookingStatus.PENDING.value: "Your booking for property #{pid} is pending.",
    BookingStatus.APPROVED.value: "Your booking for property #{pid} has been approved.",
    BookingStatus.REJECTED.value: "Your booking for property #{pid} has been rejected.",
    BookingStatus.CANCELLED.value: "Your booking for property #{pid} has been cancelled.",
    "updated": "Your booking for property #{pid} has been updated.",
    "deleted": "Your booking for property #{pid} has been deleted.",
}


def _value(status) -> Optional[str]:
    if status is None:
        return None
    return getattr(status, "value", status)


def booking_notification(event, property_id: int) -> NotificationTemplate:
    """Template for a booking event: "created", "deleted", "updated" or a status."""
    key = _value(event)
    if key not in BOOKING_TITLES:
        key = "updated"
    return NotificationTemplate(
        title=BOOKING_TITLES[key],
        content=BOOKING_CONTENT[key].format(pid=property_id),
        type=f"booking_{key}",
    )


def inquiry_created(property_id: int) -> NotificationTemplate:
    return NotificationTemplate(
        title="Inquiry Submitted",
        content=(
            f"Your inquiry for property #{property_id} has been submitted "
            "and is awaiting response."
        ),
        type="inquiry_created",
    )


def inquiry_status_changed(
    status, property_id: int, response_message: Optional[str] = None
) -> NotificationTemplate:
    status = _value(status)
    if status == InquiryStatus.RESPONDED.value:
        if response_message:
            content = f'Your inquiry has received a response: "{response_message}"'
        else:
            content = f"Your inquiry for property #{property_id} has received a response."
        return NotificationTemplate("Inquiry Responded", content, "inquiry_responded")

    if status == InquiryStatus.CLOSED.value:
        return NotificationTemplate(
            "Inquiry Closed",
            f"Your inquiry for property #{property_id} has been closed.",
            "inquiry_closed",
        )

    return NotificationTemplate(
        "Inquiry Status Updated",
        f"Your inquiry for property #{property_id} has been updated to {status}.",
        "inquiry_updated",
    )


def inquiry_deleted(property_id: int) -> NotificationTemplate:
    return NotificationTemplate(
        "Inquiry Deleted",
        f"Your inquiry for property #{property_id} has been deleted.",
        "inquiry_deleted",
    )
