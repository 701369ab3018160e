from enum import Enum


class UserRole(str, Enum):
    STUDENT = "student"
    LANDLORD = "landlord"
    ADMIN = "admin"


class PropertyType(str, Enum):
    APARTMENT = "apartment"
    HOUSE = "house"
    SHARED_ROOM = "shared_room"
    SINGLE_ROOM = "single_room"


class InquiryStatus(str, Enum):
    PENDING = "pending"
    RESPONDED = "responded"
    CLOSED = "closed"


class ContactPreference(str, Enum):
    EMAIL = "email"
    PHONE = "phone"
    ANY = "any"


class BookingStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class OutboxStatus(str, Enum):
    PENDING = "pending"
    DELIVERED = "delivered"
    FAILED = "failed"


class University(str, Enum):
    UNZA = "University of Zambia (UNZA)"
    CBU = "Copperbelt University (CBU)"
    MULUNGUSHI = "Mulungushi University"
    ZAOU = "Zambia Open University"
    CAVENDISH = "Cavendish University"
    TEXILA = "Texila American University"
    ICU = "Information and Communications University"
    LMMU = "Levy Mwanawasa Medical University"
    ROCKVIEW = "Rockview University"
    KWAME_NKRUMAH = "Kwame Nkrumah University"
    UNILUS = "University of Lusaka"
    CHALIMBANA = "Chalimbana University"
    OTHER = "Other"
