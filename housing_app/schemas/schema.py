from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

import phonenumbers
from pydantic import BaseModel, EmailStr, Field, field_validator

from models.enums import (
    BookingStatus,
    ContactPreference,
    InquiryStatus,
    PropertyType,
    University,
    UserRole,
)


def _normalize_phone(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    try:
        parsed = phonenumbers.parse(value, "ZM")
    except phonenumbers.NumberParseException:
        raise ValueError("Invalid phone number format.")
    if not phonenumbers.is_valid_number(parsed):
        raise ValueError("Invalid phone number.")
    return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)


def _reject_null(value):
    if value is None:
        raise ValueError("Field cannot be null.")
    return value


class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    first_name: str = Field(..., min_length=2, max_length=100)
    last_name: str = Field(..., min_length=2, max_length=100)
    role: UserRole = UserRole.STUDENT
    phone_number: Optional[str] = None

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("role")
    @classmethod
    def validate_role(cls, value: UserRole):
        if value == UserRole.ADMIN:
            raise ValueError("Admin accounts cannot be self-registered")
        return value

    @field_validator("phone_number")
    @classmethod
    def validate_phone(cls, value: Optional[str]):
        return _normalize_phone(value)


class UserLoginInput(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower() if isinstance(value, str) else value


class UserUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=2, max_length=100)
    last_name: Optional[str] = Field(None, min_length=2, max_length=100)
    phone_number: Optional[str] = None

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def reject_null(cls, value):
        return _reject_null(value)

    @field_validator("phone_number")
    @classmethod
    def validate_phone(cls, value: Optional[str]):
        return _normalize_phone(value)


class UserPublicSchema(BaseModel):
    id: int
    email: EmailStr
    first_name: str
    last_name: str
    phone_number: Optional[str] = None
    role: UserRole
    approved: bool
    created_at: Optional[datetime] = None
    model_config = {"from_attributes": True}


class LandlordApproval(BaseModel):
    approved: bool = True


class PropertyDetailsBase(BaseModel):
    bedrooms: int = Field(0, ge=0)
    bathrooms: int = Field(0, ge=0)
    furnished: bool = False
    square_meters: Optional[int] = Field(None, ge=0)
    amenities: List[str] = Field(default_factory=list)
    rules: List[str] = Field(default_factory=list)


class PropertyDetailsUpdate(BaseModel):
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[int] = Field(None, ge=0)
    furnished: Optional[bool] = None
    square_meters: Optional[int] = Field(None, ge=0)
    amenities: Optional[List[str]] = None
    rules: Optional[List[str]] = None

    @field_validator("bedrooms", "bathrooms", "furnished", mode="before")
    @classmethod
    def reject_null(cls, value):
        return _reject_null(value)


class PropertyDetailsOut(PropertyDetailsBase):
    id: int
    property_id: int
    amenities: Optional[List[str]] = None
    rules: Optional[List[str]] = None
    model_config = {"from_attributes": True}


class PropertyCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    property_type: PropertyType
    address: str = Field(..., min_length=1, max_length=500)
    monthly_rent: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    is_available: bool = True
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    target_university: Optional[University] = None
    details: Optional[PropertyDetailsBase] = None

    @field_validator("title", "address")
    @classmethod
    def strip_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Field cannot be blank.")
        return value


class PropertyUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    property_type: Optional[PropertyType] = None
    address: Optional[str] = Field(None, min_length=1, max_length=500)
    monthly_rent: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    is_available: Optional[bool] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    target_university: Optional[University] = None

    @field_validator(
        "title", "property_type", "address", "monthly_rent", "is_available", mode="before"
    )
    @classmethod
    def reject_null(cls, value):
        return _reject_null(value)


class PropertyOut(BaseModel):
    id: int
    landlord_id: int
    title: str
    description: Optional[str] = None
    property_type: PropertyType
    address: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    monthly_rent: float
    is_available: bool
    target_university: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    model_config = {"from_attributes": True}


class PropertySummary(BaseModel):
    id: int
    title: str
    address: str
    property_type: PropertyType
    monthly_rent: float
    is_available: bool
    model_config = {"from_attributes": True}


class PropertyImageOut(BaseModel):
    id: int
    property_id: int
    image_url: str
    is_primary: bool
    uploaded_at: Optional[datetime] = None
    model_config = {"from_attributes": True}


class GeocodeRequest(BaseModel):
    address: str = Field(..., max_length=500)


class BookingCreate(BaseModel):
    property_id: int
    move_in_date: date
    status: BookingStatus = BookingStatus.PENDING
    student_id: Optional[int] = None


class BookingUpdate(BaseModel):
    status: Optional[BookingStatus] = None
    move_in_date: Optional[date] = None

    @field_validator("status", "move_in_date", mode="before")
    @classmethod
    def reject_null(cls, value):
        return _reject_null(value)


class BookingOut(BaseModel):
    id: int
    property_id: int
    student_id: int
    status: BookingStatus
    move_in_date: date
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    model_config = {"from_attributes": True}


class InquiryCreate(BaseModel):
    property_id: int
    message: str = Field(..., min_length=1, max_length=2000)
    contact_preference: ContactPreference = ContactPreference.ANY


class InquiryUpdate(BaseModel):
    status: Optional[InquiryStatus] = None
    response_message: Optional[str] = Field(None, max_length=2000)
    message: Optional[str] = Field(None, min_length=1, max_length=2000)

    @field_validator("status", "message", mode="before")
    @classmethod
    def reject_null(cls, value):
        return _reject_null(value)


class InquiryOut(BaseModel):
    id: int
    property_id: int
    student_id: int
    message: str
    status: InquiryStatus
    contact_preference: ContactPreference
    response_message: Optional[str] = None
    created_at: Optional[datetime] = None
    responded_at: Optional[datetime] = None
    model_config = {"from_attributes": True}


class ReviewCreate(BaseModel):
    property_id: int
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=2000)


class ReviewUpdate(BaseModel):
    rating: Optional[int] = Field(None, ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=2000)

    @field_validator("rating", mode="before")
    @classmethod
    def reject_null(cls, value):
        return _reject_null(value)


class ReviewOut(BaseModel):
    id: int
    property_id: int
    reviewer_id: int
    rating: int
    comment: Optional[str] = None
    created_at: Optional[datetime] = None
    model_config = {"from_attributes": True}


class FavoriteCreate(BaseModel):
    property_id: int


class FavoriteOut(BaseModel):
    id: int
    property_id: int
    created_at: Optional[datetime] = None
    property: Optional[PropertySummary] = None
    model_config = {"from_attributes": True}


class NotificationCreate(BaseModel):
    user_id: int
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    type: Optional[str] = Field(None, max_length=50)


class NotificationOut(BaseModel):
    id: int
    user_id: int
    title: str
    content: str
    type: Optional[str] = None
    is_read: bool
    created_at: Optional[datetime] = None
    model_config = {"from_attributes": True}


class MessageCreate(BaseModel):
    receiver_id: int
    content: str = Field(..., min_length=1, max_length=5000)
    property_id: Optional[int] = None


class MessageOut(BaseModel):
    id: int
    sender_id: int
    receiver_id: int
    property_id: Optional[int] = None
    content: str
    is_read: bool
    created_at: Optional[datetime] = None
    model_config = {"from_attributes": True}


class StudentProfileCreate(BaseModel):
    institution: Optional[str] = Field(None, max_length=255)
    student_id_number: Optional[str] = Field(
        None, max_length=50, pattern=r"^\d+$"
    )
    study_level: Optional[str] = Field(None, max_length=50)
    preferences: Optional[dict] = None


class StudentProfileUpdate(StudentProfileCreate):
    pass


class StudentProfileOut(BaseModel):
    id: int
    user_id: int
    institution: Optional[str] = None
    student_id_number: Optional[str] = None
    study_level: Optional[str] = None
    preferences: Optional[dict] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    model_config = {"from_attributes": True}
