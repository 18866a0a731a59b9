# barbershop/schemas.py

from pydantic import BaseModel, Field, field_validator
from enum import Enum
from datetime import datetime, date
from typing import List, Optional, Union


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserRole(str, Enum):
    admin = "admin"
    barber = "barber"
    client = "client"


class AppointmentStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    completed = "completed"
    cancelled = "cancelled"


class OrderStatus(str, Enum):
    pending = "pending"
    delivered = "delivered"
    cancelled = "cancelled"


def reject_null(value):
    # PATCH fields may be omitted, but not set to null on NOT NULL columns
    if value is None:
        raise ValueError("may be omitted but not null")
    return value


# --- users ---

class UserPublic(BaseModel):
    id: int
    email: str
    name: str
    phone: Optional[str] = None
    role: UserRole


class UserCreate(BaseModel):
    email: str
    password: str = Field(min_length=8, max_length=72)
    name: str = Field(min_length=1)
    phone: Optional[str] = None


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    phone: Optional[str] = None


class PasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(min_length=8, max_length=72)
    confirm_password: str


class AdminUserUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    phone: Optional[str] = None
    role: Optional[UserRole] = None


# --- barbers ---

class BarberPublic(BaseModel):
    id: int
    name: str
    bio: str
    photo_url: Optional[str] = None
    available: bool


class BarberCreate(BaseModel):
    email: str
    password: str = Field(min_length=8, max_length=72)
    name: str = Field(min_length=1)
    bio: str = ""
    photo_url: Optional[str] = None


class BarberUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    bio: Optional[str] = None
    photo_url: Optional[str] = None
    available: Optional[bool] = None

    @field_validator("name", "bio", "available", mode="before")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


# --- services ---

class ServiceBase(BaseModel):
    name: str = Field(min_length=1)
    description: str = ""
    price: float = Field(ge=0)
    duration_minutes: int = Field(gt=0)


class ServicePublic(ServiceBase):
    id: int


class ServiceUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    duration_minutes: Optional[int] = Field(default=None, gt=0)

    @field_validator("name", "description", "price", "duration_minutes", mode="before")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


# --- availability ---

class SlotPublic(BaseModel):
    time: str
    available: bool
    candidate_barber_id: Optional[int] = None


class AvailabilityResponse(BaseModel):
    date: date
    barber: str  # "any" or the barber id
    service_id: int
    slots: List[SlotPublic]


# --- appointments ---

class AppointmentCreate(BaseModel):
    service_id: int
    barber: Union[int, str] = "any"
    starts_at: datetime


class AppointmentPublic(BaseModel):
    id: int
    starts_at: datetime
    client_id: int
    barber_id: int
    service_id: Optional[int] = None
    status: AppointmentStatus


class AppointmentDetail(AppointmentPublic):
    service_name: str
    service_price: float
    service_duration: int
    barber_name: str
    client_name: str


class StatusUpdate(BaseModel):
    status: AppointmentStatus


class BarberStats(BaseModel):
    today_count: int
    pending_count: int
    confirmed_or_completed_count: int
    total_revenue: float  # service prices of confirmed and completed appointments


# --- products / shop ---

class ProductBase(BaseModel):
    name: str = Field(min_length=1)
    description: str = ""
    category: str = ""
    price: float = Field(ge=0)
    stock: int = Field(default=0, ge=0)
    image_url: Optional[str] = None


class ProductPublic(ProductBase):
    id: int


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    category: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    stock: Optional[int] = Field(default=None, ge=0)
    image_url: Optional[str] = None

    @field_validator("name", "description", "category", "price", "stock", mode="before")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


class CheckoutItem(BaseModel):
    product_id: int
    quantity: int = Field(gt=0)


class CheckoutRequest(BaseModel):
    items: List[CheckoutItem] = Field(min_length=1)


class OrderLine(BaseModel):
    product_id: int
    name: str
    price: float
    quantity: int


class OrderPublic(BaseModel):
    id: int
    client_id: int
    items: List[OrderLine]
    total: float
    status: OrderStatus
    code: str
    created_at: datetime


# --- reviews ---

class ReviewCreate(BaseModel):
    rating: int = Field(ge=1, le=5)
    comment: str = ""
    barber_id: Optional[int] = None


class ReviewPublic(BaseModel):
    id: int
    rating: int
    comment: str
    barber_id: Optional[int] = None
    reviewer_name: str
    created_at: datetime


# --- gallery ---

class GalleryImageCreate(BaseModel):
    url: str = Field(min_length=1)
    description: str = ""
    visible: bool = True


class GalleryImagePublic(GalleryImageCreate):
    id: int
    created_at: datetime


class GalleryImageUpdate(BaseModel):
    url: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    visible: Optional[bool] = None

    @field_validator("url", "description", "visible", mode="before")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


# --- admin ---

class DashboardStats(BaseModel):
    total_clients: int
    today_appointments: int
    total_products: int
    total_reviews: int
    total_revenue: float
    recent_appointments: List[AppointmentDetail]
