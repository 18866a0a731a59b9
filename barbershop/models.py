# barbershop/models.py

from typing import Optional, List
from datetime import datetime

from sqlalchemy import Index, text
from sqlalchemy.types import JSON
from sqlmodel import SQLModel, Field, Column


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True)
    password_hash: str
    name: str = ""
    phone: Optional[str] = None
    role: str = Field(default="client", index=True)  # admin, barber or client
    created_at: datetime = Field(default_factory=datetime.now)


class Barber(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: Optional[int] = Field(default=None, foreign_key="user.id", index=True)
    name: str
    bio: str = ""
    photo_url: Optional[str] = None
    available: bool = Field(default=True, index=True)


class Service(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    description: str = ""
    price: float
    duration_minutes: int


class Appointment(SQLModel, table=True):
    # one live appointment per barber and start time; cancelled rows free the slot
    __table_args__ = (
        Index(
            "uq_barber_start",
            "barber_id",
            "starts_at",
            unique=True,
            sqlite_where=text("status != 'cancelled'"),
            postgresql_where=text("status != 'cancelled'"),
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)

    client_id: int = Field(foreign_key="user.id", index=True)
    barber_id: int = Field(foreign_key="barber.id", index=True)
    service_id: Optional[int] = Field(default=None, foreign_key="service.id")
    starts_at: datetime = Field(index=True)
    status: str = Field(default="pending", index=True)
    created_at: datetime = Field(default_factory=datetime.now)


class Product(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    description: str = ""
    category: str = ""
    price: float
    stock: int = 0
    image_url: Optional[str] = None


class Order(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    client_id: int = Field(foreign_key="user.id", index=True)
    items: List[dict] = Field(default_factory=list, sa_column=Column(JSON))
    total: float
    status: str = Field(default="pending", index=True)
    code: str = Field(index=True, unique=True)
    created_at: datetime = Field(default_factory=datetime.now)


class Review(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    client_id: Optional[int] = Field(default=None, foreign_key="user.id")
    barber_id: Optional[int] = Field(default=None, foreign_key="barber.id")
    rating: int
    comment: str = ""
    created_at: datetime = Field(default_factory=datetime.now)


class GalleryImage(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    url: str
    description: str = ""
    visible: bool = True
    created_at: datetime = Field(default_factory=datetime.now)
