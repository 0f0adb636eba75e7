from enum import Enum
from typing import Optional, List, Any, Literal
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.errors import ErrorKind, message_text


class BookingStatus(str, Enum):
    INTERESTED = "INTERESTED"
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


class Role(str, Enum):
    CUSTOMER = "customer"
    VENDOR = "vendor"
    ADMIN = "admin"


# --- Booking ---

class ServicePackage(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: Optional[Any] = None
    package_name: str = ""
    price: Optional[float] = None
    features: str = ""


class CustomerInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    name: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    address: str = "Address not provided"


class Booking(BaseModel):
    # Bookings are never patched in place; a refetch replaces them.
    model_config = ConfigDict(frozen=True)

    id: str
    status: BookingStatus
    service_id: Optional[str] = None
    customer_id: Optional[str] = None
    vendor_id: Optional[str] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    booking_date: Optional[datetime] = None

    # Denormalized display fields, not authoritative
    service_name: str = "Unnamed Service"
    category: str = "Other"
    provider_name: str = "Unknown Provider"
    location: str = "Not specified"
    customer: Optional[CustomerInfo] = None
    package_name: Optional[str] = None
    price: Optional[float] = None
    packages: List[ServicePackage] = Field(default_factory=list)

    @property
    def customer_name(self) -> str:
        return self.customer.name if self.customer else ""


class BookingStats(BaseModel):
    total: int = 0
    interested: int = 0
    pending: int = 0
    confirmed: int = 0
    cancelled: int = 0
    completed: int = 0


class DateDisplay(BaseModel):
    label: str
    at: Optional[datetime] = None


class BookedView(BaseModel):
    bookings: List[Booking]
    total: int
    upcoming: int
    revenue: float


# --- Wire ---

class Envelope(BaseModel):
    success: bool = False
    data: Optional[Any] = None
    message: Optional[str] = None

    @field_validator("message", mode="before")
    @classmethod
    def _coerce_message(cls, v: Any) -> Optional[str]:
        return message_text(v)


class StatusUpdateRequest(BaseModel):
    bookingId: str
    status: BookingStatus


# --- Actor ---

class Session(BaseModel):
    token: str
    user_id: Optional[str] = None
    role: Optional[Role] = None


class Scope(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Role
    actor_id: str


class Notice(BaseModel):
    level: Literal["success", "error", "info"]
    message: str
    kind: Optional[ErrorKind] = None
