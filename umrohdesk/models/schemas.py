"""Pydantic schemas for Supabase rows"""
from datetime import date, datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, field_validator


class BookingStatus(str, Enum):
    """Booking lifecycle statuses"""

    DRAFT = "draft"
    WAITING_PAYMENT = "waiting_payment"
    PAID = "paid"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    """Payment verification statuses"""

    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


# Status labels shown in tables
BOOKING_STATUS_LABELS = {
    BookingStatus.DRAFT: "Draft",
    BookingStatus.WAITING_PAYMENT: "Menunggu",
    BookingStatus.PAID: "Lunas",
    BookingStatus.CANCELLED: "Batal",
}

PAYMENT_STATUS_LABELS = {
    PaymentStatus.PENDING: "Menunggu",
    PaymentStatus.PAID: "Terverifikasi",
    PaymentStatus.FAILED: "Ditolak",
}

PACKAGE_TYPES = ["VIP", "Reguler", "Hemat", "Promo"]


def status_label(status: Optional[str], labels: dict) -> str:
    """Display label for a raw status value, falling back to the value itself"""
    for key, label in labels.items():
        if key.value == status:
            return label
    return status or "draft"


class PackageRef(BaseModel):
    """Package summary embedded in other rows"""

    title: Optional[str] = None


class ProfileRef(BaseModel):
    """Customer profile embedded in a booking"""

    name: Optional[str] = None
    email: Optional[str] = None


class Departure(BaseModel):
    """Package departure (also embedded in bookings and itineraries)"""

    id: Optional[str] = None
    departure_date: Optional[date] = None
    package: Optional[PackageRef] = None

    class Config:
        from_attributes = True


class Booking(BaseModel):
    id: str
    booking_code: str
    total_price: float = 0
    status: str = BookingStatus.DRAFT.value
    created_at: Optional[datetime] = None
    package_id: Optional[str] = None
    pic_type: Optional[str] = None
    pic_id: Optional[str] = None
    package: Optional[PackageRef] = None
    departure: Optional[Departure] = None
    profile: Optional[ProfileRef] = None

    class Config:
        from_attributes = True

    @property
    def package_title(self) -> str:
        return self.package.title if self.package and self.package.title else "-"

    @property
    def customer_name(self) -> str:
        return self.profile.name if self.profile and self.profile.name else "-"


class BookingRef(BaseModel):
    """Booking summary embedded in payments and pilgrims"""

    id: str
    booking_code: Optional[str] = None
    status: Optional[str] = None
    total_price: float = 0
    user_id: Optional[str] = None
    package: Optional[PackageRef] = None
    departure: Optional[Departure] = None


class Payment(BaseModel):
    id: str
    amount: float = 0
    status: str = PaymentStatus.PENDING.value
    proof_url: Optional[str] = None
    payment_method: Optional[str] = None
    paid_at: Optional[datetime] = None
    verified_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    booking: Optional[BookingRef] = None

    class Config:
        from_attributes = True


class Pilgrim(BaseModel):
    """Pilgrim registered on a booking (booking_pilgrims row)"""

    id: str
    name: str
    nik: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    gender: Optional[str] = None
    birth_date: Optional[date] = None
    passport_number: Optional[str] = None
    passport_expiry: Optional[date] = None
    booking_id: Optional[str] = None
    created_at: Optional[datetime] = None
    booking: Optional[BookingRef] = None

    class Config:
        from_attributes = True


class PackageCategory(BaseModel):
    id: str
    name: str


class TravelPackage(BaseModel):
    id: str
    title: str
    slug: Optional[str] = None
    description: Optional[str] = None
    package_type: Optional[str] = None
    duration_days: Optional[int] = None
    image_url: Optional[str] = None
    category_id: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ItineraryDay(BaseModel):
    id: str
    itinerary_id: Optional[str] = None
    day_number: int
    title: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None


class Itinerary(BaseModel):
    id: str
    departure_id: Optional[str] = None
    title: Optional[str] = None
    notes: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    departure: Optional[Departure] = None
    days: list[ItineraryDay] = Field(default_factory=list)

    class Config:
        from_attributes = True

    @field_validator("days", mode="before")
    @classmethod
    def sort_days(cls, v):
        """Days come unordered from the embed; keep them by day_number"""
        if not v:
            return []
        return sorted(v, key=lambda d: d["day_number"] if isinstance(d, dict) else d.day_number)

    @property
    def next_day_number(self) -> int:
        return max((d.day_number for d in self.days), default=0) + 1


class BlogPost(BaseModel):
    id: str
    title: str
    slug: Optional[str] = None
    excerpt: Optional[str] = None
    content: Optional[str] = None
    image_url: Optional[str] = None
    category: Optional[str] = None
    author: Optional[str] = None
    is_published: bool = False
    published_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None

    class Config:
        from_attributes = True
