"""Admin schemas."""
from datetime import date
from pydantic import BaseModel, StrictBool
from rentals.models.booking import BookingStatus
from rentals.models.property import PropertyType


class AdminStatusUpdate(BaseModel):
    is_admin: StrictBool


class UserStats(BaseModel):
    total: int
    admins: int
    regular: int


class PropertyStats(BaseModel):
    total: int


class BookingStats(BaseModel):
    total: int
    revenue: float


class FacilityStats(BaseModel):
    total: int


class SystemStats(BaseModel):
    users: UserStats
    properties: PropertyStats
    bookings: BookingStats
    facilities: FacilityStats


class AdminPropertyView(BaseModel):
    id: int
    title: str
    city: str | None = None
    property_type: PropertyType
    price_per_day: float
    owner_id: int
    owner_name: str | None = None
    owner_email: str | None = None
    primary_image: str | None = None
    booking_count: int = 0


class AdminBookingView(BaseModel):
    id: int
    property_id: int
    property_title: str | None = None
    property_address: str | None = None
    guest_id: int
    guest_name: str | None = None
    guest_email: str | None = None
    owner_name: str | None = None
    owner_email: str | None = None
    status: BookingStatus
    booking_date: date
    start_date: date
    end_date: date
    total_amount: float
