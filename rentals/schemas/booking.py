"""Booking and availability schemas."""
from datetime import date, datetime
from pydantic import BaseModel, field_validator
from rentals.domain import number_of_days as days_between
from rentals.models.booking import BookingStatus
from rentals.models.property import PropertyType


class BookingCreate(BaseModel):
    # Optional so a missing value reaches the availability checks and gets their message
    property_id: int | None = None
    start_date: date | None = None
    end_date: date | None = None
    guests: int | None = None


class BookingStatusUpdate(BaseModel):
    status: str


class BookingResponse(BaseModel):
    id: int
    property_id: int
    guest_id: int
    status: BookingStatus
    booking_date: date
    start_date: date
    end_date: date
    guests: int
    total_amount: float
    number_of_days: int | None = None
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class BookingDetailResponse(BookingResponse):
    """Booking with the property and party names used by guest/host lists."""
    property_title: str | None = None
    property_city: str | None = None
    property_address: str | None = None
    property_type: PropertyType | None = None
    price_per_day: float | None = None
    property_image: str | None = None
    host_id: int | None = None
    host_name: str | None = None
    guest_name: str | None = None


class ConflictingBooking(BaseModel):
    id: int
    start_date: date
    end_date: date
    status: BookingStatus
    guests: int

    class Config:
        from_attributes = True


class UpcomingBooking(BaseModel):
    start_date: date
    end_date: date
    status: BookingStatus

    class Config:
        from_attributes = True


class AvailabilityPropertyDetails(BaseModel):
    title: str
    city: str | None = None
    property_type: PropertyType


class AvailabilityResponse(BaseModel):
    property_id: int
    available: bool
    start_date: date
    end_date: date
    number_of_days: int
    guests: int | None = None
    max_guests: int
    price_per_day: float
    total_price: float | None = None
    conflicting_bookings: list[ConflictingBooking] = []
    upcoming_bookings: list[UpcomingBooking] = []
    property_details: AvailabilityPropertyDetails

    @field_validator("price_per_day", "total_price", mode="before")
    @classmethod
    def decimal_to_float(cls, v):
        return float(v) if v is not None else None


def booking_detail(booking, number_of_days: int | None = None) -> BookingDetailResponse:
    data = BookingDetailResponse.model_validate(booking)
    prop = booking.property
    if prop is not None:
        primary = next((img for img in prop.images if img.is_primary), None)
        data.property_title = prop.title
        data.property_city = prop.city
        data.property_address = prop.address
        data.property_type = prop.property_type
        data.price_per_day = float(prop.price_per_day)
        data.property_image = primary.image_url if primary else None
        data.host_id = prop.owner_id
        data.host_name = prop.owner.name if prop.owner else None
    data.guest_name = booking.guest.name if booking.guest else None
    data.number_of_days = (
        number_of_days if number_of_days is not None else days_between(booking.start_date, booking.end_date)
    )
    return data
