"""
Availability engine: date sanity rules, capacity, overlap with existing bookings, and price.

Validation runs in a fixed order and stops at the first failure:
required fields, start not in the past, end after start, span within the
maximum, property exists, guests within capacity.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from sqlalchemy.orm import Session

from rentals.config import get_settings
from rentals.domain import number_of_days, total_price
from rentals.errors import CapacityExceeded, InvalidDateRange, NotFound, ValidationError
from rentals.models.booking import Booking
from rentals.models.property import Property
from rentals.repositories import BookingRepository, PropertyRepository


@dataclass
class AvailabilityResult:
    property: Property
    start_date: date
    end_date: date
    number_of_days: int
    guests: int | None
    available: bool
    total_price: Decimal | None
    conflicts: list[Booking] = field(default_factory=list)
    upcoming: list[Booking] = field(default_factory=list)


def validate_booking_dates(
    start_date: date | None,
    end_date: date | None,
    today: date | None = None,
    max_days: int | None = None,
) -> int:
    """Check the date rules and return the number of days booked."""
    today = today or date.today()
    if max_days is None:
        max_days = get_settings().max_booking_days
    if start_date < today:
        raise InvalidDateRange("Start date cannot be in the past")
    if end_date <= start_date:
        raise InvalidDateRange("End date must be after start date")
    days = number_of_days(start_date, end_date)
    if days > max_days:
        raise InvalidDateRange(f"Booking cannot exceed {max_days} days")
    return days


def load_bookable_property(
    db: Session,
    property_id: int | None,
    start_date: date | None,
    end_date: date | None,
    guests: int | None = None,
    today: date | None = None,
    lock: bool = False,
) -> tuple[Property, int]:
    """Run every pre-write check shared by the availability query and booking creation."""
    if not property_id or start_date is None or end_date is None:
        raise ValidationError("Property ID, start date, and end date are required")
    days = validate_booking_dates(start_date, end_date, today)

    repo = PropertyRepository(db)
    prop = repo.get_for_update(property_id) if lock else repo.get(property_id)
    if not prop:
        raise NotFound("Property not found")

    if guests is not None:
        if guests < 1:
            raise ValidationError("Guests must be at least 1")
        if guests > prop.max_guests:
            raise CapacityExceeded(prop.max_guests, guests)
    return prop, days


def check_availability(
    db: Session,
    property_id: int | None,
    start_date: date | None,
    end_date: date | None,
    guests: int | None = None,
    today: date | None = None,
) -> AvailabilityResult:
    today = today or date.today()
    prop, days = load_bookable_property(db, property_id, start_date, end_date, guests, today)

    bookings = BookingRepository(db)
    conflicts = bookings.find_conflicts(prop.id, start_date, end_date)
    available = not conflicts
    return AvailabilityResult(
        property=prop,
        start_date=start_date,
        end_date=end_date,
        number_of_days=days,
        guests=guests,
        available=available,
        total_price=total_price(start_date, end_date, prop.price_per_day) if available else None,
        conflicts=conflicts,
        upcoming=bookings.upcoming(prop.id, today),
    )
