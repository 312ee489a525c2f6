"""Bookings: availability, create, status changes, guest and host lists."""
from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from rentals.database import get_db
from rentals.dependencies import get_current_user, require_host
from rentals.models.user import User
from rentals.repositories import BookingRepository
from rentals.schemas.booking import (
    AvailabilityPropertyDetails,
    AvailabilityResponse,
    BookingCreate,
    BookingDetailResponse,
    BookingResponse,
    BookingStatusUpdate,
    ConflictingBooking,
    UpcomingBooking,
    booking_detail,
)
from rentals.services.availability import check_availability
from rentals.services.bookings import create_booking, get_booking_for, update_booking_status

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.get("/availability", response_model=AvailabilityResponse)
def availability(
    property_id: int | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    guests: int | None = Query(None),
    db: Session = Depends(get_db),
):
    result = check_availability(db, property_id, start_date, end_date, guests)
    prop = result.property
    return AvailabilityResponse(
        property_id=prop.id,
        available=result.available,
        start_date=result.start_date,
        end_date=result.end_date,
        number_of_days=result.number_of_days,
        guests=result.guests,
        max_guests=prop.max_guests,
        price_per_day=prop.price_per_day,
        total_price=result.total_price,
        conflicting_bookings=[ConflictingBooking.model_validate(b) for b in result.conflicts],
        upcoming_bookings=[UpcomingBooking.model_validate(b) for b in result.upcoming],
        property_details=AvailabilityPropertyDetails(
            title=prop.title, city=prop.city, property_type=prop.property_type
        ),
    )


@router.get("/user", response_model=list[BookingDetailResponse])
def my_bookings(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return [booking_detail(b) for b in BookingRepository(db).for_guest(current_user.id)]


@router.get("/host", response_model=list[BookingDetailResponse])
def host_bookings(db: Session = Depends(get_db), current_user: User = Depends(require_host)):
    return [booking_detail(b) for b in BookingRepository(db).for_host(current_user.id)]


@router.get("/{booking_id}", response_model=BookingDetailResponse)
def get_booking(booking_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return booking_detail(get_booking_for(db, current_user, booking_id))


@router.post("", response_model=BookingDetailResponse, status_code=201)
def create(data: BookingCreate, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    booking, days = create_booking(
        db, current_user, data.property_id, data.start_date, data.end_date, data.guests
    )
    return booking_detail(booking, days)


@router.put("/{booking_id}/status", response_model=BookingResponse)
def update_status(
    booking_id: int,
    data: BookingStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return update_booking_status(db, current_user, booking_id, data.status)
