"""Booking creation and the booking status state machine."""
from __future__ import annotations

import logging
from datetime import date

from sqlalchemy.orm import Session

from rentals.database import atomic
from rentals.domain import total_price
from rentals.errors import Conflict, Forbidden, InvalidStatus, NotFound
from rentals.models.booking import Booking, BookingStatus
from rentals.models.user import User
from rentals.repositories import BookingRepository
from rentals.services.availability import load_bookable_property

logger = logging.getLogger(__name__)

# Allowed moves; Cancelled and Completed are terminal
TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.pending: frozenset({BookingStatus.confirmed, BookingStatus.cancelled}),
    BookingStatus.confirmed: frozenset({BookingStatus.cancelled, BookingStatus.completed}),
    BookingStatus.cancelled: frozenset(),
    BookingStatus.completed: frozenset(),
}

SETTABLE_STATUSES = (BookingStatus.confirmed, BookingStatus.cancelled, BookingStatus.completed)


def create_booking(
    db: Session,
    guest: User,
    property_id: int | None,
    start_date: date | None,
    end_date: date | None,
    guests: int | None = None,
    today: date | None = None,
) -> tuple[Booking, int]:
    """
    Place a Pending booking. Returns (booking, number_of_days).

    The property row is locked before the overlap query, so two requests for the same
    property run check-then-insert one after the other and the second sees the first.
    """
    today = today or date.today()
    with atomic(db):
        prop, days = load_bookable_property(db, property_id, start_date, end_date, guests, today, lock=True)
        if prop.owner_id == guest.id:
            raise Forbidden("You cannot book your own property")

        bookings = BookingRepository(db)
        if bookings.find_conflicts(prop.id, start_date, end_date):
            raise Conflict("Property is not available for the selected dates")

        booking = bookings.add(
            Booking(
                property_id=prop.id,
                guest_id=guest.id,
                status=BookingStatus.pending,
                booking_date=today,
                start_date=start_date,
                end_date=end_date,
                guests=guests if guests is not None else prop.max_guests,
                total_amount=total_price(start_date, end_date, prop.price_per_day),
            )
        )
    db.refresh(booking)
    logger.info("Booking %s created for property %s by user %s", booking.id, prop.id, guest.id)
    return booking, days


def parse_status(value: str | BookingStatus | None) -> BookingStatus:
    if isinstance(value, BookingStatus):
        status = value
    else:
        try:
            status = BookingStatus(str(value or "").strip().capitalize())
        except ValueError:
            raise InvalidStatus("Invalid status") from None
    if status not in SETTABLE_STATUSES:
        raise InvalidStatus("Invalid status")
    return status


def update_booking_status(db: Session, actor: User, booking_id: int, status: str | BookingStatus) -> Booking:
    target = parse_status(status)

    booking = BookingRepository(db).get(booking_id)
    if not booking:
        raise NotFound("Booking not found")

    host_id = booking.property.owner_id
    if target == BookingStatus.confirmed and actor.id != host_id:
        raise Forbidden("Only the host can confirm bookings")
    if target == BookingStatus.completed and actor.id != host_id:
        raise Forbidden("Only the host can mark bookings as completed")
    if target == BookingStatus.cancelled and actor.id not in (host_id, booking.guest_id):
        raise Forbidden("Unauthorized to cancel this booking")

    current = booking.status
    if target not in TRANSITIONS[current]:
        raise Conflict(
            f"Cannot change booking status from {current.value} to {target.value}",
            current_status=current.value,
        )

    with atomic(db):
        booking.status = target
    db.refresh(booking)
    logger.info("Booking %s: %s -> %s by user %s", booking.id, current.value, target.value, actor.id)
    return booking


def get_booking_for(db: Session, actor: User, booking_id: int) -> Booking:
    booking = BookingRepository(db).get(booking_id)
    if not booking or actor.id not in (booking.guest_id, booking.property.owner_id):
        raise NotFound("Booking not found or unauthorized")
    return booking
