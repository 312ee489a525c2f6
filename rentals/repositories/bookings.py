"""Booking persistence and the overlap query."""
from __future__ import annotations

from datetime import date

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from rentals.models.booking import Booking, BookingStatus
from rentals.models.property import Property


class BookingRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, booking_id: int) -> Booking | None:
        return (
            self.db.query(Booking)
            .options(selectinload(Booking.property))
            .filter(Booking.id == booking_id)
            .first()
        )

    def add(self, booking: Booking) -> Booking:
        self.db.add(booking)
        self.db.flush()
        return booking

    def find_conflicts(self, property_id: int, start: date, end: date) -> list[Booking]:
        """Non-cancelled bookings whose closed [start_date, end_date] intersects [start, end]."""
        return (
            self.db.query(Booking)
            .filter(
                Booking.property_id == property_id,
                Booking.status != BookingStatus.cancelled,
                Booking.start_date <= end,
                Booking.end_date >= start,
            )
            .order_by(Booking.start_date.asc())
            .all()
        )

    def upcoming(self, property_id: int, today: date, limit: int = 5) -> list[Booking]:
        return (
            self.db.query(Booking)
            .filter(
                Booking.property_id == property_id,
                Booking.status != BookingStatus.cancelled,
                Booking.end_date >= today,
            )
            .order_by(Booking.start_date.asc())
            .limit(limit)
            .all()
        )

    def for_guest(self, guest_id: int) -> list[Booking]:
        return (
            self.db.query(Booking)
            .options(selectinload(Booking.property).selectinload(Property.images), selectinload(Booking.property).selectinload(Property.owner))
            .filter(Booking.guest_id == guest_id)
            .order_by(Booking.start_date.desc())
            .all()
        )

    def for_host(self, host_id: int) -> list[Booking]:
        return (
            self.db.query(Booking)
            .join(Property, Booking.property_id == Property.id)
            .options(selectinload(Booking.property).selectinload(Property.images), selectinload(Booking.guest))
            .filter(Property.owner_id == host_id)
            .order_by(Booking.start_date.desc())
            .all()
        )

    def all(self) -> list[Booking]:
        return (
            self.db.query(Booking)
            .options(selectinload(Booking.property).selectinload(Property.owner), selectinload(Booking.guest))
            .order_by(Booking.booking_date.desc(), Booking.id.desc())
            .all()
        )

    def count(self) -> int:
        return self.db.query(func.count(Booking.id)).scalar() or 0

    def count_for_property(self, property_id: int) -> int:
        return self.db.query(func.count(Booking.id)).filter(Booking.property_id == property_id).scalar() or 0

    def revenue(self) -> float:
        total = self.db.query(func.sum(Booking.total_amount)).scalar()
        return float(total or 0)
