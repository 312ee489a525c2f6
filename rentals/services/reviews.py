"""Reviews: one per completed booking, editable only by the guest who wrote it."""
from __future__ import annotations

from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from rentals.database import atomic
from rentals.errors import Conflict, NotFound, ValidationError
from rentals.models.booking import BookingStatus
from rentals.models.review import Review
from rentals.models.user import User
from rentals.repositories import BookingRepository, ReviewRepository


def create_review(
    db: Session,
    author: User,
    booking_id: int,
    property_id: int,
    property_rating: int,
    property_review: str | None = None,
    host_rating: int | None = None,
    host_review: str | None = None,
) -> Review:
    booking = BookingRepository(db).get(booking_id)
    if (
        not booking
        or booking.guest_id != author.id
        or booking.property_id != property_id
        or booking.status != BookingStatus.completed
    ):
        raise ValidationError("You can only review properties from completed bookings")

    reviews = ReviewRepository(db)
    if reviews.get_by_booking(booking_id):
        raise Conflict("You have already reviewed this booking")

    try:
        with atomic(db):
            review = reviews.add(
                Review(
                    booking_id=booking_id,
                    property_id=property_id,
                    author_id=author.id,
                    property_rating=property_rating,
                    property_review=property_review,
                    host_rating=host_rating,
                    host_review=host_review,
                )
            )
    except IntegrityError:
        # a concurrent request inserted the review after the check above
        raise Conflict("You have already reviewed this booking") from None
    db.refresh(review)
    return review


def _own_review(db: Session, author: User, booking_id: int, action: str) -> Review:
    review = ReviewRepository(db).get_by_booking(booking_id)
    if not review or review.author_id != author.id:
        raise NotFound(f"Review not found or you do not have permission to {action} it")
    return review


def update_review(db: Session, author: User, booking_id: int, changes: dict[str, Any]) -> Review:
    review = _own_review(db, author, booking_id, "update")
    with atomic(db):
        for key, value in changes.items():
            setattr(review, key, value)
    db.refresh(review)
    return review


def delete_review(db: Session, author: User, booking_id: int) -> None:
    review = _own_review(db, author, booking_id, "delete")
    with atomic(db):
        ReviewRepository(db).delete(review)
