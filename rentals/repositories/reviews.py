from __future__ import annotations

from sqlalchemy.orm import Session, selectinload

from rentals.models.property import Property
from rentals.models.review import Review


class ReviewRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_booking(self, booking_id: int) -> Review | None:
        return self.db.query(Review).filter(Review.booking_id == booking_id).first()

    def for_property(self, property_id: int) -> list[Review]:
        return (
            self.db.query(Review)
            .options(selectinload(Review.author))
            .filter(Review.property_id == property_id)
            .order_by(Review.property_rating.desc(), Review.id.asc())
            .all()
        )

    def for_author(self, author_id: int) -> list[tuple[Review, Property]]:
        return (
            self.db.query(Review, Property)
            .join(Property, Review.property_id == Property.id)
            .filter(Review.author_id == author_id)
            .order_by(Review.property_rating.desc(), Review.id.asc())
            .all()
        )

    def add(self, review: Review) -> Review:
        self.db.add(review)
        self.db.flush()
        return review

    def delete(self, review: Review) -> None:
        self.db.delete(review)
        self.db.flush()
