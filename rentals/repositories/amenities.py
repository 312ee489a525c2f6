from __future__ import annotations

from sqlalchemy import func
from sqlalchemy.orm import Session

from rentals.models.amenity import Amenity


class AmenityRepository:
    def __init__(self, db: Session):
        self.db = db

    def all(self) -> list[Amenity]:
        return self.db.query(Amenity).order_by(Amenity.name).all()

    def get(self, amenity_id: int) -> Amenity | None:
        return self.db.query(Amenity).filter(Amenity.id == amenity_id).first()

    def get_many(self, ids: list[int]) -> list[Amenity]:
        """Amenities for ids, in the order of ids; unknown ids are skipped."""
        if not ids:
            return []
        found = {a.id: a for a in self.db.query(Amenity).filter(Amenity.id.in_(ids)).all()}
        return [found[i] for i in ids if i in found]

    def by_name(self, name: str) -> Amenity | None:
        return self.db.query(Amenity).filter(func.lower(Amenity.name) == name.strip().lower()).first()

    def add(self, amenity: Amenity) -> Amenity:
        self.db.add(amenity)
        self.db.flush()
        return amenity

    def delete(self, amenity: Amenity) -> None:
        self.db.delete(amenity)
        self.db.flush()

    def count(self) -> int:
        return self.db.query(func.count(Amenity.id)).scalar() or 0
