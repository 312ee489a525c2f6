"""Seed the default amenity catalogue."""
from sqlalchemy.orm import Session
from rentals.models.amenity import Amenity

DEFAULT_AMENITIES = [
    ("Wifi", "wifi"),
    ("Kitchen", "kitchen"),
    ("Parking", "local_parking"),
    ("Pool", "pool"),
    ("Air conditioning", "ac_unit"),
    ("Washer", "local_laundry_service"),
]


def seed_amenities(db: Session) -> None:
    if db.query(Amenity).count() > 0:
        return
    for name, icon in DEFAULT_AMENITIES:
        db.add(Amenity(name=name, icon=icon))
    db.commit()
