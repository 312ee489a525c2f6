"""
All SQLAlchemy models. Schema is the source of truth for new DBs.
Base.metadata.create_all() creates every table; no migration scripts needed for fresh installs.
"""
from rentals.models.user import User
from rentals.models.property import Property, PropertyType, House, Flat, Room, PropertyImage
from rentals.models.amenity import Amenity, property_amenities
from rentals.models.booking import Booking, BookingStatus
from rentals.models.review import Review

__all__ = [
    "User",
    "Property",
    "PropertyType",
    "House",
    "Flat",
    "Room",
    "PropertyImage",
    "Amenity",
    "property_amenities",
    "Booking",
    "BookingStatus",
    "Review",
]
