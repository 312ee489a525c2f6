"""One repository per entity. Services never build queries themselves."""
from rentals.repositories.amenities import AmenityRepository
from rentals.repositories.bookings import BookingRepository
from rentals.repositories.properties import PropertyFilters, PropertyRepository
from rentals.repositories.reviews import ReviewRepository
from rentals.repositories.users import UserRepository

__all__ = [
    "AmenityRepository",
    "BookingRepository",
    "PropertyFilters",
    "PropertyRepository",
    "ReviewRepository",
    "UserRepository",
]
