"""Amenity catalogue writes; names are unique case-insensitively."""
import logging

from sqlalchemy.orm import Session

from rentals.database import atomic
from rentals.errors import Conflict, NotFound
from rentals.models.amenity import Amenity
from rentals.repositories import AmenityRepository
from rentals.schemas.amenity import AmenityCreate, AmenityUpdate

logger = logging.getLogger(__name__)


def _get(amenities: AmenityRepository, amenity_id: int) -> Amenity:
    amenity = amenities.get(amenity_id)
    if not amenity:
        raise NotFound("Facility not found")
    return amenity


def add_amenity(db: Session, data: AmenityCreate) -> Amenity:
    amenities = AmenityRepository(db)
    if amenities.by_name(data.name):
        raise Conflict("Facility already exists")
    with atomic(db):
        amenity = amenities.add(Amenity(name=data.name.strip(), icon=data.icon))
    db.refresh(amenity)
    logger.info("Amenity %s (%s) created", amenity.id, amenity.name)
    return amenity


def update_amenity(db: Session, amenity_id: int, data: AmenityUpdate) -> Amenity:
    amenities = AmenityRepository(db)
    amenity = _get(amenities, amenity_id)
    existing = amenities.by_name(data.name)
    if existing and existing.id != amenity.id:
        raise Conflict("Facility already exists")
    with atomic(db):
        amenity.name = data.name.strip()
        if "icon" in data.model_fields_set:
            amenity.icon = data.icon
    db.refresh(amenity)
    return amenity


def remove_amenity(db: Session, amenity_id: int) -> None:
    amenities = AmenityRepository(db)
    amenity = _get(amenities, amenity_id)
    with atomic(db):
        amenities.delete(amenity)
    logger.info("Amenity %s deleted", amenity_id)
