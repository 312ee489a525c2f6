"""Amenity catalogue. Mounted at both /api/amenities and /api/facilities."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from rentals.database import get_db
from rentals.dependencies import require_admin
from rentals.errors import NotFound
from rentals.models.user import User
from rentals.repositories import AmenityRepository
from rentals.schemas.amenity import AmenityCreate, AmenityResponse, AmenityUpdate
from rentals.services.amenities import add_amenity, remove_amenity, update_amenity

# No prefix: main.py includes this router under both paths
router = APIRouter(tags=["amenities"])


@router.get("", response_model=list[AmenityResponse])
def list_amenities(db: Session = Depends(get_db)):
    return AmenityRepository(db).all()


@router.get("/{amenity_id}", response_model=AmenityResponse)
def get_amenity(amenity_id: int, db: Session = Depends(get_db)):
    amenity = AmenityRepository(db).get(amenity_id)
    if not amenity:
        raise NotFound("Facility not found")
    return amenity


@router.post("", response_model=AmenityResponse, status_code=201)
def create(data: AmenityCreate, db: Session = Depends(get_db), _: User = Depends(require_admin)):
    return add_amenity(db, data)


@router.put("/{amenity_id}", response_model=AmenityResponse)
def update(
    amenity_id: int,
    data: AmenityUpdate,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
):
    return update_amenity(db, amenity_id, data)


@router.delete("/{amenity_id}")
def delete(amenity_id: int, db: Session = Depends(get_db), _: User = Depends(require_admin)):
    remove_amenity(db, amenity_id)
    return {"message": "Facility deleted successfully"}
