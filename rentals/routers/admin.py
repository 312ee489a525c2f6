"""Admin: system stats, user roles, and read-only views over properties and bookings."""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from rentals.database import atomic, get_db
from rentals.dependencies import require_admin
from rentals.errors import Conflict, NotFound
from rentals.models.user import User
from rentals.repositories import AmenityRepository, BookingRepository, PropertyRepository, UserRepository
from rentals.schemas.admin import (
    AdminBookingView,
    AdminPropertyView,
    AdminStatusUpdate,
    BookingStats,
    FacilityStats,
    PropertyStats,
    SystemStats,
    UserStats,
)
from rentals.schemas.amenity import AmenityCreate, AmenityResponse
from rentals.schemas.auth import UserResponse
from rentals.services.amenities import add_amenity, remove_amenity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("/stats", response_model=SystemStats)
def stats(db: Session = Depends(get_db)):
    users = UserRepository(db)
    bookings = BookingRepository(db)
    total_users = users.count()
    admins = users.count_admins()
    return SystemStats(
        users=UserStats(total=total_users, admins=admins, regular=total_users - admins),
        properties=PropertyStats(total=PropertyRepository(db).count()),
        bookings=BookingStats(total=bookings.count(), revenue=bookings.revenue()),
        facilities=FacilityStats(total=AmenityRepository(db).count()),
    )


@router.get("/users", response_model=list[UserResponse])
def list_users(db: Session = Depends(get_db)):
    return UserRepository(db).all()


@router.put("/users/{user_id}/admin-status", response_model=UserResponse)
def set_admin_status(
    user_id: int,
    data: AdminStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    users = UserRepository(db)
    user = users.get(user_id)
    if not user:
        raise NotFound("User not found")
    if user.is_admin and not data.is_admin and users.count_admins() <= 1:
        raise Conflict("Cannot remove the last admin")
    with atomic(db):
        user.is_admin = data.is_admin
    db.refresh(user)
    logger.info("User %s admin=%s (changed by %s)", user.id, user.is_admin, current_user.id)
    return user


@router.get("/properties", response_model=list[AdminPropertyView])
def list_properties(db: Session = Depends(get_db)):
    bookings = BookingRepository(db)
    out = []
    for prop, owner in PropertyRepository(db).list_with_owner():
        primary = next((img.image_url for img in prop.images if img.is_primary), None)
        out.append(
            AdminPropertyView(
                id=prop.id,
                title=prop.title,
                city=prop.city,
                property_type=prop.property_type,
                price_per_day=float(prop.price_per_day),
                owner_id=prop.owner_id,
                owner_name=owner.name if owner else None,
                owner_email=owner.email if owner else None,
                primary_image=primary,
                booking_count=bookings.count_for_property(prop.id),
            )
        )
    return out


@router.get("/bookings", response_model=list[AdminBookingView])
def list_bookings(db: Session = Depends(get_db)):
    out = []
    for b in BookingRepository(db).all():
        prop = b.property
        owner = prop.owner if prop else None
        out.append(
            AdminBookingView(
                id=b.id,
                property_id=b.property_id,
                property_title=prop.title if prop else None,
                property_address=prop.address if prop else None,
                guest_id=b.guest_id,
                guest_name=b.guest.name if b.guest else None,
                guest_email=b.guest.email if b.guest else None,
                owner_name=owner.name if owner else None,
                owner_email=owner.email if owner else None,
                status=b.status,
                booking_date=b.booking_date,
                start_date=b.start_date,
                end_date=b.end_date,
                total_amount=float(b.total_amount),
            )
        )
    return out


@router.get("/facilities", response_model=list[AmenityResponse])
def list_facilities(db: Session = Depends(get_db)):
    return AmenityRepository(db).all()


@router.post("/facilities", response_model=AmenityResponse, status_code=201)
def create_facility(data: AmenityCreate, db: Session = Depends(get_db)):
    return add_amenity(db, data)


@router.delete("/facilities/{facility_id}")
def delete_facility(facility_id: int, db: Session = Depends(get_db)):
    remove_amenity(db, facility_id)
    return {"message": "Facility deleted successfully"}
