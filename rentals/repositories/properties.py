"""Property persistence, including the House/Flat/Room subtype rows."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, selectinload

from rentals.domain import FlatDetails, HouseDetails, PropertyDetails, RoomDetails
from rentals.models.amenity import Amenity
from rentals.models.property import Flat, House, Property, PropertyImage, PropertyType, Room
from rentals.models.review import Review
from rentals.models.user import User


@dataclass
class PropertyFilters:
    city: str | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    bedrooms: int | None = None
    property_type: PropertyType | None = None
    search: str | None = None


class PropertyRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, property_id: int) -> Property | None:
        return self.db.query(Property).filter(Property.id == property_id).first()

    def get_for_update(self, property_id: int) -> Property | None:
        """Row-lock the property until the surrounding transaction ends (no-op on SQLite)."""
        return self.db.query(Property).filter(Property.id == property_id).with_for_update().first()

    def add(self, prop: Property) -> Property:
        self.db.add(prop)
        self.db.flush()
        return prop

    def delete(self, prop: Property) -> None:
        self.db.delete(prop)
        self.db.flush()

    # Subtype rows

    def save_details(self, prop: Property, details: PropertyDetails) -> None:
        """Write the one subtype row matching details; any row of another type is removed."""
        if isinstance(details, HouseDetails):
            prop.flat = None
            prop.room = None
            if prop.house is None:
                prop.house = House(property_id=prop.id, total_bedrooms=details.total_bedrooms)
            else:
                prop.house.total_bedrooms = details.total_bedrooms
        elif isinstance(details, FlatDetails):
            prop.house = None
            prop.room = None
            if prop.flat is None:
                prop.flat = Flat(property_id=prop.id, total_rooms=details.total_rooms)
            else:
                prop.flat.total_rooms = details.total_rooms
        elif isinstance(details, RoomDetails):
            prop.house = None
            prop.flat = None
            if prop.room is None:
                prop.room = Room(property_id=prop.id, total_beds=details.total_beds)
            else:
                prop.room.total_beds = details.total_beds
        else:
            raise TypeError(f"unknown property details: {details!r}")
        self.db.flush()

    @staticmethod
    def details_of(prop: Property) -> PropertyDetails | None:
        if prop.property_type == PropertyType.house and prop.house is not None:
            return HouseDetails(prop.house.total_bedrooms)
        if prop.property_type == PropertyType.flat and prop.flat is not None:
            return FlatDetails(prop.flat.total_rooms)
        if prop.property_type == PropertyType.room and prop.room is not None:
            return RoomDetails(prop.room.total_beds)
        return None

    # Amenities and images

    def set_amenities(self, prop: Property, amenities: list[Amenity]) -> None:
        prop.amenities = list(amenities)
        self.db.flush()

    def clear_images(self, prop: Property) -> None:
        for image in list(prop.images):
            self.db.delete(image)
        self.db.flush()
        self.db.expire(prop, ["images"])

    def add_image(self, prop: Property, url: str, position: int, is_primary: bool) -> PropertyImage:
        image = PropertyImage(property_id=prop.id, image_url=url, position=position, is_primary=is_primary)
        self.db.add(image)
        self.db.flush()
        return image

    # Reads

    def reviews_for(self, property_id: int) -> list[Review]:
        return (
            self.db.query(Review)
            .options(selectinload(Review.author))
            .filter(Review.property_id == property_id)
            .order_by(Review.created_at.desc(), Review.id.desc())
            .all()
        )

    def search(self, filters: PropertyFilters, page: int, limit: int) -> tuple[list[Property], int]:
        q = self.db.query(Property)
        if filters.city:
            q = q.filter(func.lower(Property.city) == filters.city.strip().lower())
        if filters.min_price is not None:
            q = q.filter(Property.price_per_day >= filters.min_price)
        if filters.max_price is not None:
            q = q.filter(Property.price_per_day <= filters.max_price)
        if filters.bedrooms is not None:
            q = q.join(House, House.property_id == Property.id).filter(House.total_bedrooms >= filters.bedrooms)
        if filters.property_type is not None:
            q = q.filter(Property.property_type == filters.property_type)
        if filters.search:
            like = f"%{filters.search.strip()}%"
            q = q.filter(or_(Property.title.ilike(like), Property.description.ilike(like), Property.city.ilike(like)))
        total = q.count()
        rows = (
            q.options(selectinload(Property.images), selectinload(Property.amenities), selectinload(Property.owner))
            .order_by(Property.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return rows, total

    def list_by_owner(self, owner_id: int) -> list[Property]:
        return (
            self.db.query(Property)
            .options(selectinload(Property.images))
            .filter(Property.owner_id == owner_id)
            .order_by(Property.id.desc())
            .all()
        )

    def list_with_owner(self) -> list[tuple[Property, User]]:
        return (
            self.db.query(Property, User)
            .outerjoin(User, Property.owner_id == User.id)
            .order_by(Property.id.desc())
            .all()
        )

    def count(self) -> int:
        return self.db.query(func.count(Property.id)).scalar() or 0
