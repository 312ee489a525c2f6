"""Properties and their per-type subtype tables (House / Flat / Room)."""
from sqlalchemy import Column, Integer, String, Text, Numeric, Float, Boolean, ForeignKey, DateTime, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from rentals.database import Base
import enum


class PropertyType(str, enum.Enum):
    house = "House"
    flat = "Flat"
    room = "Room"


class Property(Base):
    __tablename__ = "properties"

    id = Column(Integer, primary_key=True, index=True)
    # Owner is fixed at creation; updates never touch it
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    address = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True, index=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

    price_per_day = Column(Numeric(10, 2), nullable=False)
    max_guests = Column(Integer, nullable=False, default=1)
    property_type = Column(SQLEnum(PropertyType), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    owner = relationship("User", back_populates="properties")

    house = relationship("House", uselist=False, cascade="all, delete-orphan", passive_deletes=True)
    flat = relationship("Flat", uselist=False, cascade="all, delete-orphan", passive_deletes=True)
    room = relationship("Room", uselist=False, cascade="all, delete-orphan", passive_deletes=True)

    images = relationship(
        "PropertyImage",
        order_by="PropertyImage.position",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    amenities = relationship("Amenity", secondary="property_amenities", order_by="Amenity.id")
    bookings = relationship("Booking", back_populates="property", cascade="all, delete-orphan", passive_deletes=True)


class House(Base):
    __tablename__ = "houses"

    property_id = Column(Integer, ForeignKey("properties.id", ondelete="CASCADE"), primary_key=True)
    total_bedrooms = Column(Integer, nullable=False)


class Flat(Base):
    __tablename__ = "flats"

    property_id = Column(Integer, ForeignKey("properties.id", ondelete="CASCADE"), primary_key=True)
    total_rooms = Column(Integer, nullable=False)


class Room(Base):
    __tablename__ = "rooms"

    property_id = Column(Integer, ForeignKey("properties.id", ondelete="CASCADE"), primary_key=True)
    total_beds = Column(Integer, nullable=False)


class PropertyImage(Base):
    __tablename__ = "property_images"

    id = Column(Integer, primary_key=True, index=True)
    property_id = Column(Integer, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True)
    image_url = Column(String(500), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    is_primary = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
