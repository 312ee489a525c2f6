"""Users: guests, hosts and admins."""
from sqlalchemy import Column, Integer, String, DateTime, Boolean
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from rentals.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)

    phone = Column(String(50), nullable=True)
    address = Column(String(255), nullable=True)
    profile_image = Column(String(500), nullable=True)

    is_host = Column(Boolean, default=False, nullable=False)
    is_admin = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    properties = relationship("Property", back_populates="owner", cascade="all, delete-orphan", passive_deletes=True)
    bookings = relationship("Booking", back_populates="guest", cascade="all, delete-orphan", passive_deletes=True)
