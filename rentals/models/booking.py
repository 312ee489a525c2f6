"""Bookings. Never deleted: cancellation is a status."""
from sqlalchemy import Column, Integer, Numeric, Date, ForeignKey, DateTime, Enum as SQLEnum, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from rentals.database import Base
import enum


class BookingStatus(str, enum.Enum):
    pending = "Pending"
    confirmed = "Confirmed"
    cancelled = "Cancelled"
    completed = "Completed"


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (Index("ix_bookings_property_dates", "property_id", "start_date", "end_date"),)

    id = Column(Integer, primary_key=True, index=True)
    property_id = Column(Integer, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False)
    guest_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    status = Column(SQLEnum(BookingStatus), nullable=False, default=BookingStatus.pending)
    booking_date = Column(Date, nullable=False)
    # Closed interval: a booking ending on the 13th blocks a booking starting on the 13th
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    guests = Column(Integer, nullable=False)
    # Fixed at creation; later price changes on the property do not touch it
    total_amount = Column(Numeric(12, 2), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    property = relationship("Property", back_populates="bookings")
    guest = relationship("User", back_populates="bookings")
    review = relationship("Review", uselist=False, back_populates="booking", cascade="all, delete-orphan", passive_deletes=True)
