"""Occupant models: reservations and waitlist entries"""

from sqlalchemy import Column, String, Integer, ForeignKey, JSON, Text
from sqlalchemy.orm import relationship

from seating.database import Base, UTCDateTime, utcnow


class Reservation(Base):
    """Table reservations"""
    __tablename__ = "reservations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"), nullable=False)

    # Contact information
    contact_name = Column(String(255), nullable=False)
    contact_phone = Column(String(20))
    contact_email = Column(String(255))

    # Reservation details
    party_size = Column(Integer, nullable=False)
    start_time = Column(UTCDateTime)
    duration_minutes = Column(Integer, default=60)

    # Status
    status = Column(String(50), default="booked")  # booked, reserved, seated, finished, canceled, no_show

    # Up to 3 ordered seat-label lists, e.g. [["A1", "A2"], ["B1", "B2"]]
    seat_preferences = Column(JSON, default=list)

    notes = Column(Text)

    # Metadata
    created_at = Column(UTCDateTime, default=utcnow)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    restaurant = relationship("Restaurant", back_populates="reservations")


class WaitlistEntry(Base):
    """Walk-in parties waiting for seats"""
    __tablename__ = "waitlist_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"), nullable=False)

    contact_name = Column(String(255), nullable=False)
    contact_phone = Column(String(20))
    party_size = Column(Integer, nullable=False)
    check_in_time = Column(UTCDateTime, default=utcnow)

    status = Column(String(50), default="waiting")  # waiting, seated, removed, no_show

    created_at = Column(UTCDateTime, default=utcnow)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    restaurant = relationship("Restaurant", back_populates="waitlist_entries")
