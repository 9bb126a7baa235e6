"""Restaurant model"""

from sqlalchemy import Column, String, Integer, Boolean, ForeignKey
from sqlalchemy.orm import relationship

from seating.database import Base, UTCDateTime, utcnow


class Restaurant(Base):
    """A restaurant operating one floor plan at a time"""
    __tablename__ = "restaurants"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    timezone = Column(String(50), default="America/New_York")
    is_active = Column(Boolean, default=True)

    # Active floor plan; layouts themselves are edited elsewhere
    current_layout_id = Column(
        Integer,
        ForeignKey("layouts.id", use_alter=True, name="fk_restaurants_current_layout"),
    )

    # Seating defaults, fall back to application settings when null
    default_service_time = Column(String(5))  # "HH:MM", e.g. "18:00"
    default_seating_minutes = Column(Integer)

    created_at = Column(UTCDateTime, default=utcnow)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    layouts = relationship(
        "Layout",
        back_populates="restaurant",
        foreign_keys="Layout.restaurant_id",
    )
    reservations = relationship("Reservation", back_populates="restaurant")
    waitlist_entries = relationship("WaitlistEntry", back_populates="restaurant")
