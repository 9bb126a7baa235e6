"""Floor layout models: layouts, seat sections and seats"""

from sqlalchemy import Column, String, Integer, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship

from seating.database import Base, UTCDateTime, utcnow


class Layout(Base):
    """A named floor plan made of seat sections"""
    __tablename__ = "layouts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"), nullable=False)
    name = Column(String(255), nullable=False)

    created_at = Column(UTCDateTime, default=utcnow)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    restaurant = relationship(
        "Restaurant",
        back_populates="layouts",
        foreign_keys=[restaurant_id],
    )
    seat_sections = relationship(
        "SeatSection",
        back_populates="layout",
        order_by="SeatSection.sort_order, SeatSection.id",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    def iter_seats(self):
        """Yield (section, seat) pairs in display order"""
        for section in self.seat_sections:
            for seat in section.seats:
                yield section, seat


class SeatSection(Base):
    """A table or counter placed on the floor"""
    __tablename__ = "seat_sections"

    id = Column(Integer, primary_key=True, autoincrement=True)
    layout_id = Column(Integer, ForeignKey("layouts.id"), nullable=False)
    name = Column(String(255), nullable=False)
    section_type = Column(String(20), default="counter")  # table, counter
    orientation = Column(String(20), default="vertical")  # vertical, horizontal
    floor_number = Column(Integer, default=1)
    offset_x = Column(Integer, default=0)
    offset_y = Column(Integer, default=0)
    sort_order = Column(Integer, default=0)

    # Relationships
    layout = relationship("Layout", back_populates="seat_sections")
    seats = relationship(
        "Seat",
        back_populates="section",
        order_by="Seat.sort_order, Seat.id",
        lazy="selectin",
        cascade="all, delete-orphan",
    )


class Seat(Base):
    """An individually addressable seat; position is relative to its section"""
    __tablename__ = "seats"

    id = Column(Integer, primary_key=True, autoincrement=True)
    seat_section_id = Column(Integer, ForeignKey("seat_sections.id"), nullable=False)
    label = Column(String(50), nullable=False)
    position_x = Column(Integer, default=0)
    position_y = Column(Integer, default=0)
    capacity = Column(Integer, default=1)
    sort_order = Column(Integer, default=0)

    # Relationships
    section = relationship("SeatSection", back_populates="seats")

    __table_args__ = (
        UniqueConstraint("seat_section_id", "label", name="uq_seat_section_label"),
        CheckConstraint("capacity >= 1", name="check_seat_capacity_positive"),
    )
