"""Seat allocation model and lifecycle statuses"""

import enum

from sqlalchemy import Column, String, Integer, ForeignKey, Index, CheckConstraint

from seating.database import Base, UTCDateTime, utcnow


class OccupantKind(str, enum.Enum):
    """The two kinds of party that can hold seats"""
    RESERVATION = "reservation"
    WAITLIST = "waitlist"


class AllocationStatus(str, enum.Enum):
    """Occupant status as recorded on an allocation"""
    RESERVED = "reserved"
    SEATED = "seated"
    OCCUPIED = "occupied"  # legacy alias of seated
    FINISHED = "finished"
    NO_SHOW = "no_show"
    CANCELED = "canceled"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value) -> "AllocationStatus":
        """Map a stored value onto the state machine; anything unrecognized is UNKNOWN"""
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN

    @property
    def is_terminal(self) -> bool:
        return self in (AllocationStatus.FINISHED, AllocationStatus.NO_SHOW, AllocationStatus.CANCELED)


class SeatAllocation(Base):
    """Binds one seat to one occupant for a half-open [start_time, end_time) window"""
    __tablename__ = "seat_allocations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    seat_id = Column(Integer, ForeignKey("seats.id"), nullable=False)

    # Occupant reference
    occupant_type = Column(String(20), nullable=False)  # reservation, waitlist
    occupant_id = Column(Integer, nullable=False)

    # Snapshot taken at assignment time, for seat-map rendering
    occupant_name = Column(String(255))
    occupant_party_size = Column(Integer)
    occupant_status = Column(String(50), nullable=False)

    start_time = Column(UTCDateTime, nullable=False)
    end_time = Column(UTCDateTime, nullable=False)
    released_at = Column(UTCDateTime)  # null while active

    created_at = Column(UTCDateTime, default=utcnow)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("ix_seat_allocations_seat_window", "seat_id", "start_time", "end_time"),
        Index("ix_seat_allocations_occupant", "occupant_type", "occupant_id"),
        CheckConstraint("end_time > start_time", name="check_allocation_window"),
    )

    @property
    def is_active(self) -> bool:
        return self.released_at is None

    @property
    def status(self) -> AllocationStatus:
        return AllocationStatus.parse(self.occupant_status)

    def overlaps(self, start, end) -> bool:
        """Half-open interval test: abutting windows do not overlap"""
        return self.start_time < end and start < self.end_time
