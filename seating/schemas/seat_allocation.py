"""Seat allocation schemas"""

from datetime import date as Date, datetime
from typing import Optional, List
from pydantic import BaseModel, Field

from seating.models.seat_allocation import OccupantKind


class OccupantActionRequest(BaseModel):
    """Identifies the party an arrive/finish/no-show/cancel applies to"""
    occupant_type: OccupantKind
    occupant_id: int


class SeatAssignRequest(OccupantActionRequest):
    """Seat-now or reserve request; seats by label, or by id as the floor view sends them"""
    seat_labels: Optional[List[str]] = None
    seat_ids: Optional[List[int]] = None
    layout_id: Optional[int] = None
    date: Optional[Date] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    duration_minutes: Optional[int] = Field(default=None, gt=0)


class SeatAllocationResponse(BaseModel):
    """Seat allocation response"""
    id: int
    seat_id: int
    occupant_type: str
    occupant_id: int
    occupant_name: Optional[str]
    occupant_party_size: Optional[int]
    occupant_status: str
    start_time: datetime
    end_time: datetime
    released_at: Optional[datetime]

    class Config:
        from_attributes = True


class SeatMapEntryResponse(BaseModel):
    """A seat on the floor view with its occupancy"""
    seat_id: int
    label: str
    section_id: int
    section_name: str
    floor_number: int
    capacity: int
    status: str
    allocation_id: Optional[int] = None
    occupant_type: Optional[str] = None
    occupant_id: Optional[int] = None
    occupant_name: Optional[str] = None
    occupant_party_size: Optional[int] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    actions: List[str] = []

    class Config:
        from_attributes = True
