"""Pydantic schemas for request/response validation"""

from seating.schemas.layout import (
    SeatResponse,
    SeatSectionResponse,
    LayoutSummary,
    LayoutResponse,
    LayoutBoundsResponse,
)
from seating.schemas.reservation import (
    ReservationCreate,
    ReservationUpdate,
    ReservationResponse,
    ReservationListResponse,
    PreferenceOptionResponse,
    WaitlistEntryCreate,
    WaitlistEntryUpdate,
    WaitlistEntryResponse,
)
from seating.schemas.seat_allocation import (
    OccupantActionRequest,
    SeatAssignRequest,
    SeatAllocationResponse,
    SeatMapEntryResponse,
)

__all__ = [
    "SeatResponse",
    "SeatSectionResponse",
    "LayoutSummary",
    "LayoutResponse",
    "LayoutBoundsResponse",
    "ReservationCreate",
    "ReservationUpdate",
    "ReservationResponse",
    "ReservationListResponse",
    "PreferenceOptionResponse",
    "WaitlistEntryCreate",
    "WaitlistEntryUpdate",
    "WaitlistEntryResponse",
    "OccupantActionRequest",
    "SeatAssignRequest",
    "SeatAllocationResponse",
    "SeatMapEntryResponse",
]
