"""Database models"""

from seating.models.restaurant import Restaurant
from seating.models.layout import Layout, SeatSection, Seat
from seating.models.reservation import Reservation, WaitlistEntry
from seating.models.seat_allocation import SeatAllocation, AllocationStatus, OccupantKind

__all__ = [
    "Restaurant",
    "Layout",
    "SeatSection",
    "Seat",
    "Reservation",
    "WaitlistEntry",
    "SeatAllocation",
    "AllocationStatus",
    "OccupantKind",
]
