"""Seat allocation services"""

from seating.services.allocation_engine import AllocationEngine, SeatMapEntry, allowed_actions
from seating.services.allocation_repository import AllocationRepository
from seating.services.bounds import LayoutBounds, compute_layout_bounds
from seating.services.layout_store import LayoutStore, SeatIndex
from seating.services.occupants import OccupantRef, OccupantResolver, ResolvedOccupant
from seating.services.seat_preferences import (
    PreferenceOption,
    SeatPreferenceMatcher,
    evaluate_options,
    validate_preferences,
)

__all__ = [
    "AllocationEngine",
    "SeatMapEntry",
    "allowed_actions",
    "AllocationRepository",
    "LayoutBounds",
    "compute_layout_bounds",
    "LayoutStore",
    "SeatIndex",
    "OccupantRef",
    "OccupantResolver",
    "ResolvedOccupant",
    "PreferenceOption",
    "SeatPreferenceMatcher",
    "evaluate_options",
    "validate_preferences",
]
