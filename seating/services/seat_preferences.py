"""Seat preference matching for reservations

Staff pick up to three alternative seat sets for a reservation ahead of time.
Sets are stored as seat labels so that layout edits which renumber seat ids
do not invalidate them.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Set

import structlog

from seating.exceptions import ConflictError, SeatsNoLongerAvailableError, ValidationError
from seating.models.reservation import Reservation
from seating.models.seat_allocation import OccupantKind, SeatAllocation
from seating.services.allocation_engine import AllocationEngine
from seating.services.occupants import OccupantRef

logger = structlog.get_logger()

MAX_PREFERENCE_OPTIONS = 3


@dataclass
class PreferenceOption:
    option_index: int  # 1-based, as shown to staff
    labels: List[str]
    fully_free: bool


def validate_preferences(preferences: Optional[Iterable], party_size: int) -> List[List[str]]:
    """
    Normalize staff-authored preference sets.

    Empty sets are dropped; at most three sets remain, none larger than the
    party, none naming a seat twice.
    """
    cleaned = []
    for option in preferences or []:
        labels = [str(label) for label in option or [] if str(label).strip()]
        if not labels:
            continue
        if len(set(labels)) != len(labels):
            raise ValidationError("A seat preference option names the same seat twice")
        if len(labels) > party_size:
            raise ValidationError(
                f"A seat preference option can hold at most {party_size} seat(s)"
            )
        cleaned.append(labels)

    if len(cleaned) > MAX_PREFERENCE_OPTIONS:
        raise ValidationError(f"At most {MAX_PREFERENCE_OPTIONS} seat preference options are allowed")
    return cleaned


def evaluate_options(preferences: Iterable, occupied_labels: Set[str]) -> List[PreferenceOption]:
    """An option is fully free iff none of its labels is in the occupied set"""
    options = []
    for position, labels in enumerate(preferences or [], start=1):
        if not labels:
            continue
        options.append(
            PreferenceOption(
                option_index=position,
                labels=list(labels),
                fully_free=all(label not in occupied_labels for label in labels),
            )
        )
    return options


class SeatPreferenceMatcher:
    """Evaluates stored preference options against live occupancy and assigns from them"""

    def __init__(self, engine: AllocationEngine):
        self.engine = engine

    async def occupied_labels(self, reservation: Reservation) -> Set[str]:
        """Labels of seats held by any active allocation on the reservation's date"""
        if reservation.start_time is None:
            raise ValidationError("This reservation has no start time")

        index = await self.engine.layouts.seat_index()
        day = reservation.start_time.astimezone(self.engine.tz).date()
        active = await self.engine.active_allocations_for(day, layout_id=index.layout.id)

        return {
            label
            for label in (index.label_of(seat_id) for seat_id in active)
            if label is not None
        }

    async def evaluate(self, reservation: Reservation) -> List[PreferenceOption]:
        occupied = await self.occupied_labels(reservation)
        return evaluate_options(reservation.seat_preferences, occupied)

    async def assign_from(self, reservation: Reservation, option_index: int) -> List[SeatAllocation]:
        """
        Reserve the seats of one stored option for the reservation's own window.

        A seat taken since the options were evaluated surfaces as
        ``SeatsNoLongerAvailableError``; the caller picks another option.
        """
        reservation_id = reservation.id
        preferences = reservation.seat_preferences or []
        if option_index < 1 or option_index > len(preferences) or not preferences[option_index - 1]:
            raise ValidationError(f"No seats found in preference option {option_index}")
        if reservation.start_time is None:
            raise ValidationError("This reservation has no start time, cannot assign seats")

        labels = list(preferences[option_index - 1])

        try:
            allocations = await self.engine.reserve(
                OccupantRef(OccupantKind.RESERVATION, reservation_id),
                labels,
                start_time=reservation.start_time,
                duration_minutes=reservation.duration_minutes,
            )
        except ConflictError as exc:
            logger.info(
                "Seat preference option taken",
                reservation_id=reservation_id,
                option_index=option_index,
                seat_label=exc.seat_label,
            )
            raise SeatsNoLongerAvailableError(
                "Seat(s) no longer available, choose another option",
                seat_label=exc.seat_label,
            )

        logger.info(
            "Seats assigned from preference",
            reservation_id=reservation_id,
            option_index=option_index,
            seat_labels=labels,
        )
        return allocations
