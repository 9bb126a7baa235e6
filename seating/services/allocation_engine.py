"""
Seat allocation engine

Drives the allocation lifecycle::

    reserved -> seated -> finished
    reserved -> no_show
    reserved | seated -> canceled

Seat-Now enters ``seated`` directly, Reserve enters ``reserved`` and Arrive
moves ``reserved`` to ``seated``. ``occupied`` is a legacy spelling of
``seated``. Any other status found on an active allocation can only be
canceled.

Batch writes are all-or-nothing: the conflict check and the insert of every
seat in a batch happen under one critical section keyed by
(layout_id, local date) and are committed in one transaction. An occupant
that still holds active seats, or whose own status is closed, cannot be given
more.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable, Dict, List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from seating.database import utcnow
from seating.exceptions import (
    ConflictError,
    NotFoundError,
    PartySizeMismatchError,
    SeatingError,
    ValidationError,
)
from seating.models.restaurant import Restaurant
from seating.models.seat_allocation import AllocationStatus, SeatAllocation
from seating.services.allocation_repository import AllocationRepository
from seating.services.layout_store import LayoutStore, SeatIndex
from seating.services.locks import KeyedLocks, allocation_locks
from seating.services.occupants import OccupantRef, OccupantResolver
from seating.services.time_windows import (
    derive_window,
    local_dates_touched,
    parse_service_time,
    restaurant_zone,
)

logger = structlog.get_logger()


@dataclass(frozen=True)
class Transition:
    allowed_from: frozenset
    target: AllocationStatus
    releases: bool


TRANSITIONS: Dict[str, Transition] = {
    "arrive": Transition(
        frozenset({AllocationStatus.RESERVED}),
        AllocationStatus.SEATED,
        releases=False,
    ),
    "finish": Transition(
        frozenset({AllocationStatus.SEATED, AllocationStatus.OCCUPIED}),
        AllocationStatus.FINISHED,
        releases=True,
    ),
    "no_show": Transition(
        frozenset({AllocationStatus.RESERVED}),
        AllocationStatus.NO_SHOW,
        releases=True,
    ),
    "cancel": Transition(
        frozenset({
            AllocationStatus.RESERVED,
            AllocationStatus.SEATED,
            AllocationStatus.OCCUPIED,
            AllocationStatus.UNKNOWN,
        }),
        AllocationStatus.CANCELED,
        releases=True,
    ),
}


def allowed_actions(status: AllocationStatus) -> List[str]:
    """Lifecycle actions valid for an active allocation in ``status``"""
    return [name for name, transition in TRANSITIONS.items() if status in transition.allowed_from]


@dataclass
class SeatMapEntry:
    """One seat of the floor view with its occupancy for a date"""
    seat_id: int
    label: str
    section_id: int
    section_name: str
    floor_number: int
    capacity: int
    status: str = "free"
    allocation_id: Optional[int] = None
    occupant_type: Optional[str] = None
    occupant_id: Optional[int] = None
    occupant_name: Optional[str] = None
    occupant_party_size: Optional[int] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    actions: List[str] = field(default_factory=list)


class AllocationEngine:
    """Seat assignment operations for one restaurant"""

    def __init__(
        self,
        db: AsyncSession,
        restaurant: Restaurant,
        resolver: Optional[OccupantResolver] = None,
        layouts: Optional[LayoutStore] = None,
        clock: Optional[Callable[[], datetime]] = None,
        locks: KeyedLocks = allocation_locks,
    ):
        self.db = db
        self.restaurant = restaurant
        self.restaurant_id = restaurant.id
        self.tz = restaurant_zone(restaurant.timezone)
        self.resolver = resolver or OccupantResolver(db, restaurant.id)
        self.layouts = layouts or LayoutStore(db, restaurant)
        self.clock = clock or utcnow
        self.locks = locks

    def repository(self, layout_id: Optional[int] = None) -> AllocationRepository:
        return AllocationRepository(self.db, self.restaurant_id, self.tz, layout_id=layout_id)

    def now(self) -> datetime:
        return self.clock()

    def today(self) -> date:
        return self.now().astimezone(self.tz).date()

    def window_for(
        self,
        day: Optional[date] = None,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
        duration_minutes: Optional[int] = None,
    ):
        """[start, end) for an assignment, defaulted from the restaurant's settings"""
        if duration_minutes is None:
            duration_minutes = self.restaurant.default_seating_minutes
        return derive_window(
            now=self.now(),
            tz=self.tz,
            day=day,
            start_time=start_time,
            end_time=end_time,
            duration_minutes=duration_minutes,
            service_time=parse_service_time(self.restaurant.default_service_time),
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def active_allocations_for(
        self,
        day: date,
        section_ids: Optional[Sequence[int]] = None,
        layout_id: Optional[int] = None,
    ) -> Dict[int, SeatAllocation]:
        """seat_id -> active allocation intersecting the local date"""
        return await self.repository(layout_id).query_active(day, section_ids)

    async def allocation_history(self, day: date, layout_id: Optional[int] = None) -> List[SeatAllocation]:
        return await self.repository(layout_id).list_for_date(day)

    async def seat_map(self, day: date, layout_id: Optional[int] = None) -> List[SeatMapEntry]:
        """
        Floor view for a date.

        Occupant name and party size are re-resolved from the live occupant
        record; the allocation's snapshot is used only when the occupant no
        longer resolves.
        """
        layout = await self.layouts.resolve(layout_id)
        active = await self.repository(layout.id).query_active(day)

        live = {}
        for allocation in active.values():
            ref = OccupantRef.of(allocation.occupant_type, allocation.occupant_id)
            if ref in live:
                continue
            try:
                live[ref] = await self.resolver.resolve(ref)
            except NotFoundError:
                live[ref] = None

        entries = []
        for section, seat in layout.iter_seats():
            entry = SeatMapEntry(
                seat_id=seat.id,
                label=seat.label,
                section_id=section.id,
                section_name=section.name,
                floor_number=section.floor_number or 1,
                capacity=seat.capacity or 1,
            )
            allocation = active.get(seat.id)
            if allocation is not None:
                occupant = live.get(OccupantRef.of(allocation.occupant_type, allocation.occupant_id))
                entry.status = allocation.occupant_status
                entry.allocation_id = allocation.id
                entry.occupant_type = allocation.occupant_type
                entry.occupant_id = allocation.occupant_id
                entry.occupant_name = occupant.display_name if occupant else allocation.occupant_name
                entry.occupant_party_size = (
                    occupant.party_size if occupant else allocation.occupant_party_size
                )
                entry.start_time = allocation.start_time
                entry.end_time = allocation.end_time
                entry.actions = allowed_actions(allocation.status)
            entries.append(entry)

        return entries

    # ------------------------------------------------------------------
    # Assignment
    # ------------------------------------------------------------------

    async def seat_now(self, occupant: OccupantRef, seat_labels=None, **kwargs) -> List[SeatAllocation]:
        """Seat a party immediately on the given seats"""
        return await self._assign(AllocationStatus.SEATED, occupant, seat_labels, **kwargs)

    async def reserve(self, occupant: OccupantRef, seat_labels=None, **kwargs) -> List[SeatAllocation]:
        """Hold the given seats for a party"""
        return await self._assign(AllocationStatus.RESERVED, occupant, seat_labels, **kwargs)

    async def _assign(
        self,
        status: AllocationStatus,
        occupant: OccupantRef,
        seat_labels: Optional[Sequence[str]] = None,
        *,
        seat_ids: Optional[Sequence[int]] = None,
        layout_id: Optional[int] = None,
        day: Optional[date] = None,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
        duration_minutes: Optional[int] = None,
    ) -> List[SeatAllocation]:
        requested = list(seat_labels) if seat_labels else list(seat_ids or [])
        if not requested:
            raise ValidationError("No seats selected")
        if len(set(requested)) != len(requested):
            raise ValidationError("The same seat was selected more than once")

        party = await self.resolver.resolve(occupant)
        if party.closed:
            raise ValidationError(f"{occupant} is {party.status} and cannot be given seats")
        if len(requested) != party.party_size:
            raise PartySizeMismatchError(expected=party.party_size, got=len(requested))

        start, end = self.window_for(day, start_time, end_time, duration_minutes)

        index = SeatIndex(await self.layouts.resolve(layout_id))
        if not seat_labels:
            seat_labels = index.labels_for_ids(requested)
        seats = index.seats_for_labels(seat_labels)

        rows = [
            SeatAllocation(
                seat_id=seat.id,
                occupant_type=occupant.kind.value,
                occupant_id=occupant.id,
                occupant_name=party.display_name,
                occupant_party_size=party.party_size,
                occupant_status=status.value,
                start_time=start,
                end_time=end,
            )
            for seat in seats
        ]

        keys = [(index.layout.id, d) for d in local_dates_touched(start, end, self.tz)]
        async with self.locks.hold(keys):
            # a party holds exactly party-size seats at a time
            held = await self.repository().active_for_occupant(occupant.kind.value, occupant.id)
            if held:
                raise ValidationError(
                    f"{occupant} already holds {len(held)} seat(s); cancel or finish them first"
                )
            try:
                await self.repository(index.layout.id).insert(
                    rows,
                    seat_labels={seat.id: seat.label for seat in seats},
                )
            except ConflictError:
                logger.info(
                    "Seat assignment rejected",
                    restaurant_id=self.restaurant_id,
                    occupant=str(occupant),
                    seat_labels=list(seat_labels),
                    status=status.value,
                )
                raise
            await self._commit(occupant, status)

        logger.info(
            "Seats assigned",
            restaurant_id=self.restaurant_id,
            occupant=str(occupant),
            seat_labels=list(seat_labels),
            status=status.value,
            start_time=start.isoformat(),
            end_time=end.isoformat(),
        )
        return rows

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def arrive(self, occupant: OccupantRef) -> List[SeatAllocation]:
        """Reserved party has shown up: their reserved seats become seated"""
        return await self._transition("arrive", occupant)

    async def finish(self, occupant: OccupantRef) -> List[SeatAllocation]:
        """Seated party has left: release their seats"""
        return await self._transition("finish", occupant)

    async def no_show(self, occupant: OccupantRef) -> List[SeatAllocation]:
        """Reserved party never came: release their seats"""
        return await self._transition("no_show", occupant)

    async def cancel(self, occupant: OccupantRef) -> List[SeatAllocation]:
        """Release every active seat of the party, whatever its status"""
        return await self._transition("cancel", occupant)

    async def _transition(self, action: str, occupant: OccupantRef) -> List[SeatAllocation]:
        transition = TRANSITIONS[action]
        repository = self.repository()

        active = await repository.active_for_occupant(occupant.kind.value, occupant.id)
        matching = [a for a in active if a.status in transition.allowed_from]
        if not matching:
            wanted = ", ".join(sorted(s.value for s in transition.allowed_from))
            raise NotFoundError(f"No active seats in state {wanted} to {action} for {occupant}")

        try:
            released_at = self.now() if transition.releases else None
            updated = [
                await repository.update_status(allocation.id, transition.target, released_at)
                for allocation in matching
            ]
        except SeatingError:
            await self.db.rollback()
            raise
        await self._commit(occupant, transition.target)

        logger.info(
            "Seat allocations transitioned",
            restaurant_id=self.restaurant_id,
            occupant=str(occupant),
            action=action,
            status=transition.target.value,
            seat_ids=[a.seat_id for a in updated],
        )
        return updated

    async def _commit(self, occupant: OccupantRef, status: AllocationStatus) -> None:
        """Mirror the new status onto the occupant and commit the unit of work"""
        try:
            await self.resolver.sync(occupant, status)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
