"""Occupant resolution: one adapter per kind of party that can hold seats"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from seating.exceptions import NotFoundError, ValidationError
from seating.models.reservation import Reservation, WaitlistEntry
from seating.models.seat_allocation import AllocationStatus, OccupantKind

logger = structlog.get_logger()


@dataclass(frozen=True)
class OccupantRef:
    """Tagged reference to a reservation or a waitlist entry"""
    kind: OccupantKind
    id: int

    @classmethod
    def of(cls, kind, occupant_id: int) -> "OccupantRef":
        try:
            return cls(OccupantKind(kind), int(occupant_id))
        except ValueError:
            raise ValidationError(f"Unknown occupant type {kind!r}")

    def __str__(self) -> str:
        return f"{self.kind.value}-{self.id}"


@dataclass(frozen=True)
class ResolvedOccupant:
    ref: OccupantRef
    party_size: int
    display_name: str
    status: Optional[str]
    closed: bool = False


class OccupantAdapter:
    """Capabilities the engine needs from an occupant kind"""

    kind: OccupantKind
    model = None

    # allocation lifecycle status -> occupant's own status field
    status_map: Dict[AllocationStatus, str] = {}

    # occupant statuses that can no longer be given seats
    closed_statuses: FrozenSet[str] = frozenset()

    def __init__(self, db: AsyncSession, restaurant_id: int):
        self.db = db
        self.restaurant_id = restaurant_id

    async def load(self, occupant_id: int):
        result = await self.db.execute(
            select(self.model).where(
                self.model.id == occupant_id,
                self.model.restaurant_id == self.restaurant_id,
            )
        )
        record = result.scalar_one_or_none()
        if record is None:
            raise NotFoundError(f"{self.kind.value.capitalize()} {occupant_id} not found")
        return record

    async def resolve(self, occupant_id: int) -> ResolvedOccupant:
        record = await self.load(occupant_id)
        return ResolvedOccupant(
            ref=OccupantRef(self.kind, record.id),
            party_size=record.party_size,
            display_name=record.contact_name or "Guest",
            status=record.status,
            closed=record.status in self.closed_statuses,
        )

    async def set_status(self, occupant_id: int, new_status: str) -> None:
        record = await self.load(occupant_id)
        record.status = new_status

    def status_for(self, allocation_status: AllocationStatus) -> Optional[str]:
        return self.status_map.get(allocation_status)


class ReservationAdapter(OccupantAdapter):
    kind = OccupantKind.RESERVATION
    model = Reservation
    # releasing seats leaves the booking itself open; only deleting the
    # reservation cancels it
    status_map = {
        AllocationStatus.RESERVED: "reserved",
        AllocationStatus.SEATED: "seated",
        AllocationStatus.FINISHED: "finished",
        AllocationStatus.NO_SHOW: "no_show",
        AllocationStatus.CANCELED: "booked",
    }
    closed_statuses = frozenset({"finished", "no_show", "canceled"})


class WaitlistAdapter(OccupantAdapter):
    kind = OccupantKind.WAITLIST
    model = WaitlistEntry
    # a waitlist party holding reserved seats is still waiting
    status_map = {
        AllocationStatus.RESERVED: "waiting",
        AllocationStatus.SEATED: "seated",
        AllocationStatus.FINISHED: "removed",
        AllocationStatus.NO_SHOW: "no_show",
        AllocationStatus.CANCELED: "waiting",
    }
    closed_statuses = frozenset({"removed", "no_show"})


class OccupantResolver:
    """Dispatches occupant references to the adapter for their kind"""

    adapter_classes = {
        OccupantKind.RESERVATION: ReservationAdapter,
        OccupantKind.WAITLIST: WaitlistAdapter,
    }

    def __init__(self, db: AsyncSession, restaurant_id: int):
        self.adapters = {
            kind: adapter_class(db, restaurant_id)
            for kind, adapter_class in self.adapter_classes.items()
        }

    def adapter(self, ref: OccupantRef) -> OccupantAdapter:
        return self.adapters[ref.kind]

    async def resolve(self, ref: OccupantRef) -> ResolvedOccupant:
        return await self.adapter(ref).resolve(ref.id)

    async def set_status(self, ref: OccupantRef, new_status: str) -> None:
        await self.adapter(ref).set_status(ref.id, new_status)
        logger.info("Occupant status updated", occupant=str(ref), status=new_status)

    async def sync(self, ref: OccupantRef, allocation_status: AllocationStatus) -> Optional[str]:
        """Mirror an allocation transition onto the occupant's own status field"""
        new_status = self.adapter(ref).status_for(allocation_status)
        if new_status is not None:
            await self.set_status(ref, new_status)
        return new_status
