"""Persistence and queries for seat allocations"""

from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from seating.exceptions import ConflictError, NotFoundError
from seating.models.layout import Layout, Seat, SeatSection
from seating.models.seat_allocation import SeatAllocation, AllocationStatus
from seating.services.time_windows import local_day_bounds

logger = structlog.get_logger()


class AllocationRepository:
    """
    Allocation rows for one restaurant.

    Writes go through the allocation engine, which holds the per
    (layout, date) critical section and owns the transaction; this class only
    flushes. A flush rejected by the database is rolled back here so that the
    session stays usable for the rest of the request.
    """

    def __init__(self, db: AsyncSession, restaurant_id: int, tz, layout_id: Optional[int] = None):
        self.db = db
        self.restaurant_id = restaurant_id
        self.tz = tz
        self.layout_id = layout_id

    def _scoped(self, query):
        """Restrict a SeatAllocation query to this restaurant's seats, and to one layout if set"""
        query = (
            query.join(Seat, Seat.id == SeatAllocation.seat_id)
            .join(SeatSection, SeatSection.id == Seat.seat_section_id)
            .join(Layout, Layout.id == SeatSection.layout_id)
            .where(Layout.restaurant_id == self.restaurant_id)
        )
        if self.layout_id is not None:
            query = query.where(SeatSection.layout_id == self.layout_id)
        return query

    async def query_active(
        self,
        day: date,
        section_ids: Optional[Sequence[int]] = None,
    ) -> Dict[int, SeatAllocation]:
        """
        Active allocations intersecting the local calendar day, keyed by seat.

        When a seat carries several disjoint allocations that day the earliest
        one is returned.
        """
        day_start, day_end = local_day_bounds(day, self.tz)

        query = self._scoped(
            select(SeatAllocation).where(
                SeatAllocation.released_at.is_(None),
                SeatAllocation.start_time < day_end,
                SeatAllocation.end_time > day_start,
            )
        )
        if section_ids:
            query = query.where(Seat.seat_section_id.in_(list(section_ids)))

        result = await self.db.execute(query.order_by(SeatAllocation.start_time, SeatAllocation.id))

        by_seat: Dict[int, SeatAllocation] = {}
        for allocation in result.scalars().all():
            by_seat.setdefault(allocation.seat_id, allocation)
        return by_seat

    async def list_for_date(self, day: date) -> List[SeatAllocation]:
        """Every allocation intersecting the day, released ones included"""
        day_start, day_end = local_day_bounds(day, self.tz)
        result = await self.db.execute(
            self._scoped(
                select(SeatAllocation).where(
                    SeatAllocation.start_time < day_end,
                    SeatAllocation.end_time > day_start,
                )
            ).order_by(SeatAllocation.start_time, SeatAllocation.id)
        )
        return list(result.scalars().all())

    async def find_conflicts(
        self,
        seat_ids: Iterable[int],
        start: datetime,
        end: datetime,
    ) -> List[SeatAllocation]:
        """Active allocations on any of the seats overlapping [start, end)"""
        result = await self.db.execute(
            select(SeatAllocation).where(
                SeatAllocation.seat_id.in_(list(seat_ids)),
                SeatAllocation.released_at.is_(None),
                SeatAllocation.start_time < end,
                SeatAllocation.end_time > start,
            )
        )
        return list(result.scalars().all())

    async def active_for_occupant(self, occupant_type: str, occupant_id: int) -> List[SeatAllocation]:
        result = await self.db.execute(
            self._scoped(
                select(SeatAllocation).where(
                    SeatAllocation.occupant_type == occupant_type,
                    SeatAllocation.occupant_id == occupant_id,
                    SeatAllocation.released_at.is_(None),
                )
            ).order_by(SeatAllocation.id)
        )
        return list(result.scalars().all())

    async def get(self, allocation_id: int) -> Optional[SeatAllocation]:
        return await self.db.get(SeatAllocation, allocation_id)

    async def insert(
        self,
        allocations: Sequence[SeatAllocation],
        seat_labels: Optional[Dict[int, str]] = None,
    ) -> List[SeatAllocation]:
        """
        Persist a batch, or nothing.

        Every row is checked against the active allocations of its seat before
        any row is added. The first conflicting seat, in batch order, is named
        in the error.
        """
        seat_labels = seat_labels or {}
        by_seat: Dict[int, List[SeatAllocation]] = {}

        if allocations:
            start = min(a.start_time for a in allocations)
            end = max(a.end_time for a in allocations)
            for existing in await self.find_conflicts({a.seat_id for a in allocations}, start, end):
                by_seat.setdefault(existing.seat_id, []).append(existing)

        for allocation in allocations:
            for existing in by_seat.get(allocation.seat_id, []):
                if existing.overlaps(allocation.start_time, allocation.end_time):
                    label = seat_labels.get(allocation.seat_id, str(allocation.seat_id))
                    logger.info(
                        "Seat conflict",
                        seat_id=allocation.seat_id,
                        seat_label=label,
                        held_by_allocation=existing.id,
                    )
                    raise ConflictError(
                        f"Seat {label} is already taken ({existing.occupant_status})",
                        seat_label=label,
                    )

        seat_ids = [a.seat_id for a in allocations]
        self.db.add_all(allocations)
        try:
            await self.db.flush()
        except IntegrityError:
            # exclusion constraint tripped by a writer in another process;
            # the failed flush leaves the transaction unusable
            await self.db.rollback()
            logger.info("Seat conflict at flush", seat_ids=seat_ids)
            raise ConflictError("One or more seats were taken concurrently")

        return list(allocations)

    async def update_status(
        self,
        allocation_id: int,
        new_status: AllocationStatus,
        released_at: Optional[datetime] = None,
    ) -> SeatAllocation:
        """
        Move an allocation's snapshot status, releasing it when ``released_at`` is set.

        Releasing an already released allocation is a no-op; any other change
        to a released allocation is rejected.
        """
        allocation = await self.get(allocation_id)
        if allocation is None:
            raise NotFoundError(f"Seat allocation {allocation_id} not found")

        if allocation.released_at is not None:
            if released_at is not None:
                return allocation
            raise NotFoundError(f"Seat allocation {allocation_id} is already released")

        allocation.occupant_status = new_status.value
        if released_at is not None:
            allocation.released_at = released_at

        await self.db.flush()
        return allocation
