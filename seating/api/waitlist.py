"""Waitlist API endpoints"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from seating.api.dependencies import get_engine
from seating.database import get_db, utcnow
from seating.exceptions import NotFoundError
from seating.models.reservation import WaitlistEntry
from seating.models.seat_allocation import OccupantKind
from seating.schemas.reservation import (
    WaitlistEntryCreate,
    WaitlistEntryResponse,
    WaitlistEntryUpdate,
)
from seating.services.allocation_engine import AllocationEngine
from seating.services.occupants import OccupantRef

logger = structlog.get_logger()

router = APIRouter()


async def _get_entry(db: AsyncSession, restaurant_id: int, entry_id: int) -> WaitlistEntry:
    result = await db.execute(
        select(WaitlistEntry).where(
            WaitlistEntry.id == entry_id,
            WaitlistEntry.restaurant_id == restaurant_id,
        )
    )
    entry = result.scalar_one_or_none()

    if not entry:
        raise HTTPException(status_code=404, detail="Waitlist entry not found")

    return entry


@router.get("", response_model=List[WaitlistEntryResponse])
async def list_waitlist(
    status: Optional[str] = None,
    engine: AllocationEngine = Depends(get_engine),
    db: AsyncSession = Depends(get_db),
):
    """Waitlist in check-in order"""
    query = select(WaitlistEntry).where(WaitlistEntry.restaurant_id == engine.restaurant_id)
    if status:
        query = query.where(WaitlistEntry.status == status)

    result = await db.execute(query.order_by(WaitlistEntry.check_in_time, WaitlistEntry.id))
    return result.scalars().all()


@router.post("", response_model=WaitlistEntryResponse, status_code=201)
async def create_waitlist_entry(
    entry_data: WaitlistEntryCreate,
    engine: AllocationEngine = Depends(get_engine),
    db: AsyncSession = Depends(get_db),
):
    """Add a walk-in party"""
    entry = WaitlistEntry(
        restaurant_id=engine.restaurant_id,
        contact_name=entry_data.contact_name,
        contact_phone=entry_data.contact_phone,
        party_size=entry_data.party_size,
        check_in_time=entry_data.check_in_time or utcnow(),
        status="waiting",
    )

    db.add(entry)
    await db.commit()
    await db.refresh(entry)

    logger.info(
        "Waitlist entry created",
        restaurant_id=engine.restaurant_id,
        waitlist_id=entry.id,
        party_size=entry.party_size,
    )
    return entry


@router.put("/{entry_id}", response_model=WaitlistEntryResponse)
async def update_waitlist_entry(
    entry_id: int,
    entry_data: WaitlistEntryUpdate,
    engine: AllocationEngine = Depends(get_engine),
    db: AsyncSession = Depends(get_db),
):
    """Update waitlist entry"""
    entry = await _get_entry(db, engine.restaurant_id, entry_id)

    for field, value in entry_data.model_dump(exclude_unset=True).items():
        setattr(entry, field, value)

    await db.commit()
    await db.refresh(entry)

    return entry


@router.delete("/{entry_id}", status_code=204)
async def remove_waitlist_entry(
    entry_id: int,
    engine: AllocationEngine = Depends(get_engine),
    db: AsyncSession = Depends(get_db),
):
    """Remove a party from the waitlist and release any seats it holds"""
    entry = await _get_entry(db, engine.restaurant_id, entry_id)

    try:
        await engine.cancel(OccupantRef(OccupantKind.WAITLIST, entry.id))
    except NotFoundError:
        pass

    entry.status = "removed"
    await db.commit()
