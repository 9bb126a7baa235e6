"""Seat allocation API endpoints"""

from datetime import date as Date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from seating.api.dependencies import get_engine, resolve_date
from seating.schemas.seat_allocation import (
    OccupantActionRequest,
    SeatAssignRequest,
    SeatAllocationResponse,
)
from seating.services.allocation_engine import AllocationEngine
from seating.services.occupants import OccupantRef

router = APIRouter()


def _occupant(request: OccupantActionRequest) -> OccupantRef:
    return OccupantRef(request.occupant_type, request.occupant_id)


def _assign_kwargs(request: SeatAssignRequest) -> dict:
    return {
        "seat_ids": request.seat_ids,
        "layout_id": request.layout_id,
        "day": request.date,
        "start_time": request.start_time,
        "end_time": request.end_time,
        "duration_minutes": request.duration_minutes,
    }


@router.get("", response_model=List[SeatAllocationResponse])
async def list_active_allocations(
    date: Optional[Date] = None,
    section_id: Optional[List[int]] = Query(None),
    layout_id: Optional[int] = None,
    engine: AllocationEngine = Depends(get_engine),
):
    """Active seat allocations intersecting a date (today by default)"""
    active = await engine.active_allocations_for(
        resolve_date(engine, date),
        section_ids=section_id,
        layout_id=layout_id,
    )
    return list(active.values())


@router.get("/history", response_model=List[SeatAllocationResponse])
async def list_allocation_history(
    date: Optional[Date] = None,
    layout_id: Optional[int] = None,
    engine: AllocationEngine = Depends(get_engine),
):
    """Every allocation intersecting a date, released ones included"""
    return await engine.allocation_history(resolve_date(engine, date), layout_id=layout_id)


@router.post("/multi_create", response_model=List[SeatAllocationResponse], status_code=201)
async def seat_now(
    request: SeatAssignRequest,
    engine: AllocationEngine = Depends(get_engine),
):
    """Seat a party now on exactly party-size seats"""
    return await engine.seat_now(_occupant(request), request.seat_labels, **_assign_kwargs(request))


@router.post("/reserve", response_model=List[SeatAllocationResponse], status_code=201)
async def reserve(
    request: SeatAssignRequest,
    engine: AllocationEngine = Depends(get_engine),
):
    """Hold exactly party-size seats for a party"""
    return await engine.reserve(_occupant(request), request.seat_labels, **_assign_kwargs(request))


@router.post("/arrive", response_model=List[SeatAllocationResponse])
async def arrive(
    request: OccupantActionRequest,
    engine: AllocationEngine = Depends(get_engine),
):
    """Reserved party arrived"""
    return await engine.arrive(_occupant(request))


@router.post("/finish", response_model=List[SeatAllocationResponse])
async def finish(
    request: OccupantActionRequest,
    engine: AllocationEngine = Depends(get_engine),
):
    """Seated party left, free their seats"""
    return await engine.finish(_occupant(request))


@router.post("/no_show", response_model=List[SeatAllocationResponse])
async def no_show(
    request: OccupantActionRequest,
    engine: AllocationEngine = Depends(get_engine),
):
    """Reserved party never came, free their seats"""
    return await engine.no_show(_occupant(request))


@router.post("/cancel", response_model=List[SeatAllocationResponse])
async def cancel(
    request: OccupantActionRequest,
    engine: AllocationEngine = Depends(get_engine),
):
    """Free every seat the party holds"""
    return await engine.cancel(_occupant(request))
