"""Floor layout API endpoints"""

from datetime import date as Date
from typing import List, Optional

from fastapi import APIRouter, Depends

from seating.api.dependencies import get_engine, resolve_date
from seating.schemas.layout import (
    LayoutBoundsResponse,
    LayoutResponse,
    LayoutSummary,
)
from seating.schemas.seat_allocation import SeatMapEntryResponse
from seating.services.allocation_engine import AllocationEngine
from seating.services.bounds import compute_layout_bounds

router = APIRouter()


@router.get("", response_model=List[LayoutSummary])
async def list_layouts(
    engine: AllocationEngine = Depends(get_engine),
):
    """List the restaurant's layouts, flagging the active one"""
    layouts = await engine.layouts.get_all_layouts()
    current = engine.restaurant.current_layout_id

    return [
        LayoutSummary(id=layout.id, name=layout.name, is_active=layout.id == current)
        for layout in layouts
    ]


@router.get("/{layout_id}", response_model=LayoutResponse)
async def get_layout(
    layout_id: int,
    engine: AllocationEngine = Depends(get_engine),
):
    """Get a layout with its sections and seats"""
    return await engine.layouts.get_layout(layout_id)


@router.get("/{layout_id}/bounds", response_model=LayoutBoundsResponse)
async def get_layout_bounds(
    layout_id: int,
    engine: AllocationEngine = Depends(get_engine),
):
    """Canvas size needed to draw the layout"""
    layout = await engine.layouts.get_layout(layout_id)
    return compute_layout_bounds(layout.seat_sections).as_dict()


@router.get("/{layout_id}/seat_map", response_model=List[SeatMapEntryResponse])
async def get_seat_map(
    layout_id: int,
    date: Optional[Date] = None,
    engine: AllocationEngine = Depends(get_engine),
):
    """Every seat of the layout with its occupancy on a date"""
    return await engine.seat_map(resolve_date(engine, date), layout_id=layout_id)


@router.post("/{layout_id}/activate", response_model=LayoutSummary)
async def activate_layout(
    layout_id: int,
    engine: AllocationEngine = Depends(get_engine),
):
    """Make this layout the one used for seating"""
    layout = await engine.layouts.activate(layout_id)
    return LayoutSummary(id=layout.id, name=layout.name, is_active=True)
