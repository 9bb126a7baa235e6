"""Reservation management API endpoints"""

from datetime import date as Date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from seating.api.dependencies import get_engine, get_matcher, get_restaurant
from seating.database import get_db
from seating.exceptions import NotFoundError
from seating.models.reservation import Reservation
from seating.models.restaurant import Restaurant
from seating.models.seat_allocation import OccupantKind
from seating.schemas.reservation import (
    PreferenceOptionResponse,
    ReservationCreate,
    ReservationListResponse,
    ReservationResponse,
    ReservationUpdate,
)
from seating.schemas.seat_allocation import SeatAllocationResponse
from seating.services.allocation_engine import AllocationEngine
from seating.services.occupants import OccupantRef
from seating.services.seat_preferences import SeatPreferenceMatcher, validate_preferences
from seating.services.time_windows import ensure_aware, local_day_bounds

logger = structlog.get_logger()

router = APIRouter()


async def _get_reservation(db: AsyncSession, restaurant_id: int, reservation_id: int) -> Reservation:
    result = await db.execute(
        select(Reservation).where(
            Reservation.id == reservation_id,
            Reservation.restaurant_id == restaurant_id,
        )
    )
    reservation = result.scalar_one_or_none()

    if not reservation:
        raise HTTPException(status_code=404, detail="Reservation not found")

    return reservation


@router.get("", response_model=ReservationListResponse)
async def list_reservations(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    status: Optional[str] = None,
    date: Optional[Date] = None,
    engine: AllocationEngine = Depends(get_engine),
    db: AsyncSession = Depends(get_db),
):
    """List reservations for a restaurant with pagination"""
    query = select(Reservation).where(Reservation.restaurant_id == engine.restaurant_id)
    count_query = select(func.count(Reservation.id)).where(
        Reservation.restaurant_id == engine.restaurant_id
    )

    if status:
        query = query.where(Reservation.status == status)
        count_query = count_query.where(Reservation.status == status)

    if date:
        day_start, day_end = local_day_bounds(date, engine.tz)
        query = query.where(Reservation.start_time >= day_start, Reservation.start_time < day_end)
        count_query = count_query.where(
            Reservation.start_time >= day_start, Reservation.start_time < day_end
        )

    total_result = await db.execute(count_query)
    total = total_result.scalar()

    offset = (page - 1) * page_size
    query = query.order_by(Reservation.start_time, Reservation.id).offset(offset).limit(page_size)

    result = await db.execute(query)
    reservations = result.scalars().all()

    return ReservationListResponse(
        items=reservations,
        total=total,
        page=page,
        page_size=page_size,
    )


@router.post("", response_model=ReservationResponse, status_code=201)
async def create_reservation(
    reservation_data: ReservationCreate,
    engine: AllocationEngine = Depends(get_engine),
    db: AsyncSession = Depends(get_db),
):
    """Create a new reservation"""
    reservation = Reservation(
        restaurant_id=engine.restaurant_id,
        contact_name=reservation_data.contact_name,
        contact_phone=reservation_data.contact_phone,
        contact_email=reservation_data.contact_email,
        party_size=reservation_data.party_size,
        start_time=ensure_aware(reservation_data.start_time, engine.tz),
        duration_minutes=reservation_data.duration_minutes,
        seat_preferences=validate_preferences(
            reservation_data.seat_preferences, reservation_data.party_size
        ),
        notes=reservation_data.notes,
        status="booked",
    )

    db.add(reservation)
    await db.commit()
    await db.refresh(reservation)

    logger.info(
        "Reservation created",
        restaurant_id=engine.restaurant_id,
        reservation_id=reservation.id,
        party_size=reservation.party_size,
    )
    return reservation


@router.get("/{reservation_id}", response_model=ReservationResponse)
async def get_reservation(
    reservation_id: int,
    restaurant: Restaurant = Depends(get_restaurant),
    db: AsyncSession = Depends(get_db),
):
    """Get reservation details"""
    return await _get_reservation(db, restaurant.id, reservation_id)


@router.put("/{reservation_id}", response_model=ReservationResponse)
async def update_reservation(
    reservation_id: int,
    reservation_data: ReservationUpdate,
    engine: AllocationEngine = Depends(get_engine),
    db: AsyncSession = Depends(get_db),
):
    """Update reservation"""
    reservation = await _get_reservation(db, engine.restaurant_id, reservation_id)
    changes = reservation_data.model_dump(exclude_unset=True)

    if "start_time" in changes and changes["start_time"] is not None:
        changes["start_time"] = ensure_aware(changes["start_time"], engine.tz)

    # Stored options must still fit the party after a party size change
    if "seat_preferences" in changes or "party_size" in changes:
        changes["seat_preferences"] = validate_preferences(
            changes.get("seat_preferences", reservation.seat_preferences),
            changes.get("party_size") or reservation.party_size,
        )

    for field, value in changes.items():
        setattr(reservation, field, value)

    await db.commit()
    await db.refresh(reservation)

    return reservation


@router.delete("/{reservation_id}", status_code=204)
async def cancel_reservation(
    reservation_id: int,
    engine: AllocationEngine = Depends(get_engine),
    db: AsyncSession = Depends(get_db),
):
    """Cancel a reservation and release any seats it holds"""
    reservation = await _get_reservation(db, engine.restaurant_id, reservation_id)

    try:
        await engine.cancel(OccupantRef(OccupantKind.RESERVATION, reservation.id))
    except NotFoundError:
        # no seats held
        pass

    reservation.status = "canceled"
    await db.commit()


@router.get("/{reservation_id}/seat_preferences", response_model=List[PreferenceOptionResponse])
async def get_seat_preferences(
    reservation_id: int,
    matcher: SeatPreferenceMatcher = Depends(get_matcher),
    db: AsyncSession = Depends(get_db),
):
    """Stored seat preference options, each flagged fully free or not"""
    reservation = await _get_reservation(db, matcher.engine.restaurant_id, reservation_id)
    return await matcher.evaluate(reservation)


@router.post(
    "/{reservation_id}/seat_preferences/{option_index}/assign",
    response_model=List[SeatAllocationResponse],
    status_code=201,
)
async def assign_seat_preference(
    reservation_id: int,
    option_index: int,
    matcher: SeatPreferenceMatcher = Depends(get_matcher),
    db: AsyncSession = Depends(get_db),
):
    """Reserve the seats of one stored preference option"""
    reservation = await _get_reservation(db, matcher.engine.restaurant_id, reservation_id)
    return await matcher.assign_from(reservation, option_index)
