"""Shared request dependencies"""

from datetime import date as Date
from typing import Optional

from fastapi import Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from seating.database import get_db
from seating.models.restaurant import Restaurant
from seating.services.allocation_engine import AllocationEngine
from seating.services.seat_preferences import SeatPreferenceMatcher


async def get_restaurant(
    restaurant_id: int,
    db: AsyncSession = Depends(get_db),
) -> Restaurant:
    """Load the restaurant named in the path"""
    result = await db.execute(
        select(Restaurant).where(
            Restaurant.id == restaurant_id,
            Restaurant.is_active == True,
        )
    )
    restaurant = result.scalar_one_or_none()

    if not restaurant:
        raise HTTPException(status_code=404, detail="Restaurant not found")

    return restaurant


async def get_engine(
    restaurant: Restaurant = Depends(get_restaurant),
    db: AsyncSession = Depends(get_db),
) -> AllocationEngine:
    """Allocation engine bound to the request's session and restaurant"""
    return AllocationEngine(db, restaurant)


async def get_matcher(
    engine: AllocationEngine = Depends(get_engine),
) -> SeatPreferenceMatcher:
    return SeatPreferenceMatcher(engine)


def resolve_date(engine: AllocationEngine, value: Optional[Date]) -> Date:
    """Explicit date, or today in the restaurant's timezone"""
    return value or engine.today()
