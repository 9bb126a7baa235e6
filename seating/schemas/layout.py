"""Layout schemas"""

from typing import List
from pydantic import BaseModel


class SeatResponse(BaseModel):
    """Seat, positioned relative to its section"""
    id: int
    label: str
    position_x: int
    position_y: int
    capacity: int

    class Config:
        from_attributes = True


class SeatSectionResponse(BaseModel):
    """Table or counter with its seats"""
    id: int
    name: str
    section_type: str
    orientation: str
    floor_number: int
    offset_x: int
    offset_y: int
    seats: List[SeatResponse] = []

    class Config:
        from_attributes = True


class LayoutSummary(BaseModel):
    """Layout without its sections"""
    id: int
    name: str
    is_active: bool = False


class LayoutResponse(BaseModel):
    """Full layout"""
    id: int
    name: str
    seat_sections: List[SeatSectionResponse] = []

    class Config:
        from_attributes = True


class LayoutBoundsResponse(BaseModel):
    """Canvas size for a layout"""
    min_x: float
    max_x: float
    min_y: float
    max_y: float
    width: float
    height: float
