"""Reservation and waitlist schemas"""

from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field


class ReservationCreate(BaseModel):
    """Create reservation request"""
    contact_name: str
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    party_size: int = Field(ge=1)
    start_time: datetime
    duration_minutes: int = Field(default=60, gt=0)
    seat_preferences: List[List[str]] = []
    notes: Optional[str] = None


class ReservationUpdate(BaseModel):
    """Update reservation request"""
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    party_size: Optional[int] = Field(default=None, ge=1)
    start_time: Optional[datetime] = None
    duration_minutes: Optional[int] = Field(default=None, gt=0)
    status: Optional[str] = None
    seat_preferences: Optional[List[List[str]]] = None
    notes: Optional[str] = None


class ReservationResponse(BaseModel):
    """Reservation response"""
    id: int
    restaurant_id: int
    contact_name: str
    contact_phone: Optional[str]
    contact_email: Optional[str]
    party_size: int
    start_time: Optional[datetime]
    duration_minutes: Optional[int]
    status: str
    seat_preferences: Optional[List[List[str]]] = None
    notes: Optional[str]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ReservationListResponse(BaseModel):
    """Paginated reservation list"""
    items: List[ReservationResponse]
    total: int
    page: int
    page_size: int


class PreferenceOptionResponse(BaseModel):
    """A stored seat preference option checked against current occupancy"""
    option_index: int
    labels: List[str]
    fully_free: bool

    class Config:
        from_attributes = True


class WaitlistEntryCreate(BaseModel):
    """Add a walk-in party to the waitlist"""
    contact_name: str
    contact_phone: Optional[str] = None
    party_size: int = Field(ge=1)
    check_in_time: Optional[datetime] = None


class WaitlistEntryUpdate(BaseModel):
    """Update waitlist entry request"""
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None
    party_size: Optional[int] = Field(default=None, ge=1)
    status: Optional[str] = None


class WaitlistEntryResponse(BaseModel):
    """Waitlist entry response"""
    id: int
    restaurant_id: int
    contact_name: str
    contact_phone: Optional[str]
    party_size: int
    check_in_time: Optional[datetime]
    status: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
