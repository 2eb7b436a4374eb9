# backend/barbershop/schemas/slots.py
"""
Pydantic schemas for slots API.
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field


class SlotInfo(BaseModel):
    """One bookable start time."""
    time: str  # "HH:MM"
    staff_ids: list[int] = Field(description="Staff members able to take this slot, in staff order")

    model_config = {"from_attributes": True}


class SlotsDayResponse(BaseModel):
    """Slots of a single day for one service."""
    shop_id: int
    service_id: int
    staff_id: Optional[int] = None  # None = any staff
    date: date
    status: str = Field(description="closed | fully_booked | open")
    closed_reason: Optional[str] = None
    closed_detail: Optional[str] = None
    slots: list[SlotInfo] = []

    model_config = {"from_attributes": True}


class SlotsDayStatus(BaseModel):
    """Status of a single day in calendar."""
    date: date
    status: str
    closed_reason: Optional[str] = None
    open_slots_count: int = 0

    model_config = {"from_attributes": True}


class SlotsCalendarResponse(BaseModel):
    """Response with calendar of available days."""
    shop_id: int
    service_id: int
    staff_id: Optional[int] = None
    days: list[SlotsDayStatus]

    # Metadata
    horizon_days: int
    slot_step_minutes: int = Field(description="Grid step in minutes (15/30/60)")

    model_config = {"from_attributes": True}


class HolidayRead(BaseModel):
    date: date
    name: str


class HolidaysResponse(BaseModel):
    shop_id: int
    region: str
    year: int
    holidays: list[HolidayRead]
