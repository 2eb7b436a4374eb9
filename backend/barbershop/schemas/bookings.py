# backend/barbershop/schemas/bookings.py

from datetime import date
from typing import Optional
from pydantic import BaseModel


class BookingCreate(BaseModel):
    shop_id: int
    service_id: int
    staff_id: Optional[int] = None  # None = any staff

    date: date
    time_slot: str  # "HH:MM"

    customer_name: str
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None

    source: str = "widget"

    model_config = {"from_attributes": True}


class BookingRead(BaseModel):
    id: int

    shop_id: int
    service_id: int
    staff_id: int

    date: date
    time_slot: str
    duration_minutes: int

    status: str
    customer_name: str
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    source: str

    created_at: Optional[str] = None
    cancelled_at: Optional[str] = None

    model_config = {"from_attributes": True}
