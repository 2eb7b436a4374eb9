# backend/barbershop/routers/slots.py
"""
Slots API endpoints.

GET /slots/day      - Free start times of one day (staff or any staff)
GET /slots/calendar - Per-day status for the widget calendar
GET /slots/holidays - Holiday calendar of the shop's region
"""

from datetime import date

from fastapi import APIRouter, Depends, Query

from ..errors import BookingError
from ..schemas.slots import (
    HolidayRead,
    HolidaysResponse,
    SlotInfo,
    SlotsCalendarResponse,
    SlotsDayResponse,
    SlotsDayStatus,
)
from ..services.booking_facade import BookingFacade, SlotsQuery
from .deps import get_facade
from .errors import http_error

router = APIRouter(prefix="/slots", tags=["slots"])


@router.get("/day", response_model=SlotsDayResponse)
def get_slots_day(
    shop_id: int,
    service_id: int,
    target_date: date = Query(..., alias="date"),
    staff_id: int | None = None,
    facade: BookingFacade = Depends(get_facade),
):
    """Get available time slots for a service on a specific day."""
    try:
        day = facade.list_available_slots(SlotsQuery(
            shop_id=shop_id,
            service_id=service_id,
            date=target_date,
            staff_id=staff_id,
        ))
    except BookingError as e:
        raise http_error(e) from e

    return SlotsDayResponse(
        shop_id=shop_id,
        service_id=service_id,
        staff_id=staff_id,
        date=day.date,
        status=day.status,
        closed_reason=day.closed_reason,
        closed_detail=day.closed_detail,
        slots=[SlotInfo(time=s.time, staff_ids=list(s.staff_ids)) for s in day.slots],
    )


@router.get("/calendar", response_model=SlotsCalendarResponse)
def get_slots_calendar(
    shop_id: int,
    service_id: int,
    start_date: date | None = None,
    end_date: date | None = None,
    staff_id: int | None = None,
    facade: BookingFacade = Depends(get_facade),
):
    """Get calendar of bookable days, clamped to the booking horizon."""
    try:
        days = facade.list_calendar_days(shop_id, service_id, start_date, end_date, staff_id)
    except BookingError as e:
        raise http_error(e) from e

    return SlotsCalendarResponse(
        shop_id=shop_id,
        service_id=service_id,
        staff_id=staff_id,
        days=[
            SlotsDayStatus(
                date=d.date,
                status=d.status,
                closed_reason=d.closed_reason,
                open_slots_count=len(d.slots),
            )
            for d in days
        ],
        horizon_days=facade.config.horizon_days,
        slot_step_minutes=facade.config.slot_step_minutes,
    )


@router.get("/holidays", response_model=HolidaysResponse)
def get_holidays(
    shop_id: int,
    year: int,
    for_display: bool = False,
    facade: BookingFacade = Depends(get_facade),
):
    """Public holidays of the shop's region."""
    try:
        holidays = facade.list_holidays(shop_id, year, for_display=for_display)
        region = facade.shop_region(shop_id)
    except BookingError as e:
        raise http_error(e) from e

    return HolidaysResponse(
        shop_id=shop_id,
        region=region,
        year=year,
        holidays=[HolidayRead(date=d, name=n) for d, n in holidays],
    )
