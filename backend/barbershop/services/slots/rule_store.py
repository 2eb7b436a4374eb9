# backend/barbershop/services/slots/rule_store.py
"""
Calendar rule store: reads one shop's configuration rows into ShopRules.

Read-only. Snapshots go through RulesRedisStore when a Redis client is
given; appointments are never part of a snapshot.
"""

import logging
from datetime import date

from redis import Redis
from sqlalchemy.orm import Session

from ...errors import InvalidRequest
from ...models.tables import (
    ClosedDates,
    FreeDayExceptions,
    OpenHolidays,
    OpeningHours,
    OpenSundays,
    OpenSundayStaff,
    Shops,
    Staff,
    StaffTimeOff,
    StaffWorkingHours,
    TimeSlots,
)
from .config import BookingConfig, get_booking_config, normalize_time
from .redis_store import RulesRedisStore
from .rules import (
    FreeDayException,
    OpeningDay,
    ShopRules,
    StaffInfo,
    TimeOff,
    TimeSlotDef,
    Window,
)

logger = logging.getLogger(__name__)


def get_shop_rules(
    db: Session,
    shop_id: int,
    config: BookingConfig | None = None,
    redis: Redis | None = None,
) -> ShopRules:
    """Get rules for a shop, using the Redis cache when available."""
    config = config or get_booking_config()

    if redis is not None:
        store = RulesRedisStore(redis, config)
        cached = store.get(shop_id)
        if cached is not None:
            return cached

        # Cache miss: load and store
        rules = load_shop_rules(db, shop_id)
        store.store(rules)
        return rules

    return load_shop_rules(db, shop_id)


def load_shop_rules(db: Session, shop_id: int) -> ShopRules:
    """
    Load every configuration row of a shop.

    Raises:
        InvalidRequest: unknown or inactive shop.
    """
    shop = db.get(Shops, shop_id)
    if not shop or not shop.is_active:
        raise InvalidRequest(f"Shop {shop_id} not found or inactive")

    staff_rows = db.query(Staff).filter(Staff.shop_id == shop_id).all()
    staff_ids = [s.id for s in staff_rows]

    staff = {
        s.id: StaffInfo(
            id=s.id,
            name=s.name,
            free_day=s.free_day,
            start_date=_parse_date(s.start_date),
            vacation_days_per_year=s.vacation_days_per_year or 0,
            is_active=bool(s.is_active),
            sort_order=s.sort_order or 0,
        )
        for s in staff_rows
    }

    opening_hours = {
        row.day_of_week: OpeningDay(
            is_closed=bool(row.is_closed),
            open_time=_opt_time(row.open_time),
            close_time=_opt_time(row.close_time),
        )
        for row in db.query(OpeningHours).filter(OpeningHours.shop_id == shop_id)
    }

    working_hours = {}
    exceptions = {}
    time_off = []
    if staff_ids:
        for row in db.query(StaffWorkingHours).filter(StaffWorkingHours.staff_id.in_(staff_ids)):
            working_hours[(row.staff_id, row.day_of_week)] = Window(
                normalize_time(row.start_time), normalize_time(row.end_time)
            )

        for row in db.query(FreeDayExceptions).filter(FreeDayExceptions.staff_id.in_(staff_ids)):
            exc = FreeDayException(
                staff_id=row.staff_id,
                date=_parse_date(row.date),
                start_time=normalize_time(row.start_time),
                end_time=normalize_time(row.end_time),
                replacement_date=_parse_date(row.replacement_date),
            )
            exceptions[(exc.staff_id, exc.date)] = exc

        for row in db.query(StaffTimeOff).filter(StaffTimeOff.staff_id.in_(staff_ids)):
            time_off.append(TimeOff(
                staff_id=row.staff_id,
                start_date=_parse_date(row.start_date),
                end_date=_parse_date(row.end_date),
                start_time=_opt_time(row.start_time),
                end_time=_opt_time(row.end_time),
            ))

    closed_dates = {
        _parse_date(row.date): row.reason
        for row in db.query(ClosedDates).filter(ClosedDates.shop_id == shop_id)
    }
    open_sundays = {
        _parse_date(row.date): Window(normalize_time(row.open_time), normalize_time(row.close_time))
        for row in db.query(OpenSundays).filter(OpenSundays.shop_id == shop_id)
    }
    open_sunday_staff = {
        (_parse_date(row.date), row.staff_id): Window(
            normalize_time(row.start_time), normalize_time(row.end_time)
        )
        for row in db.query(OpenSundayStaff).filter(OpenSundayStaff.shop_id == shop_id)
    }
    open_holidays = {
        _parse_date(row.date): row.holiday_name
        for row in db.query(OpenHolidays).filter(OpenHolidays.shop_id == shop_id)
    }
    time_slots = tuple(
        TimeSlotDef(normalize_time(row.time), bool(row.active), row.sort_order or 0)
        for row in (
            db.query(TimeSlots)
            .filter(TimeSlots.shop_id == shop_id)
            .order_by(TimeSlots.sort_order, TimeSlots.time)
        )
    )

    logger.debug(
        f"Loaded rules for shop {shop_id}: {len(staff)} staff, "
        f"{len(time_slots)} slots, {len(exceptions)} exceptions"
    )

    return ShopRules(
        shop_id=shop.id,
        region=shop.region,
        opening_hours=opening_hours,
        staff=staff,
        working_hours=working_hours,
        free_day_exceptions=exceptions,
        closed_dates=closed_dates,
        open_sundays=open_sundays,
        open_sunday_staff=open_sunday_staff,
        open_holidays=open_holidays,
        time_off=tuple(time_off),
        time_slots=time_slots,
    )


# ── Helpers ──────────────────────────────────────────────────────────────


def _parse_date(value) -> date | None:
    if not value:
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _opt_time(value: str | None) -> str | None:
    return normalize_time(value) if value else None
