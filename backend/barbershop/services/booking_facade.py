# backend/barbershop/services/booking_facade.py
"""
Query façade used by the routers.

list_available_slots: one day, one staff member or "any staff"
list_calendar_days:   per-day status for the widget calendar
book:                 commit a slot (any staff → first candidate that wins)
cancel:               idempotent cancellation
list_holidays:        holiday calendar of the shop's region

Validation happens here; the engine modules below trust their input.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from redis import Redis
from sqlalchemy.orm import Session

from ..config import settings
from ..errors import IncompleteConfiguration, InvalidRequest, SlotNoLongerAvailable
from ..models.tables import Appointments, Services, Shops
from .holidays import list_holidays
from .slots import (
    BookingConfig,
    Customer,
    DayProjection,
    ShopRules,
    cancel_booking,
    commit_booking,
    get_booking_config,
    get_shop_rules,
    project_day,
    read_bookings,
)
from .slots.config import is_time_str, time_str_to_minutes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SlotsQuery:
    shop_id: int
    service_id: int
    date: date
    staff_id: int | None = None


@dataclass(frozen=True)
class BookingRequest:
    shop_id: int
    service_id: int
    date: date
    time: str
    customer: Customer
    staff_id: int | None = None
    source: str = "widget"


class BookingFacade:
    """
    Entry point for availability queries and booking commits.

    Args:
        db: SQLAlchemy session (one per request)
        config: Engine configuration, defaults to get_booking_config()
        redis: Optional client for the rules cache
        now: Fixed shop-local "now" (tests); defaults to the wall clock
    """

    def __init__(
        self,
        db: Session,
        config: BookingConfig | None = None,
        redis: Redis | None = None,
        now: datetime | None = None,
    ):
        self.db = db
        self.config = config or get_booking_config()
        self.redis = redis
        self._now = now

    # ── Clock ────────────────────────────────────────────────────────────

    def local_now(self) -> datetime:
        if self._now is not None:
            return self._now
        return datetime.now(ZoneInfo(settings.timezone))

    def effective_today(self) -> date:
        """Today in shop time, or tomorrow once the same-day cutoff has passed."""
        now = self.local_now()
        cutoff = self.config.same_day_cutoff
        if cutoff and now.hour * 60 + now.minute >= time_str_to_minutes(cutoff):
            return now.date() + timedelta(days=1)
        return now.date()

    def _not_before(self, target_date: date) -> str | None:
        now = self.local_now()
        if target_date == now.date():
            return now.strftime("%H:%M")
        return None

    # ── Queries ──────────────────────────────────────────────────────────

    def list_available_slots(self, query: SlotsQuery) -> DayProjection:
        rules = self._rules(query.shop_id)
        service = self._service(query.shop_id, query.service_id)
        self._check_staff(rules, query.staff_id)
        self._check_date(query.date)
        return self._project(rules, query.staff_id, query.date, service.duration_minutes)

    def list_calendar_days(
        self,
        shop_id: int,
        service_id: int,
        start_date: date | None = None,
        end_date: date | None = None,
        staff_id: int | None = None,
    ) -> list[DayProjection]:
        """Day-by-day status, clamped to [effective today, horizon]."""
        rules = self._rules(shop_id)
        service = self._service(shop_id, service_id)
        self._check_staff(rules, staff_id)

        today = self.effective_today()
        last_day = today + timedelta(days=self.config.horizon_days)

        if start_date is None or start_date < today:
            start_date = today
        if end_date is None or end_date > last_day:
            end_date = last_day
        if end_date < start_date:
            return []

        days = []
        current = start_date
        while current <= end_date:
            days.append(self._project(rules, staff_id, current, service.duration_minutes))
            current += timedelta(days=1)
        return days

    def list_holidays(self, shop_id: int, year: int, for_display: bool = False) -> list[tuple[date, str]]:
        return list_holidays(self.shop_region(shop_id), year, for_display=for_display)

    def shop_region(self, shop_id: int) -> str:
        shop = self.db.get(Shops, shop_id)
        if not shop:
            raise InvalidRequest(f"Shop {shop_id} not found")
        return shop.region

    # ── Commands ─────────────────────────────────────────────────────────

    def book(self, request: BookingRequest) -> Appointments:
        """
        Book a slot.

        With staff_id=None the candidates are tried in staff order and the
        first successful commit wins.

        Raises:
            InvalidRequest: bad input (unknown service/staff, date, time).
            SlotNoLongerAvailable: no candidate could take the slot.
        """
        if not is_time_str(request.time):
            raise InvalidRequest(f"Invalid time {request.time!r}, expected HH:MM")
        if not request.customer.name or not request.customer.name.strip():
            raise InvalidRequest("Customer name is required")

        rules = self._rules(request.shop_id)
        service = self._service(request.shop_id, request.service_id)
        self._check_staff(rules, request.staff_id)
        self._check_date(request.date)

        if request.staff_id is not None:
            candidates = [request.staff_id]
        else:
            candidates = [s.id for s in rules.active_staff()]

        not_before = self._not_before(request.date)
        for staff_id in candidates:
            try:
                return commit_booking(
                    self.db,
                    rules,
                    staff_id,
                    request.date,
                    request.time,
                    service_id=service.id,
                    duration_minutes=service.duration_minutes,
                    customer=request.customer,
                    not_before=not_before,
                    source=request.source,
                    config=self.config,
                )
            except SlotNoLongerAvailable:
                continue

        logger.warning(
            f"Booking rejected: shop_id={request.shop_id}, staff_id={request.staff_id}, "
            f"time={request.date} {request.time}"
        )
        raise SlotNoLongerAvailable(f"{request.date} {request.time} is no longer available")

    def cancel(self, appointment_id: int) -> Appointments:
        return cancel_booking(self.db, appointment_id)

    # ── Internals ────────────────────────────────────────────────────────

    def _project(
        self,
        rules: ShopRules,
        staff_id: int | None,
        target_date: date,
        duration_minutes: int,
    ) -> DayProjection:
        staff_ids = [staff_id] if staff_id is not None else [s.id for s in rules.active_staff()]
        bookings = read_bookings(self.db, staff_ids, target_date)
        try:
            return project_day(
                rules,
                staff_id,
                target_date,
                duration_minutes,
                bookings,
                not_before=self._not_before(target_date),
                config=self.config,
            )
        except IncompleteConfiguration as e:
            logger.error(f"Configuration gap for shop {rules.shop_id}: {e.message}")
            raise

    def _rules(self, shop_id: int) -> ShopRules:
        return get_shop_rules(self.db, shop_id, self.config, self.redis)

    def _service(self, shop_id: int, service_id: int) -> Services:
        service = self.db.get(Services, service_id)
        if not service or service.shop_id != shop_id:
            raise InvalidRequest(f"Service {service_id} not found")
        if not service.is_active:
            raise InvalidRequest(f"Service {service_id} is not active")
        if service.duration_minutes <= 0:
            raise InvalidRequest(f"Service {service_id} has no duration")
        return service

    def _check_staff(self, rules: ShopRules, staff_id: int | None) -> None:
        if staff_id is None:
            return
        staff = rules.staff.get(staff_id)
        if staff is None or not staff.is_active:
            raise InvalidRequest(f"Staff {staff_id} not found")

    def _check_date(self, target_date: date) -> None:
        today = self.effective_today()
        if target_date < today:
            raise InvalidRequest("Date cannot be in the past")
        if target_date > today + timedelta(days=self.config.horizon_days):
            raise InvalidRequest(f"Date cannot be more than {self.config.horizon_days} days ahead")
