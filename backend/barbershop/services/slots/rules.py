# backend/barbershop/services/slots/rules.py
"""
Immutable snapshot of one shop's calendar configuration.

The resolver and projector only ever see a ShopRules instance, never the
database, so rule precedence can be tested without storage.
"""

import json
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Optional, Union


@dataclass(frozen=True)
class Window:
    """Working window, "HH:MM" start inclusive, end exclusive."""
    start: str
    end: str


@dataclass(frozen=True)
class Closed:
    """
    Day is not bookable.

    reason is machine-readable (closed_date, sunday, not_assigned, holiday,
    time_off, free_day, replacement_day, shop_closed, not_employed);
    detail carries a human label such as the holiday name.
    """
    reason: str
    detail: Optional[str] = None


Resolution = Union[Window, Closed]


@dataclass(frozen=True)
class OpeningDay:
    is_closed: bool
    open_time: Optional[str] = None
    close_time: Optional[str] = None


@dataclass(frozen=True)
class StaffInfo:
    id: int
    name: str
    free_day: Optional[int] = None
    start_date: Optional[date] = None
    vacation_days_per_year: int = 0
    is_active: bool = True
    sort_order: int = 0


@dataclass(frozen=True)
class FreeDayException:
    staff_id: int
    date: date
    start_time: str
    end_time: str
    replacement_date: Optional[date] = None


@dataclass(frozen=True)
class TimeOff:
    staff_id: int
    start_date: date
    end_date: date
    start_time: Optional[str] = None
    end_time: Optional[str] = None

    @property
    def whole_day(self) -> bool:
        return not self.start_time or not self.end_time

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


@dataclass(frozen=True)
class TimeSlotDef:
    time: str
    active: bool = True
    sort_order: int = 0


@dataclass(frozen=True)
class ShopRules:
    shop_id: int
    region: str
    opening_hours: dict[int, OpeningDay] = field(default_factory=dict)
    staff: dict[int, StaffInfo] = field(default_factory=dict)
    working_hours: dict[tuple[int, int], Window] = field(default_factory=dict)
    free_day_exceptions: dict[tuple[int, date], FreeDayException] = field(default_factory=dict)
    closed_dates: dict[date, Optional[str]] = field(default_factory=dict)
    open_sundays: dict[date, Window] = field(default_factory=dict)
    open_sunday_staff: dict[tuple[date, int], Window] = field(default_factory=dict)
    open_holidays: dict[date, str] = field(default_factory=dict)
    time_off: tuple[TimeOff, ...] = ()
    time_slots: tuple[TimeSlotDef, ...] = ()

    # ── Derived lookups ──────────────────────────────────────────────────

    def replacement_dates(self, staff_id: int) -> set[date]:
        """Days off derived from the staff member's free-day exceptions."""
        return {
            exc.replacement_date
            for (sid, _), exc in self.free_day_exceptions.items()
            if sid == staff_id and exc.replacement_date is not None
        }

    def time_off_for(self, staff_id: int, day: date) -> list[TimeOff]:
        return [t for t in self.time_off if t.staff_id == staff_id and t.covers(day)]

    def active_staff(self) -> list[StaffInfo]:
        """Active staff ordered by (sort_order, id)."""
        return sorted(
            (s for s in self.staff.values() if s.is_active),
            key=lambda s: (s.sort_order, s.id),
        )

    def catalog(self) -> list[str]:
        """Active slot times, ascending."""
        return sorted({s.time for s in self.time_slots if s.active})

    # ── Serialization (Redis cache) ──────────────────────────────────────

    def to_json(self) -> str:
        return json.dumps({
            "shop_id": self.shop_id,
            "region": self.region,
            "opening_hours": {str(k): asdict(v) for k, v in self.opening_hours.items()},
            "staff": [
                {**asdict(s), "start_date": _iso(s.start_date)}
                for s in self.staff.values()
            ],
            "working_hours": [
                [sid, dow, w.start, w.end]
                for (sid, dow), w in self.working_hours.items()
            ],
            "free_day_exceptions": [
                [e.staff_id, e.date.isoformat(), e.start_time, e.end_time, _iso(e.replacement_date)]
                for e in self.free_day_exceptions.values()
            ],
            "closed_dates": {d.isoformat(): r for d, r in self.closed_dates.items()},
            "open_sundays": {d.isoformat(): [w.start, w.end] for d, w in self.open_sundays.items()},
            "open_sunday_staff": [
                [d.isoformat(), sid, w.start, w.end]
                for (d, sid), w in self.open_sunday_staff.items()
            ],
            "open_holidays": {d.isoformat(): n for d, n in self.open_holidays.items()},
            "time_off": [
                [t.staff_id, t.start_date.isoformat(), t.end_date.isoformat(), t.start_time, t.end_time]
                for t in self.time_off
            ],
            "time_slots": [[s.time, s.active, s.sort_order] for s in self.time_slots],
        })

    @classmethod
    def from_json(cls, raw: str | bytes) -> "ShopRules":
        data = json.loads(raw)
        staff = {}
        for s in data["staff"]:
            s["start_date"] = _date(s["start_date"])
            staff[s["id"]] = StaffInfo(**s)

        exceptions = {}
        for sid, d, start, end, repl in data["free_day_exceptions"]:
            exc = FreeDayException(sid, date.fromisoformat(d), start, end, _date(repl))
            exceptions[(sid, exc.date)] = exc

        return cls(
            shop_id=data["shop_id"],
            region=data["region"],
            opening_hours={int(k): OpeningDay(**v) for k, v in data["opening_hours"].items()},
            staff=staff,
            working_hours={
                (sid, dow): Window(start, end)
                for sid, dow, start, end in data["working_hours"]
            },
            free_day_exceptions=exceptions,
            closed_dates={date.fromisoformat(d): r for d, r in data["closed_dates"].items()},
            open_sundays={
                date.fromisoformat(d): Window(start, end)
                for d, (start, end) in data["open_sundays"].items()
            },
            open_sunday_staff={
                (date.fromisoformat(d), sid): Window(start, end)
                for d, sid, start, end in data["open_sunday_staff"]
            },
            open_holidays={date.fromisoformat(d): n for d, n in data["open_holidays"].items()},
            time_off=tuple(
                TimeOff(sid, date.fromisoformat(s), date.fromisoformat(e), st, et)
                for sid, s, e, st, et in data["time_off"]
            ),
            time_slots=tuple(TimeSlotDef(t, a, o) for t, a, o in data["time_slots"]),
        )


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


def _date(value: Optional[str]) -> Optional[date]:
    return date.fromisoformat(value) if value else None
