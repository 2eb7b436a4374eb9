# backend/barbershop/services/slots/config.py
"""
Booking configuration and time helpers for slots calculation.
"""

import re
from dataclasses import dataclass
from datetime import date
from functools import lru_cache
from typing import Optional

_HHMM = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


@dataclass(frozen=True)
class BookingConfig:
    """
    Configuration for the availability engine.

    Attributes:
        slot_step_minutes: Length of one slot unit (15/30/60). An appointment
            occupies ceil(duration / step) consecutive units.
        horizon_days: How many days ahead slots can be listed and booked
        same_day_cutoff: "HH:MM" local time after which today is no longer
            bookable and the effective today rolls over to tomorrow.
            None disables the rollover (only past slots are hidden).
        rules_cache_ttl_seconds: Redis TTL for cached rule snapshots
    """
    slot_step_minutes: int = 30  # 15 / 30 / 60
    horizon_days: int = 28
    same_day_cutoff: Optional[str] = None
    rules_cache_ttl_seconds: int = 3600

    def __post_init__(self):
        """Validate configuration."""
        if self.slot_step_minutes not in (15, 30, 60):
            raise ValueError(f"slot_step_minutes must be 15, 30, or 60, got {self.slot_step_minutes}")
        if self.horizon_days < 0:
            raise ValueError(f"horizon_days must be >= 0, got {self.horizon_days}")
        if self.same_day_cutoff is not None and not is_time_str(self.same_day_cutoff):
            raise ValueError(f"same_day_cutoff must be HH:MM, got {self.same_day_cutoff!r}")

    def units_for(self, duration_minutes: int) -> int:
        """Number of slot units a service of this duration occupies."""
        return max(1, -(-duration_minutes // self.slot_step_minutes))

    def occupied_span(self, start: str, duration_minutes: int) -> tuple[int, int]:
        """
        Minutes [from, to) of the grid units an appointment touches.

        Snapped to the slot grid, so an off-grid start such as 10:15 still
        claims the 10:00 unit.
        """
        step = self.slot_step_minutes
        start_min = time_str_to_minutes(start)
        first = start_min // step * step
        last = -(-(start_min + max(duration_minutes, 1)) // step) * step
        return first, last

    def occupied_times(self, start: str, duration_minutes: int) -> list[str]:
        """
        "HH:MM" grid unit starts covered by an appointment at `start`.

        Returns empty list if the appointment would cross midnight.
        """
        first, last = self.occupied_span(start, duration_minutes)
        if last > 24 * 60:
            return []
        return [minutes_to_time_str(t) for t in range(first, last, self.slot_step_minutes)]


@lru_cache
def get_booking_config() -> BookingConfig:
    """
    Get booking configuration (singleton).
    """
    return BookingConfig()


# ── Time helpers ─────────────────────────────────────────────────────────


def is_time_str(value: str) -> bool:
    return bool(value) and _HHMM.match(value) is not None


def time_str_to_minutes(value: str) -> int:
    """Convert "HH:MM" (or "HH:MM:SS") to minutes since midnight."""
    parts = value.split(":")
    return int(parts[0]) * 60 + int(parts[1])


def minutes_to_time_str(minutes: int) -> str:
    """Convert minutes since midnight to "HH:MM"."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def normalize_time(value: str) -> str:
    """Trim "HH:MM:SS" database values down to "HH:MM"."""
    return minutes_to_time_str(time_str_to_minutes(value))


def day_of_week(day: date) -> int:
    """Weekday with 0 = Sunday ... 6 = Saturday."""
    return day.isoweekday() % 7
