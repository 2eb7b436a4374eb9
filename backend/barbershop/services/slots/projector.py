# backend/barbershop/services/slots/projector.py
"""
Slot projector: free start times inside an effective window.

A catalog slot is free for a service when:
- it is active and the whole service fits in the window
  (window.start <= slot and slot + duration <= window.end)
- none of the slot units it would occupy overlaps a booked appointment
- it does not overlap a partial time-off block
- it starts after "now" (only relevant for the effective today)

Everything here is pure and deterministic: same input, same ordered output.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from .config import BookingConfig, get_booking_config, time_str_to_minutes
from .resolver import effective_window, resolve_all_staff
from .rules import Closed, Resolution, ShopRules

# (start "HH:MM", duration_minutes)
BookedSlot = tuple[str, int]


@dataclass(frozen=True)
class SlotOption:
    time: str
    staff_ids: tuple[int, ...]


@dataclass
class DayProjection:
    """Result for one day: closed, fully booked, or open with slots."""
    date: date
    status: str  # closed | fully_booked | open
    closed_reason: Optional[str] = None
    closed_detail: Optional[str] = None
    slots: list[SlotOption] = field(default_factory=list)


def free_slots(
    window: Resolution,
    catalog: list[str],
    duration_minutes: int,
    booked: list[BookedSlot] = (),
    blocked: list[tuple[str, str]] = (),
    not_before: str | None = None,
    config: BookingConfig | None = None,
) -> list[str]:
    """
    Free slot times for a single window, ascending.

    Args:
        window: Result of the resolver
        catalog: Active slot times
        duration_minutes: Duration of the requested service
        booked: Booked appointments of this staff member on this day
        blocked: Partial time-off intervals ("HH:MM", "HH:MM")
        not_before: Only slots strictly after this time qualify
    """
    if isinstance(window, Closed):
        return []

    config = config or get_booking_config()
    win_start = time_str_to_minutes(window.start)
    win_end = time_str_to_minutes(window.end)
    occupied = _booked_intervals(booked, config)
    blocks = [(time_str_to_minutes(s), time_str_to_minutes(e)) for s, e in blocked]
    cutoff = time_str_to_minutes(not_before) if not_before else None

    result = []
    for time_str in sorted(set(catalog)):
        start = time_str_to_minutes(time_str)
        end = start + duration_minutes
        if start < win_start or end > win_end:
            continue
        if cutoff is not None and start <= cutoff:
            continue
        unit_start, unit_end = config.occupied_span(time_str, duration_minutes)
        if unit_end > 24 * 60:
            continue
        if any(_overlaps(unit_start, unit_end, s, e) for s, e in occupied):
            continue
        if any(_overlaps(start, end, s, e) for s, e in blocks):
            continue
        result.append(time_str)

    return result


def project_day(
    rules: ShopRules,
    staff_id: int | None,
    target_date: date,
    duration_minutes: int,
    bookings: dict[int, list[BookedSlot]],
    not_before: str | None = None,
    config: BookingConfig | None = None,
) -> DayProjection:
    """
    Project one day for a staff member, or for "any staff".

    "Any staff" is a fan-out over the single-staff path: each slot lists
    every staff member able to fill it, in staff order.
    """
    catalog = rules.catalog()

    if staff_id is not None:
        resolution = effective_window(rules, staff_id, target_date)
        if isinstance(resolution, Closed):
            return DayProjection(
                date=target_date,
                status="closed",
                closed_reason=resolution.reason,
                closed_detail=resolution.detail,
            )
        times = free_slots(
            resolution,
            catalog,
            duration_minutes,
            booked=bookings.get(staff_id, []),
            blocked=_partial_blocks(rules, staff_id, target_date),
            not_before=not_before,
            config=config,
        )
        return DayProjection(
            date=target_date,
            status="open" if times else "fully_booked",
            slots=[SlotOption(t, (staff_id,)) for t in times],
        )

    resolutions = resolve_all_staff(rules, target_date)
    open_staff = [(s, r) for s, r in resolutions if not isinstance(r, Closed)]
    if not open_staff:
        reasons = {(r.reason, r.detail) for _, r in resolutions}
        reason, detail = reasons.pop() if len(reasons) == 1 else ("no_staff_available", None)
        return DayProjection(
            date=target_date,
            status="closed",
            closed_reason=reason,
            closed_detail=detail,
        )

    by_time: dict[str, list[int]] = {}
    for staff, window in open_staff:
        for t in free_slots(
            window,
            catalog,
            duration_minutes,
            booked=bookings.get(staff.id, []),
            blocked=_partial_blocks(rules, staff.id, target_date),
            not_before=not_before,
            config=config,
        ):
            by_time.setdefault(t, []).append(staff.id)

    slots = [SlotOption(t, tuple(by_time[t])) for t in sorted(by_time)]
    return DayProjection(
        date=target_date,
        status="open" if slots else "fully_booked",
        slots=slots,
    )


# ── Helpers ──────────────────────────────────────────────────────────────


def _booked_intervals(booked: list[BookedSlot], config: BookingConfig) -> list[tuple[int, int]]:
    # Same grid units the committer claims in slot_claims
    return [config.occupied_span(time_str, duration) for time_str, duration in booked]


def _partial_blocks(rules: ShopRules, staff_id: int, target_date: date) -> list[tuple[str, str]]:
    return [
        (t.start_time, t.end_time)
        for t in rules.time_off_for(staff_id, target_date)
        if not t.whole_day
    ]


def _overlaps(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    return a_start < b_end and b_start < a_end
