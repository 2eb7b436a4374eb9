# backend/barbershop/services/slots/resolver.py
"""
Rule resolver: effective working window for (staff or shop, date).

Precedence, first deciding rule wins:
  1. Closed date (shop-wide, always first)
  -  Staff not yet employed / whole-day time off
  2. Sunday: open Sunday required; staff need an assignment, whose own
     window is authoritative
  3. Public holiday without an open-holiday record
  4. Staff rules: free-day exception → free day → replacement day →
     individual working hours
  5. Global opening hours of the weekday

Pure functions over ShopRules, no I/O.
"""

from datetime import date

from ...errors import IncompleteConfiguration, InvalidRequest
from ..holidays import holiday_name
from .config import day_of_week
from .rules import Closed, Resolution, ShopRules, StaffInfo, Window


def effective_window(
    rules: ShopRules,
    staff_id: int | None,
    target_date: date,
) -> Resolution:
    """
    Resolve the window for one staff member, or the shop when staff_id is None.

    Raises:
        InvalidRequest: staff_id does not belong to the shop.
        IncompleteConfiguration: opening hours needed but not configured.
        UnsupportedRegion: the shop's holiday region is unknown.
    """
    staff = None
    if staff_id is not None:
        staff = rules.staff.get(staff_id)
        if staff is None:
            raise InvalidRequest(f"Staff {staff_id} does not belong to shop {rules.shop_id}")

    # Step 1: shop closures dominate everything
    if target_date in rules.closed_dates:
        return Closed("closed_date", rules.closed_dates[target_date])

    if staff is not None:
        if staff.start_date and target_date < staff.start_date:
            return Closed("not_employed")
        if any(t.whole_day for t in rules.time_off_for(staff.id, target_date)):
            return Closed("time_off")

    # Step 2: Sundays are closed unless declared open
    if target_date.weekday() == 6:
        return _resolve_sunday(rules, staff, target_date)

    # Step 3: public holidays are closed unless declared open
    name = holiday_name(target_date, rules.region)
    if name and target_date not in rules.open_holidays:
        return Closed("holiday", name)

    # Step 4: staff-specific rules
    weekday = day_of_week(target_date)
    if staff is not None:
        exception = rules.free_day_exceptions.get((staff.id, target_date))
        if exception is not None:
            return Window(exception.start_time, exception.end_time)
        if staff.free_day is not None and staff.free_day == weekday:
            return Closed("free_day")
        if target_date in rules.replacement_dates(staff.id):
            return Closed("replacement_day")
        individual = rules.working_hours.get((staff.id, weekday))
        if individual is not None:
            return individual

    # Step 5: global opening hours
    return _resolve_opening_hours(rules, weekday)


def resolve_all_staff(
    rules: ShopRules,
    target_date: date,
) -> list[tuple[StaffInfo, Resolution]]:
    """Fan out over every active staff member, in staff order."""
    return [
        (staff, effective_window(rules, staff.id, target_date))
        for staff in rules.active_staff()
    ]


# ── Steps ────────────────────────────────────────────────────────────────


def _resolve_sunday(rules: ShopRules, staff: StaffInfo | None, target_date: date) -> Resolution:
    open_sunday = rules.open_sundays.get(target_date)
    if open_sunday is None:
        return Closed("sunday")
    if staff is None:
        return open_sunday

    assignment = rules.open_sunday_staff.get((target_date, staff.id))
    if assignment is None:
        return Closed("not_assigned")
    return assignment


def _resolve_opening_hours(rules: ShopRules, weekday: int) -> Resolution:
    opening = rules.opening_hours.get(weekday)
    if opening is None:
        raise IncompleteConfiguration(
            f"Shop {rules.shop_id} has no opening hours for weekday {weekday}"
        )
    if opening.is_closed:
        return Closed("shop_closed")
    if not opening.open_time or not opening.close_time:
        raise IncompleteConfiguration(
            f"Shop {rules.shop_id} is open on weekday {weekday} but has no open/close time"
        )
    return Window(opening.open_time, opening.close_time)
