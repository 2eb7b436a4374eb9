# backend/barbershop/services/vacation.py
"""
Vacation report for the admin time-off page.

Reporting only: the allowance (vacation_days_per_year) never blocks
availability. Blocking comes from StaffTimeOff rows alone.
"""

from datetime import date

from sqlalchemy.orm import Session

from ..errors import InvalidRequest
from ..models.tables import Shops, Staff, StaffTimeOff
from .holidays import count_working_days


def used_vacation_days(db: Session, shop_id: int, year: int) -> dict[int, int]:
    """
    Calendar days of time off per staff member within a year.

    Each entry counts its inclusive overlap with the year, so an absence
    from Dec 30 to Jan 2 contributes 2 days to each year.
    """
    used: dict[int, int] = {}
    for staff_id, start, end in _time_off_in_year(db, shop_id, year):
        used[staff_id] = used.get(staff_id, 0) + (end - start).days + 1
    return used


def vacation_report(db: Session, shop_id: int, year: int) -> list[dict]:
    """Allowance, used days and remainder per staff member, in staff order."""
    shop = db.get(Shops, shop_id)
    if not shop:
        raise InvalidRequest(f"Shop {shop_id} not found")

    used = used_vacation_days(db, shop_id, year)

    # Mon-Sat without holidays, the way absences are shown in the admin list
    working: dict[int, int] = {}
    for staff_id, start, end in _time_off_in_year(db, shop_id, year):
        working[staff_id] = working.get(staff_id, 0) + count_working_days(start, end, shop.region)

    staff_rows = (
        db.query(Staff)
        .filter(Staff.shop_id == shop_id)
        .order_by(Staff.sort_order, Staff.id)
        .all()
    )
    return [
        {
            "staff_id": s.id,
            "name": s.name,
            "vacation_days_per_year": s.vacation_days_per_year or 0,
            "used_days": used.get(s.id, 0),
            "used_working_days": working.get(s.id, 0),
            "remaining_days": (s.vacation_days_per_year or 0) - used.get(s.id, 0),
        }
        for s in staff_rows
    ]


def _time_off_in_year(db: Session, shop_id: int, year: int) -> list[tuple[int, date, date]]:
    """(staff_id, start, end) of every absence, clipped to the year."""
    year_start = date(year, 1, 1)
    year_end = date(year, 12, 31)

    rows = (
        db.query(StaffTimeOff.staff_id, StaffTimeOff.start_date, StaffTimeOff.end_date)
        .join(Staff, Staff.id == StaffTimeOff.staff_id)
        .filter(
            Staff.shop_id == shop_id,
            StaffTimeOff.start_date <= year_end.isoformat(),
            StaffTimeOff.end_date >= year_start.isoformat(),
        )
        .all()
    )
    result = []
    for staff_id, start, end in rows:
        start_day = max(date.fromisoformat(start), year_start)
        end_day = min(date.fromisoformat(end), year_end)
        if end_day >= start_day:
            result.append((staff_id, start_day, end_day))
    return result
