# backend/barbershop/routers/rules.py
"""
Admin writes for the date-scoped calendar rules.

Every create/delete drops the shop's cached ShopRules snapshot so the next
availability query sees the change. PATCH is not offered: delete and
re-create instead.
"""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.tables import (
    ClosedDates as DBClosedDates,
    FreeDayExceptions as DBFreeDayExceptions,
    OpenHolidays as DBOpenHolidays,
    OpenSundays as DBOpenSundays,
    OpenSundayStaff as DBOpenSundayStaff,
    Shops as DBShops,
    Staff as DBStaff,
    StaffTimeOff as DBStaffTimeOff,
)
from ..redis_client import redis_client
from ..schemas.rules import (
    ClosedDateCreate,
    ClosedDateRead,
    FreeDayExceptionCreate,
    FreeDayExceptionRead,
    OpenHolidayCreate,
    OpenHolidayRead,
    OpenSundayCreate,
    OpenSundayRead,
    OpenSundayStaffCreate,
    OpenSundayStaffRead,
    StaffTimeOffCreate,
    StaffTimeOffRead,
)
from ..services.slots import invalidate_shop_rules

router = APIRouter(prefix="/rules", tags=["rules"])


# ── Helpers ──────────────────────────────────────────────────────────────


def _save(db: Session, obj, shop_id: int):
    db.add(obj)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Already exists")
    db.refresh(obj)
    invalidate_shop_rules(redis_client, shop_id)
    return obj


def _remove(db: Session, obj, shop_id: int) -> None:
    db.delete(obj)
    db.commit()
    invalidate_shop_rules(redis_client, shop_id)


def _get_or_404(db: Session, model, id: int):
    obj = db.get(model, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")
    return obj


def _shop_or_400(db: Session, shop_id: int) -> DBShops:
    shop = db.get(DBShops, shop_id)
    if not shop:
        raise HTTPException(status_code=400, detail=f"Shop {shop_id} not found")
    return shop


def _staff_or_400(db: Session, staff_id: int, shop_id: int | None = None) -> DBStaff:
    staff = db.get(DBStaff, staff_id)
    if not staff or (shop_id is not None and staff.shop_id != shop_id):
        raise HTTPException(status_code=400, detail=f"Staff {staff_id} not found")
    return staff


# ── Closed dates ─────────────────────────────────────────────────────────


@router.get("/closed-dates", response_model=list[ClosedDateRead])
def list_closed_dates(shop_id: int, db: Session = Depends(get_db)):
    return (
        db.query(DBClosedDates)
        .filter(DBClosedDates.shop_id == shop_id)
        .order_by(DBClosedDates.date)
        .all()
    )


@router.post("/closed-dates", response_model=ClosedDateRead, status_code=status.HTTP_201_CREATED)
def create_closed_date(data: ClosedDateCreate, db: Session = Depends(get_db)):
    _shop_or_400(db, data.shop_id)
    obj = DBClosedDates(**data.model_dump(mode="json"))
    return _save(db, obj, data.shop_id)


@router.delete("/closed-dates/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_closed_date(id: int, db: Session = Depends(get_db)):
    obj = _get_or_404(db, DBClosedDates, id)
    _remove(db, obj, obj.shop_id)


# ── Open Sundays ─────────────────────────────────────────────────────────


@router.get("/open-sundays", response_model=list[OpenSundayRead])
def list_open_sundays(shop_id: int, db: Session = Depends(get_db)):
    return (
        db.query(DBOpenSundays)
        .filter(DBOpenSundays.shop_id == shop_id)
        .order_by(DBOpenSundays.date)
        .all()
    )


@router.post("/open-sundays", response_model=OpenSundayRead, status_code=status.HTTP_201_CREATED)
def create_open_sunday(data: OpenSundayCreate, db: Session = Depends(get_db)):
    _shop_or_400(db, data.shop_id)
    obj = DBOpenSundays(**data.model_dump(mode="json"))
    return _save(db, obj, data.shop_id)


@router.delete("/open-sundays/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_open_sunday(id: int, db: Session = Depends(get_db)):
    # Staff assignments of that date stay and become inert
    obj = _get_or_404(db, DBOpenSundays, id)
    _remove(db, obj, obj.shop_id)


@router.get("/open-sundays/staff", response_model=list[OpenSundayStaffRead])
def list_open_sunday_staff(shop_id: int, target_date: date | None = None, db: Session = Depends(get_db)):
    query = db.query(DBOpenSundayStaff).filter(DBOpenSundayStaff.shop_id == shop_id)
    if target_date is not None:
        query = query.filter(DBOpenSundayStaff.date == target_date.isoformat())
    return query.order_by(DBOpenSundayStaff.date, DBOpenSundayStaff.staff_id).all()


@router.post(
    "/open-sundays/staff", response_model=OpenSundayStaffRead, status_code=status.HTTP_201_CREATED
)
def create_open_sunday_staff(data: OpenSundayStaffCreate, db: Session = Depends(get_db)):
    _staff_or_400(db, data.staff_id, data.shop_id)
    obj = DBOpenSundayStaff(**data.model_dump(mode="json"))
    return _save(db, obj, data.shop_id)


@router.delete("/open-sundays/staff/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_open_sunday_staff(id: int, db: Session = Depends(get_db)):
    obj = _get_or_404(db, DBOpenSundayStaff, id)
    _remove(db, obj, obj.shop_id)


# ── Open holidays ────────────────────────────────────────────────────────


@router.get("/open-holidays", response_model=list[OpenHolidayRead])
def list_open_holidays(shop_id: int, db: Session = Depends(get_db)):
    return (
        db.query(DBOpenHolidays)
        .filter(DBOpenHolidays.shop_id == shop_id)
        .order_by(DBOpenHolidays.date)
        .all()
    )


@router.post("/open-holidays", response_model=OpenHolidayRead, status_code=status.HTTP_201_CREATED)
def create_open_holiday(data: OpenHolidayCreate, db: Session = Depends(get_db)):
    _shop_or_400(db, data.shop_id)
    obj = DBOpenHolidays(**data.model_dump(mode="json"))
    return _save(db, obj, data.shop_id)


@router.delete("/open-holidays/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_open_holiday(id: int, db: Session = Depends(get_db)):
    obj = _get_or_404(db, DBOpenHolidays, id)
    _remove(db, obj, obj.shop_id)


# ── Free-day exceptions ──────────────────────────────────────────────────


@router.get("/free-day-exceptions", response_model=list[FreeDayExceptionRead])
def list_free_day_exceptions(staff_id: int, db: Session = Depends(get_db)):
    return (
        db.query(DBFreeDayExceptions)
        .filter(DBFreeDayExceptions.staff_id == staff_id)
        .order_by(DBFreeDayExceptions.date)
        .all()
    )


@router.post(
    "/free-day-exceptions", response_model=FreeDayExceptionRead, status_code=status.HTTP_201_CREATED
)
def create_free_day_exception(data: FreeDayExceptionCreate, db: Session = Depends(get_db)):
    staff = _staff_or_400(db, data.staff_id)
    obj = DBFreeDayExceptions(**data.model_dump(mode="json"))
    return _save(db, obj, staff.shop_id)


@router.delete("/free-day-exceptions/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_free_day_exception(id: int, db: Session = Depends(get_db)):
    obj = _get_or_404(db, DBFreeDayExceptions, id)
    _remove(db, obj, obj.staff.shop_id)


# ── Staff time off ───────────────────────────────────────────────────────


@router.get("/time-off", response_model=list[StaffTimeOffRead])
def list_time_off(staff_id: int, db: Session = Depends(get_db)):
    return (
        db.query(DBStaffTimeOff)
        .filter(DBStaffTimeOff.staff_id == staff_id)
        .order_by(DBStaffTimeOff.start_date)
        .all()
    )


@router.post("/time-off", response_model=StaffTimeOffRead, status_code=status.HTTP_201_CREATED)
def create_time_off(data: StaffTimeOffCreate, db: Session = Depends(get_db)):
    staff = _staff_or_400(db, data.staff_id)
    obj = DBStaffTimeOff(**data.model_dump(mode="json"))
    return _save(db, obj, staff.shop_id)


@router.delete("/time-off/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_time_off(id: int, db: Session = Depends(get_db)):
    obj = _get_or_404(db, DBStaffTimeOff, id)
    _remove(db, obj, obj.staff.shop_id)
