# backend/barbershop/routers/staff.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..errors import BookingError
from ..schemas.rules import VacationReportEntry
from ..services.vacation import vacation_report
from .errors import http_error

router = APIRouter(prefix="/staff", tags=["staff"])


@router.get("/vacation-report", response_model=list[VacationReportEntry])
def get_vacation_report(shop_id: int, year: int, db: Session = Depends(get_db)):
    """Used and remaining vacation per staff member (reporting only)."""
    try:
        return vacation_report(db, shop_id, year)
    except BookingError as e:
        raise http_error(e) from e
