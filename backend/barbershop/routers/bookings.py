# backend/barbershop/routers/bookings.py
# DELETE = 405: appointments are cancelled, never removed

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..errors import BookingError
from ..models.tables import Appointments as DBAppointments
from ..schemas.bookings import (
    BookingCreate,
    BookingRead,
)
from ..services.booking_facade import BookingFacade, BookingRequest
from ..services.slots import Customer
from .deps import get_facade
from .errors import http_error

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.get("/{id}", response_model=BookingRead)
def get_booking(id: int, db: Session = Depends(get_db)):
    obj = db.get(DBAppointments, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")
    return obj


@router.post("/", response_model=BookingRead, status_code=status.HTTP_201_CREATED)
def create_booking(
    data: BookingCreate,
    facade: BookingFacade = Depends(get_facade),
):
    try:
        return facade.book(BookingRequest(
            shop_id=data.shop_id,
            service_id=data.service_id,
            staff_id=data.staff_id,
            date=data.date,
            time=data.time_slot,
            customer=Customer(
                name=data.customer_name,
                email=data.customer_email,
                phone=data.customer_phone,
            ),
            source=data.source,
        ))
    except BookingError as e:
        raise http_error(e) from e


@router.post("/{id}/cancel", response_model=BookingRead)
def cancel_booking(id: int, facade: BookingFacade = Depends(get_facade)):
    try:
        return facade.cancel(id)
    except BookingError as e:
        raise http_error(e) from e


@router.delete("/{id}")
def delete_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )
