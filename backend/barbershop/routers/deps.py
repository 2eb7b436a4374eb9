# backend/barbershop/routers/deps.py

from fastapi import Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..redis_client import redis_client
from ..services.booking_facade import BookingFacade


# FastAPI dependency
def get_facade(db: Session = Depends(get_db)) -> BookingFacade:
    return BookingFacade(db, redis=redis_client)
