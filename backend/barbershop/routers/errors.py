# backend/barbershop/routers/errors.py

from fastapi import HTTPException

from ..errors import BookingError


def http_error(err: BookingError) -> HTTPException:
    """Translate an engine error into the HTTP answer the widget expects."""
    return HTTPException(
        status_code=err.status_code,
        detail={"kind": err.kind, "message": err.message},
    )
