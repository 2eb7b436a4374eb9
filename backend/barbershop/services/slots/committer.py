# backend/barbershop/services/slots/committer.py
"""
Booking committer: turns a free slot into a booked appointment.

The availability check is repeated at commit time against the live ledger,
and the insert relies on two store-level guards:
- slot_claims UNIQUE (staff_id, date, time_slot), one row per occupied unit
- appointments partial UNIQUE (staff_id, date, time_slot) WHERE booked

A violation of either is the normal "someone was faster" outcome and is
reported as SlotNoLongerAvailable after a full rollback.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...errors import NotFound, SlotNoLongerAvailable
from ...models.tables import Appointments, SlotClaims
from .config import BookingConfig, get_booking_config
from .projector import BookedSlot, free_slots
from .resolver import effective_window
from .rules import Closed, ShopRules

logger = logging.getLogger(__name__)

STATUS_BOOKED = "booked"
STATUS_CANCELLED = "cancelled"


@dataclass(frozen=True)
class Customer:
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None


def read_bookings(
    db: Session,
    staff_ids: list[int],
    target_date: date,
) -> dict[int, list[BookedSlot]]:
    """Booked (start, duration) pairs per staff member, straight from the ledger."""
    result: dict[int, list[BookedSlot]] = {sid: [] for sid in staff_ids}
    if not staff_ids:
        return result

    rows = (
        db.query(Appointments.staff_id, Appointments.time_slot, Appointments.duration_minutes)
        .filter(
            Appointments.staff_id.in_(staff_ids),
            Appointments.date == target_date.isoformat(),
            Appointments.status == STATUS_BOOKED,
        )
        .order_by(Appointments.time_slot)
        .all()
    )
    for staff_id, time_slot, duration in rows:
        result[staff_id].append((time_slot, duration))
    return result


def commit_booking(
    db: Session,
    rules: ShopRules,
    staff_id: int,
    target_date: date,
    time_str: str,
    service_id: int,
    duration_minutes: int,
    customer: Customer,
    not_before: str | None = None,
    source: str = "widget",
    config: BookingConfig | None = None,
) -> Appointments:
    """
    Atomically book one slot.

    Raises:
        SlotNoLongerAvailable: the slot is closed, taken, or lost the race.
    """
    config = config or get_booking_config()

    # Re-validate at commit time, never trust the listing
    window = effective_window(rules, staff_id, target_date)
    if isinstance(window, Closed):
        raise SlotNoLongerAvailable(f"Staff {staff_id} is not available on {target_date} ({window.reason})")

    booked = read_bookings(db, [staff_id], target_date)[staff_id]
    blocked = [
        (t.start_time, t.end_time)
        for t in rules.time_off_for(staff_id, target_date)
        if not t.whole_day
    ]
    free = free_slots(
        window,
        rules.catalog(),
        duration_minutes,
        booked=booked,
        blocked=blocked,
        not_before=not_before,
        config=config,
    )
    if time_str not in free:
        raise SlotNoLongerAvailable(f"{target_date} {time_str} is no longer available for staff {staff_id}")

    appointment = Appointments(
        shop_id=rules.shop_id,
        staff_id=staff_id,
        service_id=service_id,
        date=target_date.isoformat(),
        time_slot=time_str,
        duration_minutes=duration_minutes,
        status=STATUS_BOOKED,
        customer_name=customer.name,
        customer_email=customer.email,
        customer_phone=customer.phone,
        source=source,
    )

    try:
        db.add(appointment)
        db.flush()
        for unit in config.occupied_times(time_str, duration_minutes):
            db.add(SlotClaims(
                appointment_id=appointment.id,
                staff_id=staff_id,
                date=target_date.isoformat(),
                time_slot=unit,
            ))
        db.flush()
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info(f"Slot race lost: staff_id={staff_id}, time={target_date} {time_str}")
        raise SlotNoLongerAvailable(f"{target_date} {time_str} was just booked for staff {staff_id}")
    except Exception:
        db.rollback()
        raise

    db.refresh(appointment)
    logger.info(
        f"Appointment booked: id={appointment.id}, shop_id={rules.shop_id}, "
        f"staff_id={staff_id}, service_id={service_id}, time={target_date} {time_str}"
    )
    return appointment


def cancel_booking(db: Session, appointment_id: int) -> Appointments:
    """
    Cancel an appointment and release its slot units.

    Idempotent: an already cancelled appointment is returned unchanged.

    Raises:
        NotFound: no appointment with this id.
    """
    appointment = db.get(Appointments, appointment_id)
    if not appointment:
        raise NotFound(f"Appointment {appointment_id} not found")

    if appointment.status == STATUS_CANCELLED:
        return appointment

    appointment.status = STATUS_CANCELLED
    appointment.cancelled_at = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
    db.query(SlotClaims).filter(SlotClaims.appointment_id == appointment.id).delete(
        synchronize_session=False
    )
    db.commit()
    db.refresh(appointment)

    logger.info(f"Appointment cancelled: id={appointment.id}, staff_id={appointment.staff_id}")
    return appointment
