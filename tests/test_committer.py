"""Booking commit and cancel against the SQLite ledger."""

import threading
from datetime import date

import pytest

from barbershop.errors import NotFound, SlotNoLongerAvailable
from barbershop.models.tables import Appointments, SlotClaims, TimeSlots
from barbershop.services.slots import (
    Customer,
    cancel_booking,
    commit_booking,
    load_shop_rules,
    read_bookings,
)
from barbershop.services.slots import committer

MONDAY = date(2026, 3, 2)
WEDNESDAY = date(2026, 3, 4)

CUSTOMER = Customer(name="Max Mustermann", email="max@example.com", phone="0171 1234567")


def book(db, shop, staff_id, day=MONDAY, time="10:00", duration=30, config=None):
    rules = load_shop_rules(db, shop.shop_id)
    return commit_booking(
        db, rules, staff_id, day, time,
        service_id=shop.haircut,
        duration_minutes=duration,
        customer=CUSTOMER,
        config=config,
    )


def booked_count(db, staff_id, day=MONDAY, time="10:00"):
    return (
        db.query(Appointments)
        .filter(
            Appointments.staff_id == staff_id,
            Appointments.date == day.isoformat(),
            Appointments.time_slot == time,
            Appointments.status == "booked",
        )
        .count()
    )


class TestCommit:

    def test_commit_creates_appointment_and_claims(self, db, shop):
        appointment = book(db, shop, shop.anna, duration=60)

        assert appointment.id is not None
        assert appointment.status == "booked"
        assert appointment.date == "2026-03-02"
        assert appointment.time_slot == "10:00"
        assert appointment.duration_minutes == 60
        assert appointment.customer_name == "Max Mustermann"

        claims = db.query(SlotClaims).filter(SlotClaims.appointment_id == appointment.id).all()
        assert sorted(c.time_slot for c in claims) == ["10:00", "10:30"]

    def test_read_bookings(self, db, shop):
        book(db, shop, shop.anna, time="11:00", duration=60)
        assert read_bookings(db, [shop.anna, shop.ben], MONDAY) == {
            shop.anna: [("11:00", 60)],
            shop.ben: [],
        }

    def test_same_slot_twice(self, db, shop):
        book(db, shop, shop.anna)
        with pytest.raises(SlotNoLongerAvailable):
            book(db, shop, shop.anna)
        assert booked_count(db, shop.anna) == 1

    def test_overlapping_booking_rejected(self, db, shop):
        book(db, shop, shop.anna, time="10:00", duration=60)
        with pytest.raises(SlotNoLongerAvailable):
            book(db, shop, shop.anna, time="10:30")

    def test_other_staff_unaffected(self, db, shop):
        book(db, shop, shop.anna)
        assert book(db, shop, shop.ben).staff_id == shop.ben

    def test_closed_day_rejected(self, db, shop):
        # Wednesday is Anna's free day
        with pytest.raises(SlotNoLongerAvailable):
            book(db, shop, shop.anna, day=WEDNESDAY)
        assert db.query(Appointments).count() == 0

    def test_time_outside_catalog_rejected(self, db, shop):
        with pytest.raises(SlotNoLongerAvailable):
            book(db, shop, shop.anna, time="10:15")

    def test_store_guard_without_recheck(self, db, shop, monkeypatch):
        """A stale ledger read still cannot produce a double booking."""
        book(db, shop, shop.anna, duration=60)
        monkeypatch.setattr(
            committer, "read_bookings",
            lambda db, staff_ids, target_date: {sid: [] for sid in staff_ids},
        )

        with pytest.raises(SlotNoLongerAvailable):
            book(db, shop, shop.anna, time="10:30")

        assert db.query(Appointments).count() == 1
        assert db.query(SlotClaims).count() == 2

    def test_store_guard_with_off_grid_slot(self, db, shop, monkeypatch):
        """An off-grid start still claims the grid units it overlaps."""
        db.add(TimeSlots(shop_id=shop.shop_id, time="10:15", active=1, sort_order=99))
        db.commit()

        book(db, shop, shop.anna, time="10:00", duration=60)
        monkeypatch.setattr(
            committer, "read_bookings",
            lambda db, staff_ids, target_date: {sid: [] for sid in staff_ids},
        )

        with pytest.raises(SlotNoLongerAvailable):
            book(db, shop, shop.anna, time="10:15", duration=60)

        assert db.query(Appointments).count() == 1

    def test_off_grid_slot_claims_snapped_units(self, db, shop):
        db.add(TimeSlots(shop_id=shop.shop_id, time="10:15", active=1, sort_order=99))
        db.commit()

        appointment = book(db, shop, shop.anna, time="10:15", duration=30)

        claims = db.query(SlotClaims).filter(SlotClaims.appointment_id == appointment.id).all()
        assert sorted(c.time_slot for c in claims) == ["10:00", "10:30"]


class TestConcurrentCommit:

    def test_exactly_one_of_many_wins(self, session_factory, shop):
        """Two or more near-simultaneous bookings of (Anna, 2026-03-02, 10:00)."""
        workers = 5
        barrier = threading.Barrier(workers)
        results: list[str] = []
        lock = threading.Lock()

        setup = session_factory()
        rules = load_shop_rules(setup, shop.shop_id)
        setup.close()

        def attempt():
            session = session_factory()
            try:
                barrier.wait()
                commit_booking(
                    session, rules, shop.anna, MONDAY, "10:00",
                    service_id=shop.haircut,
                    duration_minutes=30,
                    customer=CUSTOMER,
                )
                outcome = "booked"
            except SlotNoLongerAvailable:
                outcome = "conflict"
            finally:
                session.close()
            with lock:
                results.append(outcome)

        threads = [threading.Thread(target=attempt) for _ in range(workers)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(results) == ["booked"] + ["conflict"] * (workers - 1)

        check = session_factory()
        try:
            assert booked_count(check, shop.anna) == 1
        finally:
            check.close()


class TestCancel:

    def test_cancel_frees_slot(self, db, shop):
        appointment = book(db, shop, shop.anna, duration=60)

        cancelled = cancel_booking(db, appointment.id)
        assert cancelled.status == "cancelled"
        assert cancelled.cancelled_at is not None
        assert db.query(SlotClaims).count() == 0

        again = book(db, shop, shop.anna, time="10:30")
        assert again.status == "booked"

    def test_cancel_is_idempotent(self, db, shop):
        appointment = book(db, shop, shop.anna)

        first = cancel_booking(db, appointment.id)
        first_state = (first.id, first.status, first.cancelled_at)
        second = cancel_booking(db, appointment.id)

        assert (second.id, second.status, second.cancelled_at) == first_state

    def test_cancel_unknown(self, db, shop):
        with pytest.raises(NotFound):
            cancel_booking(db, 4242)

    def test_cancelled_rows_are_kept(self, db, shop):
        appointment = book(db, shop, shop.anna)
        cancel_booking(db, appointment.id)
        book(db, shop, shop.anna)

        statuses = sorted(a.status for a in db.query(Appointments).all())
        assert statuses == ["booked", "cancelled"]
