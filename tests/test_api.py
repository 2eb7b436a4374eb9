"""HTTP layer: status codes and payloads."""

from barbershop.models.tables import TimeSlots


def slots_day(client, shop, day, staff_id=None, service_id=None):
    params = {"shop_id": shop.shop_id, "service_id": service_id or shop.haircut, "date": day}
    if staff_id is not None:
        params["staff_id"] = staff_id
    return client.get("/slots/day", params=params)


def booking_payload(shop, **overrides):
    payload = {
        "shop_id": shop.shop_id,
        "service_id": shop.haircut,
        "staff_id": shop.ben,
        "date": "2026-05-05",
        "time_slot": "10:00",
        "customer_name": "Max Mustermann",
        "customer_email": "max@example.com",
    }
    payload.update(overrides)
    return payload


class TestHealth:

    def test_health_without_redis(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"redis": None}


class TestSlotsEndpoints:

    def test_day_open(self, client, shop):
        response = slots_day(client, shop, "2026-05-05", staff_id=shop.ben)
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "open"
        assert data["slots"][0] == {"time": "10:00", "staff_ids": [shop.ben]}
        assert data["slots"][-1]["time"] == "18:30"

    def test_day_closed(self, client, shop):
        data = slots_day(client, shop, "2026-05-10").json()
        assert data["status"] == "closed"
        assert data["closed_reason"] == "sunday"
        assert data["slots"] == []

    def test_day_fully_booked(self, client, shop, db):
        db.query(TimeSlots).filter(TimeSlots.time != "10:00").update({"active": 0})
        db.commit()

        assert client.post("/bookings/", json=booking_payload(shop)).status_code == 201

        data = slots_day(client, shop, "2026-05-05", staff_id=shop.ben).json()
        assert data["status"] == "fully_booked"
        assert data["closed_reason"] is None

    def test_day_validation_error(self, client, shop):
        response = slots_day(client, shop, "2026-05-01", service_id=shop.shave)
        assert response.status_code == 400
        assert response.json()["detail"]["kind"] == "invalid_request"

    def test_day_in_past(self, client, shop):
        assert slots_day(client, shop, "2026-05-03").status_code == 400

    def test_calendar(self, client, shop):
        response = client.get("/slots/calendar", params={
            "shop_id": shop.shop_id,
            "service_id": shop.haircut,
            "start_date": "2026-05-04",
            "end_date": "2026-05-10",
        })
        assert response.status_code == 200

        data = response.json()
        assert data["horizon_days"] == 28
        assert data["slot_step_minutes"] == 30
        assert [d["status"] for d in data["days"]] == ["open"] * 6 + ["closed"]
        assert data["days"][1]["open_slots_count"] == 18

    def test_holidays(self, client, shop):
        response = client.get("/slots/holidays", params={"shop_id": shop.shop_id, "year": 2026})
        assert response.status_code == 200

        data = response.json()
        assert data["region"] == "NW"
        assert {"date": "2026-05-01", "name": "Tag der Arbeit"} in data["holidays"]


class TestBookingsEndpoints:

    def test_create_and_get(self, client, shop):
        response = client.post("/bookings/", json=booking_payload(shop))
        assert response.status_code == 201

        created = response.json()
        assert created["status"] == "booked"
        assert created["staff_id"] == shop.ben
        assert created["duration_minutes"] == 30

        fetched = client.get(f"/bookings/{created['id']}")
        assert fetched.status_code == 200
        assert fetched.json()["time_slot"] == "10:00"

    def test_conflict(self, client, shop):
        assert client.post("/bookings/", json=booking_payload(shop)).status_code == 201

        response = client.post("/bookings/", json=booking_payload(shop))
        assert response.status_code == 409
        assert response.json()["detail"]["kind"] == "slot_no_longer_available"

    def test_any_staff(self, client, shop):
        first = client.post("/bookings/", json=booking_payload(shop, staff_id=None)).json()
        second = client.post("/bookings/", json=booking_payload(shop, staff_id=None)).json()
        assert (first["staff_id"], second["staff_id"]) == (shop.anna, shop.ben)

    def test_invalid_request(self, client, shop):
        response = client.post("/bookings/", json=booking_payload(shop, date="2026-04-01"))
        assert response.status_code == 400

    def test_cancel(self, client, shop):
        booking_id = client.post("/bookings/", json=booking_payload(shop)).json()["id"]

        first = client.post(f"/bookings/{booking_id}/cancel")
        second = client.post(f"/bookings/{booking_id}/cancel")

        assert first.status_code == second.status_code == 200
        assert first.json() == second.json()
        assert first.json()["status"] == "cancelled"

        # Slot is offered again
        day = slots_day(client, shop, "2026-05-05", staff_id=shop.ben).json()
        assert day["slots"][0]["time"] == "10:00"

    def test_cancel_unknown(self, client, shop):
        response = client.post("/bookings/9999/cancel")
        assert response.status_code == 404
        assert response.json()["detail"]["kind"] == "not_found"

    def test_get_unknown(self, client, shop):
        assert client.get("/bookings/9999").status_code == 404

    def test_delete_not_allowed(self, client, shop):
        assert client.delete("/bookings/1").status_code == 405


class TestRulesEndpoints:

    def test_closed_date_roundtrip(self, client, shop):
        response = client.post("/rules/closed-dates", json={
            "shop_id": shop.shop_id, "date": "2026-05-05", "reason": "Inventur",
        })
        assert response.status_code == 201
        closed_id = response.json()["id"]

        data = slots_day(client, shop, "2026-05-05").json()
        assert (data["status"], data["closed_reason"], data["closed_detail"]) == (
            "closed", "closed_date", "Inventur",
        )

        listed = client.get("/rules/closed-dates", params={"shop_id": shop.shop_id}).json()
        assert [c["date"] for c in listed] == ["2026-05-05"]

        assert client.delete(f"/rules/closed-dates/{closed_id}").status_code == 204
        assert slots_day(client, shop, "2026-05-05").json()["status"] == "open"

    def test_rule_for_unknown_shop(self, client, shop):
        writes = [
            ("/rules/closed-dates", {"shop_id": 9999, "date": "2026-05-05"}),
            ("/rules/open-sundays", {
                "shop_id": 9999, "date": "2026-05-10", "open_time": "12:00", "close_time": "16:00",
            }),
            ("/rules/open-holidays", {"shop_id": 9999, "date": "2026-05-14", "holiday_name": "Test"}),
        ]
        for url, payload in writes:
            response = client.post(url, json=payload)
            assert response.status_code == 400
            assert response.json()["detail"] == "Shop 9999 not found"

    def test_duplicate_closed_date(self, client, shop):
        payload = {"shop_id": shop.shop_id, "date": "2026-05-05"}
        assert client.post("/rules/closed-dates", json=payload).status_code == 201
        assert client.post("/rules/closed-dates", json=payload).status_code == 409

    def test_open_sunday_with_assignment(self, client, shop):
        assert client.post("/rules/open-sundays", json={
            "shop_id": shop.shop_id, "date": "2026-05-10", "open_time": "12:00", "close_time": "16:00",
        }).status_code == 201
        assert client.post("/rules/open-sundays/staff", json={
            "shop_id": shop.shop_id, "date": "2026-05-10", "staff_id": shop.ben,
            "start_time": "12:00", "end_time": "15:00",
        }).status_code == 201

        ben = slots_day(client, shop, "2026-05-10", staff_id=shop.ben).json()
        assert [s["time"] for s in ben["slots"]] == ["12:00", "12:30", "13:00", "13:30", "14:00", "14:30"]

        anna = slots_day(client, shop, "2026-05-10", staff_id=shop.anna).json()
        assert (anna["status"], anna["closed_reason"]) == ("closed", "not_assigned")

    def test_open_sunday_must_be_sunday(self, client, shop):
        response = client.post("/rules/open-sundays", json={
            "shop_id": shop.shop_id, "date": "2026-05-11", "open_time": "12:00", "close_time": "16:00",
        })
        assert response.status_code == 422

    def test_open_holiday(self, client, shop):
        assert slots_day(client, shop, "2026-05-14").json()["closed_reason"] == "holiday"

        assert client.post("/rules/open-holidays", json={
            "shop_id": shop.shop_id, "date": "2026-05-14", "holiday_name": "Christi Himmelfahrt",
        }).status_code == 201
        assert slots_day(client, shop, "2026-05-14").json()["status"] == "open"

    def test_free_day_exception(self, client, shop):
        # Anna works her free Wednesday and takes Thursday off instead
        response = client.post("/rules/free-day-exceptions", json={
            "staff_id": shop.anna, "date": "2026-05-06",
            "start_time": "10:00", "end_time": "14:00", "replacement_date": "2026-05-07",
        })
        assert response.status_code == 201

        wednesday = slots_day(client, shop, "2026-05-06", staff_id=shop.anna).json()
        assert wednesday["slots"][-1]["time"] == "13:30"

        thursday = slots_day(client, shop, "2026-05-07", staff_id=shop.anna).json()
        assert thursday["closed_reason"] == "replacement_day"

    def test_time_off_and_vacation_report(self, client, shop):
        response = client.post("/rules/time-off", json={
            "staff_id": shop.ben, "start_date": "2026-05-05", "end_date": "2026-05-06", "reason": "Urlaub",
        })
        assert response.status_code == 201

        day = slots_day(client, shop, "2026-05-05", staff_id=shop.ben).json()
        assert day["closed_reason"] == "time_off"

        report = client.get("/staff/vacation-report", params={"shop_id": shop.shop_id, "year": 2026}).json()
        ben = next(r for r in report if r["staff_id"] == shop.ben)
        assert (ben["used_days"], ben["remaining_days"]) == (2, 18)

    def test_partial_time_off(self, client, shop):
        assert client.post("/rules/time-off", json={
            "staff_id": shop.ben, "start_date": "2026-05-05", "end_date": "2026-05-05",
            "start_time": "10:00", "end_time": "12:00",
        }).status_code == 201

        day = slots_day(client, shop, "2026-05-05", staff_id=shop.ben).json()
        assert day["slots"][0]["time"] == "12:00"

    def test_time_off_for_unknown_staff(self, client, shop):
        response = client.post("/rules/time-off", json={
            "staff_id": 9999, "start_date": "2026-05-05", "end_date": "2026-05-05",
        })
        assert response.status_code == 400

    def test_delete_unknown_rule(self, client, shop):
        assert client.delete("/rules/open-holidays/9999").status_code == 404
