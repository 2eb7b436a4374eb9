"""Shared fixtures: temporary SQLite database seeded with one demo shop."""

import os

# Settings are read at import time; keep tests off the real database and Redis
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["REDIS_URL"] = ""

from datetime import datetime
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from barbershop.database import get_db, init_db, make_engine
from barbershop.models.tables import (
    OpeningHours,
    Services,
    Shops,
    Staff,
    TimeSlots,
)
from barbershop.services.booking_facade import BookingFacade
from barbershop.services.slots import BookingConfig

# Monday, 08:00 shop time
NOW = datetime(2026, 5, 4, 8, 0)


@pytest.fixture
def engine(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'test.db'}")
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


def seed_shop(db, region: str = "NW") -> SimpleNamespace:
    """
    Demo shop:
    - Sunday closed, Mon-Fri 10:00-19:00, Saturday 09:00-14:00
    - 30 min slot catalog 09:00 ... 18:30
    - Anna (free day Wednesday), Ben (no free day)
    - Haircut 30 min, Cut & Beard 60 min, inactive Shave
    """
    shop = Shops(name="Demo Barbers", slug=f"demo-{region.lower()}", region=region)
    db.add(shop)
    db.flush()

    db.add(OpeningHours(shop_id=shop.id, day_of_week=0, is_closed=1))
    for dow in range(1, 6):
        db.add(OpeningHours(shop_id=shop.id, day_of_week=dow, is_closed=0,
                            open_time="10:00", close_time="19:00"))
    db.add(OpeningHours(shop_id=shop.id, day_of_week=6, is_closed=0,
                        open_time="09:00", close_time="14:00"))

    for i, minutes in enumerate(range(9 * 60, 19 * 60, 30)):
        db.add(TimeSlots(shop_id=shop.id, time=f"{minutes // 60:02d}:{minutes % 60:02d}",
                         active=1, sort_order=i))

    anna = Staff(shop_id=shop.id, name="Anna", free_day=3, vacation_days_per_year=25, sort_order=0)
    ben = Staff(shop_id=shop.id, name="Ben", vacation_days_per_year=20, sort_order=1)
    haircut = Services(shop_id=shop.id, name="Haircut", duration_minutes=30, price_cents=2500)
    cut_beard = Services(shop_id=shop.id, name="Cut & Beard", duration_minutes=60, price_cents=4000)
    shave = Services(shop_id=shop.id, name="Shave", duration_minutes=30, is_active=0)
    db.add_all([anna, ben, haircut, cut_beard, shave])
    db.commit()

    return SimpleNamespace(
        shop_id=shop.id,
        anna=anna.id,
        ben=ben.id,
        haircut=haircut.id,
        cut_beard=cut_beard.id,
        shave=shave.id,
    )


@pytest.fixture
def shop(db):
    return seed_shop(db)


@pytest.fixture
def config():
    return BookingConfig()


@pytest.fixture
def facade(db, config):
    return BookingFacade(db, config=config, now=NOW)


@pytest.fixture
def client(session_factory, shop):
    from barbershop.main import app
    from barbershop.routers.deps import get_facade

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    def override_get_facade():
        session = session_factory()
        try:
            yield BookingFacade(session, config=BookingConfig(), now=NOW)
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_facade] = override_get_facade
    yield TestClient(app)
    app.dependency_overrides.clear()
