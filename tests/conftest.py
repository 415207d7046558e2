"""
Shared fixtures for the HydroScan test suite.

Every test gets its own in-memory SQLite database; Celery runs eagerly so
no broker is needed.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("CELERY_TASK_ALWAYS_EAGER", "1")

from datetime import datetime

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from hydroscan.api import api_router
from hydroscan.data.database import get_db, init_db
from hydroscan.domain.session import SessionContext
from hydroscan.services.cart_service import CartService
from hydroscan.services.daily_aggregator import DailyAggregator
from hydroscan.services.hydrocoin_ledger import HydroCoinLedger
from hydroscan.services.inventory_service import InventoryService
from hydroscan.services.order_service import OrderService
from hydroscan.services.pricing_catalog import PricingCatalog

# Monday; the next day is an allowed Tuesday, Wednesday and Sunday are blocked
NOW = datetime(2024, 6, 3, 10, 30)
USER_ID = "user-1"


class RecordingNotifier:
    def __init__(self):
        self.sent = []

    def send_order_notification(self, user_id, order_number, status):
        self.sent.append((user_id, order_number, status))


class FixedClock:
    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def ctx():
    return SessionContext(user_id=USER_ID)


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def catalog():
    return PricingCatalog()


@pytest.fixture
def ledger(db):
    return HydroCoinLedger(db)


@pytest.fixture
def inventory(db):
    return InventoryService(db)


@pytest.fixture
def cart(db, catalog):
    return CartService(db, catalog=catalog)


@pytest.fixture
def orders(db, catalog, ledger, inventory, notifier, clock):
    return OrderService(
        db,
        catalog=catalog,
        ledger=ledger,
        inventory=inventory,
        notifier=notifier,
        clock=clock,
    )


@pytest.fixture
def aggregator(db, clock):
    return DailyAggregator(db, clock=clock)


@pytest.fixture
def client(session_factory):
    app = FastAPI()
    app.include_router(api_router)

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c


@pytest.fixture
def auth_headers():
    return {"X-User-Id": USER_ID}
