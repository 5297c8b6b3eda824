import os

# must be set before stockbook.core.db creates the engine
os.environ["DATABASE_URL"] = "sqlite:///:memory:"

import pytest
from fastapi.testclient import TestClient

from stockbook.core.db import Base, SessionLocal, engine
from stockbook.core.security import get_current_user
from stockbook.main import app
from stockbook.models import AppUser, PurchaseOrder
from stockbook.scripts.seed import seed_reference_data
from stockbook.services import booking_service


def imei(tac: str, n: int) -> str:
    return f"{tac}{n:07d}"


APPLE_TAC = "35328611"      # Apple iPhone 13, configured
PIXEL_TAC = "86753009"      # Google Pixel 6, no configuration
UNKNOWN_TAC = "49015420"    # not in tac_codes


@pytest.fixture(autouse=True)
def schema():
    Base.metadata.create_all(bind=engine)
    booking_service._BOOKINGS.clear()
    yield
    booking_service._BOOKINGS.clear()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    s = SessionLocal()
    seed_reference_data(s)
    s.commit()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def user(db):
    u = AppUser(username="intake1", hashed_password="not-a-real-hash", role="intake", is_active=True)
    db.add(u)
    db.commit()
    db.refresh(u)
    return u


@pytest.fixture
def client(db, user):
    app.dependency_overrides[get_current_user] = lambda: user
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def pending_po(db):
    return db.query(PurchaseOrder).filter(PurchaseOrder.po_number == "PO-1001").one()
