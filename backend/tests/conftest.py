import os

# Keep the module-level engine away from the real database file
os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from slotswap.database import build_engine, get_db
from slotswap.main import app
from slotswap.models import Base, SlotStatus, Slots, Users
from slotswap.services.events import get_event_sink
from slotswap.services.slots import SlotStore


class RecordingSink:
    """In-memory notification sink."""

    def __init__(self):
        self.events = []

    def publish(self, event_type, payload):
        self.events.append((event_type, payload))

    def types(self):
        return [event_type for event_type, _ in self.events]


def at(hour, minute=0, day=2):
    return datetime(2026, 11, day, hour, minute)


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'slotswap.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def make_user(db):
    def _make(name):
        user = Users(name=name, email=f"{name.lower()}@example.com")
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture
def make_slot(db):
    def _make(owner, title, start, end, status=SlotStatus.BUSY):
        slot = SlotStore(db).create_slot(owner.id, title, start, end)
        slot.status = status
        db.commit()
        return slot

    return _make


@pytest.fixture
def client(session_factory, sink):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_event_sink] = lambda: sink
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def fresh(session_factory, model, id):
    """Read a row through a brand-new session."""
    session = session_factory()
    try:
        return session.get(model, id)
    finally:
        session.close()


def slot_state(session_factory, slot_id):
    slot = fresh(session_factory, Slots, slot_id)
    return slot.owner_id, slot.status
