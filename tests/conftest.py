"""Shared test fixtures."""
from datetime import datetime, timedelta

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

# Import all models so SQLModel.metadata knows about them
from smokefree.models.storage import StoredValue  # noqa: F401
from smokefree.db.storage import MemoryStorage
from smokefree.models.profile import UserProfile
from smokefree.tracker.events import EventBus
from smokefree.tracker.store import TrackerStore

NOW = datetime(2025, 3, 15, 12, 0)


class FakeClock:
    """Settable clock; call it like datetime.now."""

    def __init__(self, now: datetime):
        self.current = now

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite engine. Tables recreated fresh for each test."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="clock")
def clock_fixture() -> FakeClock:
    return FakeClock(NOW)


@pytest.fixture(name="storage")
def storage_fixture() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture(name="events")
def events_fixture() -> EventBus:
    return EventBus()


@pytest.fixture(name="store")
def store_fixture(storage, events, clock) -> TrackerStore:
    """A loaded store over empty in-memory storage, with a fixed clock."""
    store = TrackerStore(storage, events=events, clock=clock)
    store.load()
    return store


@pytest.fixture(name="make_profile")
def make_profile_fixture():
    """Factory: a profile that quit `days` days (plus `hours` hours) before NOW."""

    def _make(days: int = 10, hours: int = 0, **overrides) -> UserProfile:
        fields = dict(
            name="Deniz",
            quit_date=NOW - timedelta(days=days, hours=hours),
            cigarettes_per_day=20,
            price_per_pack=60.0,
            cigarettes_per_pack=20,
            motivations=["health", "family"],
        )
        fields.update(overrides)
        return UserProfile(**fields)

    return _make
