import os

# Keep the app's own engine off the filesystem during tests
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from datetime import date, datetime, timedelta  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402

from cricnets.config import BookingDefaults  # noqa: E402
from cricnets.database import get_session  # noqa: E402
from cricnets.main import app  # noqa: E402
from cricnets.models.booking import Booking, BookingStatus  # noqa: E402
from cricnets.services.booking_service import BookingService  # noqa: E402
from cricnets.services.resource_lock import ResourceLockManager  # noqa: E402

TEST_DATABASE_URL = "sqlite:///:memory:"

# Fixed "now" for service-level tests: 08:00 the day before DAY
NOW = datetime(2031, 3, 10, 8, 0)
DAY = date(2031, 3, 11)


def at(hour: int, minute: int = 0, day: date = DAY) -> datetime:
    return datetime(day.year, day.month, day.day, hour, minute)


@pytest.fixture(name="engine")
def engine_fixture():
    """Fresh in-memory database per test

    StaticPool keeps a single connection so every session sees the same :memory: DB.
    """
    # Import all models to ensure they're registered BEFORE create_all
    from cricnets.models.booking import Booking  # noqa: F401
    from cricnets.models.booking_lock import BookingLock  # noqa: F401
    from cricnets.models.system_config import SystemConfig  # noqa: F401

    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture(name="session")
def session_fixture(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture(name="lock_manager")
def lock_manager_fixture():
    return ResourceLockManager(timeout_seconds=2)


@pytest.fixture(name="service")
def service_fixture(session: Session, lock_manager: ResourceLockManager):
    """BookingService with default config, no overrides stored yet, and a fixed clock"""
    return BookingService(session, defaults=BookingDefaults(), lock_manager=lock_manager, clock=lambda: NOW)


@pytest.fixture(name="add_booking")
def add_booking_fixture(session: Session):
    """Insert a booking row directly, bypassing the engine (for arranging existing state)"""

    def _add(start: datetime, minutes: int = 30, **fields) -> Booking:
        fields.setdefault("ball_type", "LEATHER")
        fields.setdefault("wicket_type", "INDOOR_ASTRO_TURF")
        fields.setdefault("status", BookingStatus.PENDING)
        booking = Booking(start_time=start, end_time=start + timedelta(minutes=minutes), **fields)
        session.add(booking)
        session.commit()
        session.refresh(booking)
        return booking

    return _add


@pytest.fixture(name="client")
def client_fixture(session: Session):
    """Provide a test client bound to the per-test session

    Override MUST be set BEFORE TestClient() so the app never uses its own engine.
    """

    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()
