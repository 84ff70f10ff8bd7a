"""
Pytest Configuration and Shared Fixtures
========================================

This module provides shared fixtures for all IntakeGuardian tests.
Fixtures include database sessions, stores, a frozen clock, a test client,
and sample medication courses and appointments.
"""

import os
import sys
from datetime import datetime, date, timedelta
from typing import Generator, Dict, Any, List

# Keep the app off the real database file and the background loops off
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("REMINDER_POLLER_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import StoreKeys
from database import Base
from actions.reminder_engine import ReminderSession
from api.deps import get_db
from services.store_service import InMemoryKeyValueStore, SQLKeyValueStore
from tools.clock import FixedClock
from tools.notification_service import InAppNotificationSink
from tools.scheduler import MedicationCourse
from tools.appointment_scheduler import Appointment
from app import app


# A fixed Monday morning used across the suite
NOW = datetime(2024, 6, 10, 7, 50, 0)
TODAY = NOW.date()


# ==================== DATABASE FIXTURES ====================

@pytest.fixture(scope="function")
def test_engine():
    """Create a test database engine with in-memory SQLite"""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    # Create all tables
    import models  # noqa: F401
    Base.metadata.create_all(bind=engine)

    yield engine

    # Cleanup
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(test_engine) -> Generator[Session, None, None]:
    """Create a test database session"""
    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=test_engine
    )

    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def sql_store(db_session) -> SQLKeyValueStore:
    """Database-backed key-value store"""
    return SQLKeyValueStore(db_session)


@pytest.fixture
def memory_store() -> InMemoryKeyValueStore:
    """Empty in-memory key-value store"""
    return InMemoryKeyValueStore()


# ==================== ENGINE FIXTURES ====================

@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def fixed_clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def sink() -> InAppNotificationSink:
    """Notification sink with permission granted"""
    return InAppNotificationSink(permission=True)


@pytest.fixture
def denied_sink() -> InAppNotificationSink:
    return InAppNotificationSink(permission=False)


@pytest.fixture
def reminder_session() -> ReminderSession:
    return ReminderSession()


# ==================== SAMPLE DATA FIXTURES ====================

def make_course(
    course_id: str = "med-1",
    name: str = "Metformin",
    start: date = TODAY,
    end: date = TODAY,
    times: List[str] = None
) -> MedicationCourse:
    return MedicationCourse(
        id=course_id,
        name=name,
        start_date=start.isoformat(),
        end_date=end.isoformat(),
        intake_times=times if times is not None else ["08:00"],
    )


@pytest.fixture
def single_course() -> MedicationCourse:
    """One course active today only, taken at 08:00"""
    return make_course()


@pytest.fixture
def sample_courses() -> List[MedicationCourse]:
    """A small realistic regimen"""
    return [
        make_course("med-1", "Metformin", TODAY - timedelta(days=30), TODAY + timedelta(days=30), ["08:00", "20:00"]),
        make_course("med-2", "Lisinopril", TODAY - timedelta(days=3), TODAY + timedelta(days=10), ["07:45"]),
        make_course("med-3", "Amoxicillin", TODAY - timedelta(days=10), TODAY - timedelta(days=1), ["12:00"]),
    ]


@pytest.fixture
def sample_course_records(sample_courses) -> List[Dict[str, Any]]:
    """Stored (camelCase) form of sample_courses"""
    return [c.to_dict() for c in sample_courses]


def make_appointment(appointment_id: str, doctor: str, when: Any) -> Appointment:
    date_time = when.isoformat(timespec="minutes") if isinstance(when, datetime) else when
    return Appointment(id=appointment_id, doctor_name=doctor, date_time=date_time)


@pytest.fixture
def sample_appointments() -> List[Appointment]:
    return [
        make_appointment("appt-1", "Dr. Martin", NOW + timedelta(minutes=45)),
        make_appointment("appt-2", "Dr. Diallo", NOW + timedelta(minutes=75)),
        make_appointment("appt-3", "Dr. Ouedraogo", NOW - timedelta(minutes=5)),
        make_appointment("appt-4", "Dr. Kaboré", NOW - timedelta(days=3)),
        make_appointment("appt-5", "Dr. Nobody", "not a date"),
    ]


@pytest.fixture
def seeded_memory_store(sample_course_records, sample_appointments) -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore({
        StoreKeys.MEDICATIONS: sample_course_records,
        StoreKeys.MEDICATION_LOG: {},
        StoreKeys.APPOINTMENTS: [a.to_dict() for a in sample_appointments],
    })


# ==================== CLIENT FIXTURES ====================

@pytest.fixture(scope="function")
def client(db_session: Session, fixed_clock, sink) -> Generator[TestClient, None, None]:
    """FastAPI test client with database, clock and session overrides"""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    previous_state = (app.state.clock, app.state.reminder_session, app.state.notification_sink)
    app.state.clock = fixed_clock
    app.state.reminder_session = ReminderSession()
    app.state.notification_sink = sink
    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    app.state.clock, app.state.reminder_session, app.state.notification_sink = previous_state


@pytest.fixture
def seeded_client(client, sql_store, sample_course_records, sample_appointments) -> TestClient:
    """Client whose store already holds the sample courses and appointments"""
    sql_store.set(StoreKeys.MEDICATIONS, sample_course_records)
    sql_store.set(StoreKeys.APPOINTMENTS, [a.to_dict() for a in sample_appointments])
    return client
