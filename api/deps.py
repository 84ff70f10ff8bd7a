"""
API Dependencies
Common dependencies for FastAPI endpoints
"""

from typing import Generator
from datetime import datetime
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from database import SessionLocal
from actions.reminder_engine import ReminderSession
from tools.clock import Clock
from tools.notification_service import InAppNotificationSink
from services.store_service import KeyValueStore, SQLKeyValueStore


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency
    Yields a SQLAlchemy session and ensures cleanup
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_store(db: Session = Depends(get_db)) -> KeyValueStore:
    """Key-value store bound to the request's database session"""
    return SQLKeyValueStore(db)


def get_clock(request: Request) -> Clock:
    return request.app.state.clock


def get_now(clock: Clock = Depends(get_clock)) -> datetime:
    """Current time, read once per request"""
    return clock.now()


def get_reminder_session(request: Request) -> ReminderSession:
    """The process-wide reminder session owned by the app instance"""
    return request.app.state.reminder_session


def get_notification_sink(request: Request) -> InAppNotificationSink:
    return request.app.state.notification_sink


class ServiceDependency:
    """
    Dependency injection for services
    """

    @staticmethod
    def get_medication_service():
        from services.medication_service import medication_service
        return medication_service

    @staticmethod
    def get_appointment_service():
        from services.appointment_service import appointment_service
        return appointment_service

    @staticmethod
    def get_adherence_service():
        from services.adherence_service import adherence_service
        return adherence_service


# Service dependency instances
services = ServiceDependency()
