"""
Database Models
SQLAlchemy ORM models for IntakeGuardian
"""

from sqlalchemy import Column, String, DateTime, JSON
from datetime import datetime
from enum import Enum as PyEnum

from database import Base


# ==================== ENUMS ====================

class IntakeOutcome(str, PyEnum):
    """Caregiver-confirmed outcome of a scheduled intake"""
    TAKEN = "taken"
    SKIPPED = "skipped"


class UrgencyStatus(str, PyEnum):
    """Temporal urgency of an intake event relative to now"""
    DUE_NOW = "due_now"
    UPCOMING_SOON = "upcoming_soon"
    UPCOMING_LATER = "upcoming_later"
    PAST_TODAY = "past_today"


# ==================== MODELS ====================

class StoreEntry(Base):
    """
    One key of the local key-value store.
    Values are whole JSON documents (e.g. the full medication list).
    """
    __tablename__ = "store_entries"

    key = Column(String(100), primary_key=True)
    value = Column(JSON)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<StoreEntry(key='{self.key}')>"
