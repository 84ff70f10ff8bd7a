"""
Adherence Schemas
Pydantic models for intake logging and adherence API requests and responses
"""

from typing import Optional, List
from datetime import datetime, date
from pydantic import BaseModel, Field
from enum import Enum


class IntakeOutcomeEnum(str, Enum):
    """Intake outcome values"""
    TAKEN = "taken"
    SKIPPED = "skipped"


# ==================== REQUEST SCHEMAS ====================

class IntakeLogCreate(BaseModel):
    """Schema for confirming one of today's intakes"""
    medication_id: str = Field(..., min_length=1)
    intake_time: str = Field(..., min_length=1, max_length=5)
    outcome: IntakeOutcomeEnum


# ==================== RESPONSE SCHEMAS ====================

class IntakeLogResponse(BaseModel):
    """Schema for a recorded intake outcome"""
    key: str
    date: date
    medication_id: str
    medication_name: str
    intake_time: str
    outcome: IntakeOutcomeEnum
    logged_at: datetime


class IntakeLogEntry(BaseModel):
    """Raw intake log entry"""
    key: str
    outcome: IntakeOutcomeEnum


class IntakeLogList(BaseModel):
    """Intake log, optionally filtered by day"""
    entries: List[IntakeLogEntry]
    total: int


class AdherenceSummary(BaseModel):
    """Rolling adherence; percentage is null when nothing was scheduled"""
    percentage: Optional[int] = Field(None, ge=0, le=100)
    taken_count: int
    scheduled_count: int
    window_days: int
    window_start: date
    window_end: date
    has_data: bool
