"""
Medication Schemas
Pydantic models for medication course API requests and responses
"""

from typing import Optional, List, Dict
from datetime import datetime, date
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator

from tools.time_utils import INTAKE_TIME_PATTERN


def _check_intake_times(values: List[str]) -> List[str]:
    for value in values:
        if not INTAKE_TIME_PATTERN.fullmatch(value):
            raise ValueError(f"Invalid intake time {value!r}, expected HH:MM")
    return values


# ==================== REQUEST SCHEMAS ====================

class MedicationCreate(BaseModel):
    """Schema for creating a medication course"""
    name: str = Field(..., min_length=1, max_length=255)
    start_date: date
    end_date: date
    intake_times: List[str] = Field(..., min_length=1)
    notes: Optional[str] = None
    consultation_id: Optional[str] = None
    patient_full_name: Optional[str] = Field(None, max_length=255)

    @field_validator("intake_times")
    @classmethod
    def validate_intake_times(cls, v: List[str]) -> List[str]:
        return _check_intake_times(v)

    @model_validator(mode="after")
    def validate_date_range(self):
        if self.start_date > self.end_date:
            raise ValueError("end_date must be on or after start_date")
        return self


class MedicationUpdate(BaseModel):
    """Schema for updating a medication course"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    intake_times: Optional[List[str]] = Field(None, min_length=1)
    notes: Optional[str] = None
    consultation_id: Optional[str] = None
    patient_full_name: Optional[str] = Field(None, max_length=255)

    @field_validator("intake_times")
    @classmethod
    def validate_intake_times(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return _check_intake_times(v) if v is not None else v

    @model_validator(mode="after")
    def validate_required_not_null(self):
        for field_name in ("name", "start_date", "end_date", "intake_times"):
            if field_name in self.model_fields_set and getattr(self, field_name) is None:
                raise ValueError(f"{field_name} cannot be null")
        return self

    @model_validator(mode="after")
    def validate_date_range(self):
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("end_date must be on or after start_date")
        return self


# ==================== RESPONSE SCHEMAS ====================

class MedicationResponse(BaseModel):
    """Schema for medication course response"""
    id: str
    name: str
    # Stored values are returned as-is, malformed or not
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    intake_times: List[str] = []
    notes: Optional[str] = None
    consultation_id: Optional[str] = None
    patient_full_name: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class MedicationList(BaseModel):
    """List of medication courses"""
    medications: List[MedicationResponse]
    total: int
    active_today: int


class IntakeEventResponse(BaseModel):
    """One of today's intake events"""
    medication_id: str
    medication_name: str
    intake_time: str
    scheduled_datetime: datetime
    minutes_until: int
    urgency_status: str
    logged_outcome: Optional[str] = None
    actionable: bool = False


class TodaysIntakes(BaseModel):
    """Today's intake schedule"""
    date: date
    generated_at: datetime
    intakes: List[IntakeEventResponse]
    time_slots: Dict[str, List[str]]


class NextIntake(BaseModel):
    """Next intake later today, if any"""
    intake: Optional[IntakeEventResponse] = None
