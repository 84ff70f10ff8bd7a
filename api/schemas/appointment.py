"""
Appointment Schemas
Pydantic models for appointment API requests and responses
"""

from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict, model_validator


# ==================== REQUEST SCHEMAS ====================

class AppointmentCreate(BaseModel):
    """Schema for creating an appointment"""
    doctor_name: str = Field(..., min_length=1, max_length=255)
    date_time: datetime
    specialty: Optional[str] = Field(None, max_length=100)
    contact_phone: Optional[str] = Field(None, max_length=30)
    location: Optional[str] = None
    notes: Optional[str] = None
    consultation_id: Optional[str] = None
    patient_full_name: Optional[str] = Field(None, max_length=255)


class AppointmentUpdate(BaseModel):
    """Schema for updating an appointment"""
    doctor_name: Optional[str] = Field(None, min_length=1, max_length=255)
    date_time: Optional[datetime] = None
    specialty: Optional[str] = Field(None, max_length=100)
    contact_phone: Optional[str] = Field(None, max_length=30)
    location: Optional[str] = None
    notes: Optional[str] = None
    consultation_id: Optional[str] = None
    patient_full_name: Optional[str] = Field(None, max_length=255)

    @model_validator(mode="after")
    def validate_required_not_null(self):
        for field_name in ("doctor_name", "date_time"):
            if field_name in self.model_fields_set and getattr(self, field_name) is None:
                raise ValueError(f"{field_name} cannot be null")
        return self


# ==================== RESPONSE SCHEMAS ====================

class AppointmentResponse(BaseModel):
    """Schema for appointment response"""
    id: str
    doctor_name: str
    date_time: Optional[str] = None
    specialty: Optional[str] = None
    contact_phone: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[str] = None
    consultation_id: Optional[str] = None
    patient_full_name: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class AppointmentList(BaseModel):
    appointments: List[AppointmentResponse]
    total: int


class AppointmentPartition(BaseModel):
    """Upcoming (soonest first) and past (most recent first) appointments"""
    upcoming: List[AppointmentResponse]
    past: List[AppointmentResponse]
    generated_at: datetime


class NextAppointment(BaseModel):
    appointment: Optional[AppointmentResponse] = None
    minutes_until: Optional[int] = None
