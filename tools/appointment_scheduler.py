"""
Appointment Scheduler Tool
Parses stored appointments and splits them into upcoming and past
"""

import logging
from typing import Dict, List, Optional, Any, Tuple
from dataclasses import dataclass
from datetime import datetime

from tools.scheduler import text_or_none
from tools.time_utils import parse_iso_datetime


logger = logging.getLogger(__name__)


@dataclass
class Appointment:
    """A medical appointment"""
    id: str
    doctor_name: str
    date_time: Optional[str]
    specialty: Optional[str] = None
    contact_phone: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[str] = None
    consultation_id: Optional[str] = None
    patient_full_name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional["Appointment"]:
        if not isinstance(data, dict) or data.get("id") in (None, ""):
            return None
        record_id = str(data["id"])
        return cls(
            id=record_id,
            doctor_name=str(data.get("doctorName") or ""),
            date_time=text_or_none(data.get("dateTime"), "dateTime", record_id),
            specialty=text_or_none(data.get("specialty"), "specialty", record_id),
            contact_phone=text_or_none(data.get("contactPhone"), "contactPhone", record_id),
            location=text_or_none(data.get("location"), "location", record_id),
            notes=text_or_none(data.get("notes"), "notes", record_id),
            consultation_id=text_or_none(data.get("consultationId"), "consultationId", record_id),
            patient_full_name=text_or_none(data.get("patientFullName"), "patientFullName", record_id),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "doctorName": self.doctor_name,
            "dateTime": self.date_time,
            "specialty": self.specialty,
            "contactPhone": self.contact_phone,
            "location": self.location,
            "notes": self.notes,
            "consultationId": self.consultation_id,
            "patientFullName": self.patient_full_name,
        }

    @property
    def scheduled_at(self) -> Optional[datetime]:
        """Parsed dateTime, None when missing or malformed"""
        return parse_iso_datetime(self.date_time)


def load_appointments(raw: Any) -> List[Appointment]:
    """Deserialize the stored appointment list, dropping malformed records"""
    if not isinstance(raw, list):
        if raw is not None:
            logger.warning(f"Ignoring appointment store value of type {type(raw).__name__}")
        return []

    appointments = []
    for record in raw:
        appointment = Appointment.from_dict(record)
        if appointment is None:
            logger.warning(f"Dropping malformed appointment record: {record!r}")
            continue
        appointments.append(appointment)
    return appointments


def partition_appointments(
    appointments: List[Appointment],
    now: datetime
) -> Tuple[List[Appointment], List[Appointment]]:
    """
    Split into (upcoming, past).

    Upcoming: strictly after now, soonest first.
    Past: at or before now, most recent first.
    Appointments without a parsable dateTime appear in neither list.
    """
    upcoming: List[Tuple[datetime, Appointment]] = []
    past: List[Tuple[datetime, Appointment]] = []

    for appointment in appointments:
        when = appointment.scheduled_at
        if when is None:
            continue
        if when > now:
            upcoming.append((when, appointment))
        else:
            past.append((when, appointment))

    upcoming.sort(key=lambda pair: pair[0])
    past.sort(key=lambda pair: pair[0], reverse=True)
    return [a for _, a in upcoming], [a for _, a in past]


def next_appointment(
    appointments: List[Appointment],
    now: datetime
) -> Optional[Appointment]:
    upcoming, _ = partition_appointments(appointments, now)
    return upcoming[0] if upcoming else None
