"""
Intake Schedule Builder
Expands medication courses into today's intake events and classifies urgency
"""

import logging
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field
from datetime import datetime, date, time

from config import schedule_config
from models import UrgencyStatus
from tools.time_utils import (
    parse_iso_date,
    parse_intake_time,
    minutes_until,
    is_within_dates,
)


logger = logging.getLogger(__name__)


def text_or_none(value: Any, field_name: str, record_id: str) -> Optional[str]:
    """Stored text field as str, None (with a warning) for any other type"""
    if value is None or isinstance(value, str):
        return value
    logger.warning(f"Ignoring non-text {field_name} {value!r} on record {record_id}")
    return None


@dataclass
class MedicationCourse:
    """A medication prescription with a date range and daily intake times"""
    id: str
    name: str
    start_date: Optional[str]
    end_date: Optional[str]
    intake_times: List[str] = field(default_factory=list)
    notes: Optional[str] = None
    consultation_id: Optional[str] = None
    patient_full_name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional["MedicationCourse"]:
        """Build from a stored record; None when the record has no id"""
        if not isinstance(data, dict) or data.get("id") in (None, ""):
            return None

        record_id = str(data["id"])
        intake_times = data.get("intakeTimes")
        if not isinstance(intake_times, list):
            intake_times = []
        text_times = [t for t in intake_times if isinstance(t, str)]
        if len(text_times) != len(intake_times):
            logger.warning(f"Dropping non-text intake times on medication {record_id}")

        return cls(
            id=record_id,
            name=str(data.get("name") or ""),
            start_date=text_or_none(data.get("startDate"), "startDate", record_id),
            end_date=text_or_none(data.get("endDate"), "endDate", record_id),
            intake_times=text_times,
            notes=text_or_none(data.get("notes"), "notes", record_id),
            consultation_id=text_or_none(data.get("consultationId"), "consultationId", record_id),
            patient_full_name=text_or_none(data.get("patientFullName"), "patientFullName", record_id),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "startDate": self.start_date,
            "endDate": self.end_date,
            "intakeTimes": list(self.intake_times),
            "notes": self.notes,
            "consultationId": self.consultation_id,
            "patientFullName": self.patient_full_name,
        }

    def is_active_on(self, day: date) -> bool:
        """Active iff start <= day <= end; unparsable dates are never active"""
        return is_within_dates(day, parse_iso_date(self.start_date), parse_iso_date(self.end_date))

    def valid_intake_times(self) -> List[tuple]:
        """
        (raw string, parsed time) pairs in declaration order.
        Malformed entries are dropped and duplicates collapsed.
        """
        seen = set()
        result = []
        for raw in self.intake_times:
            parsed = parse_intake_time(raw)
            if parsed is None or raw in seen:
                continue
            seen.add(raw)
            result.append((raw, parsed))
        return result


@dataclass
class IntakeEvent:
    """One scheduled occurrence of one medication at one time today"""
    medication_id: str
    medication_name: str
    intake_time: str
    scheduled_datetime: datetime
    minutes_until: int
    urgency_status: UrgencyStatus

    @property
    def intake_key(self) -> str:
        """Session key used by the notification dispatcher"""
        return make_intake_key(self.medication_id, self.intake_time)

    @property
    def is_actionable(self) -> bool:
        """Whether a caregiver may confirm this event (before any log entry)"""
        return self.urgency_status in (UrgencyStatus.DUE_NOW, UrgencyStatus.PAST_TODAY)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "medication_id": self.medication_id,
            "medication_name": self.medication_name,
            "intake_time": self.intake_time,
            "scheduled_datetime": self.scheduled_datetime.isoformat(),
            "minutes_until": self.minutes_until,
            "urgency_status": self.urgency_status.value,
        }


def make_intake_key(medication_id: str, intake_time: str) -> str:
    return f"{medication_id}-{intake_time}"


def load_courses(raw: Any) -> List[MedicationCourse]:
    """Deserialize the stored medication list, dropping malformed records"""
    if not isinstance(raw, list):
        if raw is not None:
            logger.warning(f"Ignoring medication store value of type {type(raw).__name__}")
        return []

    courses = []
    for record in raw:
        course = MedicationCourse.from_dict(record)
        if course is None:
            logger.warning(f"Dropping malformed medication record: {record!r}")
            continue
        courses.append(course)
    return courses


def classify_urgency(minutes: int) -> UrgencyStatus:
    """
    Classify by signed minutes until the scheduled time.

    due_now:        -10 <= m <= 5
    upcoming_soon:    5 <  m <= 30
    upcoming_later:  30 <  m
    past_today:           m < -10
    """
    if -schedule_config.DUE_NOW_MAX_MINUTES_AFTER <= minutes <= schedule_config.DUE_NOW_MAX_MINUTES_BEFORE:
        return UrgencyStatus.DUE_NOW
    if schedule_config.DUE_NOW_MAX_MINUTES_BEFORE < minutes <= schedule_config.UPCOMING_SOON_MAX_MINUTES:
        return UrgencyStatus.UPCOMING_SOON
    if minutes > schedule_config.UPCOMING_SOON_MAX_MINUTES:
        return UrgencyStatus.UPCOMING_LATER
    return UrgencyStatus.PAST_TODAY


def active_courses_on(courses: List[MedicationCourse], day: date) -> List[MedicationCourse]:
    return [c for c in courses if c.is_active_on(day)]


def compute_todays_intake_events(
    courses: List[MedicationCourse],
    now: datetime
) -> List[IntakeEvent]:
    """
    Build today's intake events, ordered by scheduled time.

    Pure function of its inputs: safe to call on every clock tick.
    Ties keep course/time declaration order (sorted() is stable).
    """
    today = now.date()
    events: List[IntakeEvent] = []

    for course in active_courses_on(courses, today):
        for raw_time, intake_time in course.valid_intake_times():
            scheduled = datetime.combine(today, intake_time)
            minutes = minutes_until(scheduled, now)
            events.append(IntakeEvent(
                medication_id=course.id,
                medication_name=course.name,
                intake_time=raw_time,
                scheduled_datetime=scheduled,
                minutes_until=minutes,
                urgency_status=classify_urgency(minutes),
            ))

    return sorted(events, key=lambda e: e.scheduled_datetime)


def next_intake_today(
    courses: List[MedicationCourse],
    now: datetime
) -> Optional[IntakeEvent]:
    """Earliest intake later today that is still in the future"""
    for event in compute_todays_intake_events(courses, now):
        if event.scheduled_datetime > now:
            return event
    return None


def group_by_time(events: List[IntakeEvent]) -> Dict[str, List[str]]:
    """"08:00" -> ["Metformin", "Lisinopril"] view of a day's events"""
    slots: Dict[str, List[str]] = {}
    for event in events:
        slots.setdefault(event.intake_time, []).append(event.medication_name)
    return slots
