"""
Reminder Engine
Decides which intake events and appointments to notify about, at most once per session
"""

import logging
from typing import List, Dict, Any, Optional, Set, AbstractSet
from datetime import datetime, date

from config import schedule_config
from models import UrgencyStatus
from tools.scheduler import (
    IntakeEvent,
    MedicationCourse,
    compute_todays_intake_events,
)
from tools.appointment_scheduler import Appointment, partition_appointments
from tools.notification_service import NotificationSink, NotificationType
from tools.time_utils import minutes_until
from services.adherence_service import make_log_key


logger = logging.getLogger(__name__)


NOTIFIABLE_STATUSES = (UrgencyStatus.DUE_NOW, UrgencyStatus.UPCOMING_SOON)

# Message templates
_TEMPLATES = {
    UrgencyStatus.DUE_NOW: "It's time to take your {medication_name}.",
    UrgencyStatus.UPCOMING_SOON: "{medication_name} due in {minutes} minutes.",
    NotificationType.APPOINTMENT_REMINDER: "Your appointment with {doctor_name} is scheduled at {time}.",
}


def format_intake_message(event: IntakeEvent) -> str:
    return _TEMPLATES[event.urgency_status].format(
        medication_name=event.medication_name,
        minutes=event.minutes_until
    )


def format_appointment_message(appointment: Appointment, when: datetime) -> str:
    return _TEMPLATES[NotificationType.APPOINTMENT_REMINDER].format(
        doctor_name=appointment.doctor_name,
        time=when.strftime("%H:%M")
    )


def _safe_notify(sink: NotificationSink, title: str, body: str, tag: str,
                 notification_type: NotificationType) -> bool:
    """Deliver through the sink; a failing sink never breaks the tick"""
    try:
        sink.notify(title, body, tag, notification_type)
        return True
    except Exception as e:
        logger.error(f"Failed to deliver notification {tag}: {e}")
        return False


def dispatch_due_notifications(
    events: List[IntakeEvent],
    log: Dict[str, str],
    notified: AbstractSet[str],
    now: datetime,
    sink: NotificationSink
) -> Set[str]:
    """
    Notify about due_now / upcoming_soon intakes and return the new notified set.

    An intake is skipped when today's log already has an outcome for it, or
    when its key was already notified this session. The input set is not
    modified. Without notification permission this is a no-op.
    """
    updated = set(notified)
    if not sink.permission_granted():
        return updated

    today = now.date()
    for event in events:
        if event.urgency_status not in NOTIFIABLE_STATUSES:
            continue
        if make_log_key(today, event.medication_id, event.intake_time) in log:
            continue

        key = event.intake_key
        if key in updated:
            continue

        delivered = _safe_notify(
            sink,
            schedule_config.MEDICATION_NOTIFICATION_TITLE,
            format_intake_message(event),
            f"medication-{key}",
            NotificationType.MEDICATION_REMINDER
        )
        if delivered:
            updated.add(key)
            logger.info(f"Notified intake {key} ({event.urgency_status.value})")

    return updated


def dispatch_appointment_reminders(
    upcoming: List[Appointment],
    notified: AbstractSet[str],
    now: datetime,
    sink: NotificationSink,
    lead_minutes: Optional[int] = None
) -> Set[str]:
    """
    Remind once per appointment when 0 < minutes until it <= lead_minutes.
    Returns the new notified set of appointment ids.
    """
    lead = schedule_config.APPOINTMENT_REMINDER_MINUTES_BEFORE if lead_minutes is None else lead_minutes
    updated = set(notified)
    if not sink.permission_granted():
        return updated

    for appointment in upcoming:
        when = appointment.scheduled_at
        if when is None or appointment.id in updated:
            continue

        minutes = minutes_until(when, now)
        if not 0 < minutes <= lead:
            continue

        delivered = _safe_notify(
            sink,
            schedule_config.APPOINTMENT_NOTIFICATION_TITLE,
            format_appointment_message(appointment, when),
            f"appointment-{appointment.id}",
            NotificationType.APPOINTMENT_REMINDER
        )
        if delivered:
            updated.add(appointment.id)
            logger.info(f"Notified appointment {appointment.id} ({minutes} min ahead)")

    return updated


class ReminderSession:
    """
    Session-scoped reminder state.

    Owns the two notified sets. They live as long as the process and are
    cleared whenever the underlying collection changes. Medication keys carry
    no date, so the medication set is also cleared when the calendar day
    of the check changes.
    """

    def __init__(self):
        self.medication_notified: Set[str] = set()
        self.appointment_notified: Set[str] = set()
        self.medication_day: Optional[date] = None

    def reset_medication_notifications(self):
        """Call after any course add/edit/delete"""
        self.medication_notified = set()
        logger.debug("Medication notified set cleared")

    def reset_appointment_notifications(self):
        """Call after any appointment add/edit/delete"""
        self.appointment_notified = set()
        logger.debug("Appointment notified set cleared")

    def roll_medication_day(self, now: datetime):
        """Clear the medication notified set when the calendar day changes"""
        if self.medication_day == now.date():
            return
        if self.medication_day is not None:
            logger.info(f"New day {now.date()}, clearing medication notified set")
        self.reset_medication_notifications()
        self.medication_day = now.date()

    def check_medications(
        self,
        courses: List[MedicationCourse],
        log: Dict[str, str],
        now: datetime,
        sink: NotificationSink
    ) -> List[IntakeEvent]:
        """One medication tick: rebuild today's events and dispatch"""
        self.roll_medication_day(now)
        events = compute_todays_intake_events(courses, now)
        self.medication_notified = dispatch_due_notifications(
            events, log, self.medication_notified, now, sink
        )
        return events

    def check_appointments(
        self,
        appointments: List[Appointment],
        now: datetime,
        sink: NotificationSink,
        lead_minutes: Optional[int] = None
    ) -> List[Appointment]:
        """One appointment tick: re-partition and dispatch; returns upcoming"""
        upcoming, _ = partition_appointments(appointments, now)
        self.appointment_notified = dispatch_appointment_reminders(
            upcoming, self.appointment_notified, now, sink, lead_minutes
        )
        return upcoming

    def to_dict(self) -> Dict[str, Any]:
        return {
            "medication_notified": sorted(self.medication_notified),
            "appointment_notified": sorted(self.appointment_notified),
            "medication_day": self.medication_day.isoformat() if self.medication_day else None,
        }
