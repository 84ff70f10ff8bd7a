"""
Tools Package
Scheduling, time and notification utilities for the IntakeGuardian system
"""

from .clock import (
    Clock,
    SystemClock,
    FixedClock,
    system_clock
)

from .notification_service import (
    NotificationSink,
    NotificationType,
    Notification,
    InAppNotificationSink,
    LoggingNotificationSink
)

from .scheduler import (
    MedicationCourse,
    IntakeEvent,
    classify_urgency,
    compute_todays_intake_events,
    next_intake_today,
    load_courses,
    make_intake_key
)

from .appointment_scheduler import (
    Appointment,
    load_appointments,
    partition_appointments,
    next_appointment
)

__all__ = [
    # Clock
    "Clock",
    "SystemClock",
    "FixedClock",
    "system_clock",

    # Notification Service
    "NotificationSink",
    "NotificationType",
    "Notification",
    "InAppNotificationSink",
    "LoggingNotificationSink",

    # Scheduler
    "MedicationCourse",
    "IntakeEvent",
    "classify_urgency",
    "compute_todays_intake_events",
    "next_intake_today",
    "load_courses",
    "make_intake_key",

    # Appointments
    "Appointment",
    "load_appointments",
    "partition_appointments",
    "next_appointment",
]
