"""
Actions Module
Reminder dispatch and the periodic reminder loops
"""

from .reminder_engine import (
    ReminderSession,
    dispatch_due_notifications,
    dispatch_appointment_reminders,
    format_intake_message,
    format_appointment_message,
)

from .reminder_poller import ReminderPoller

__all__ = [
    # Reminder Engine
    "ReminderSession",
    "dispatch_due_notifications",
    "dispatch_appointment_reminders",
    "format_intake_message",
    "format_appointment_message",

    # Poller
    "ReminderPoller",
]
