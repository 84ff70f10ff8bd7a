"""
Test Tools Package
Tests for the tools module (time utilities, scheduler, appointments, notifications)
"""

__all__ = [
    "test_time_utils",
    "test_scheduler",
    "test_appointment_scheduler",
    "test_notification_service",
]
