"""
Tests for Notification Sinks
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from tools.notification_service import (
    InAppNotificationSink,
    LoggingNotificationSink,
    NotificationType,
)


class TestInAppNotificationSink:
    """Tests for the outbox sink"""

    def test_notify_adds_to_outbox(self, sink):
        sink.notify("Medication Reminder", "Take it", "medication-a-08:00",
                    NotificationType.MEDICATION_REMINDER)

        pending = sink.pending()
        assert len(pending) == 1
        assert pending[0].to_dict()["notification_type"] == "medication_reminder"

    def test_same_tag_replaces(self, sink):
        sink.notify("T", "first", "tag-1")
        sink.notify("T", "other", "tag-2")
        sink.notify("T", "second", "tag-1")

        pending = sink.pending()
        assert [n.tag for n in pending] == ["tag-2", "tag-1"]
        assert pending[-1].body == "second"

    def test_dropped_without_permission(self, denied_sink):
        denied_sink.notify("T", "body", "tag")
        assert denied_sink.pending() == []

    def test_permission_toggle(self, denied_sink):
        denied_sink.set_permission(True)
        denied_sink.notify("T", "body", "tag")

        assert denied_sink.permission_granted()
        assert len(denied_sink.pending()) == 1

    def test_outbox_bounded(self):
        sink = InAppNotificationSink(permission=True, max_size=2)
        for i in range(3):
            sink.notify("T", str(i), f"tag-{i}")

        assert [n.tag for n in sink.pending()] == ["tag-1", "tag-2"]

    def test_zero_size_outbox(self):
        sink = InAppNotificationSink(permission=True, max_size=0)

        sink.notify("T", "body", "tag")

        assert sink.pending() == []

    def test_clear(self, sink):
        sink.notify("T", "body", "tag")

        assert sink.clear() == 1
        assert sink.pending() == []


class TestLoggingNotificationSink:

    def test_logs_notification(self, caplog):
        sink = LoggingNotificationSink()

        with caplog.at_level("INFO"):
            sink.notify("Appointment Reminder", "Soon", "appointment-1")

        assert sink.permission_granted()
        assert "appointment-1" in caplog.text
