"""
Notification Service Tool
Notification sinks used by the reminder dispatchers
"""

import logging
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field
from datetime import datetime
from collections import OrderedDict
from enum import Enum

from config import settings


logger = logging.getLogger(__name__)


class NotificationType(str, Enum):
    """Types of notifications"""
    MEDICATION_REMINDER = "medication_reminder"
    APPOINTMENT_REMINDER = "appointment_reminder"


@dataclass
class Notification:
    """A user-facing notification"""
    title: str
    body: str
    tag: str
    notification_type: Optional[NotificationType] = None
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "body": self.body,
            "tag": self.tag,
            "notification_type": self.notification_type.value if self.notification_type else None,
            "created_at": self.created_at.isoformat(),
        }


class NotificationSink:
    """
    Where reminders go.

    notify() is fire-and-forget: there is no delivery confirmation.
    """

    def permission_granted(self) -> bool:
        raise NotImplementedError

    def notify(
        self,
        title: str,
        body: str,
        tag: str,
        notification_type: Optional[NotificationType] = None
    ) -> None:
        raise NotImplementedError


class InAppNotificationSink(NotificationSink):
    """
    Keeps notifications in an outbox the host UI polls.

    A notification whose tag is already in the outbox replaces the older one,
    the way desktop notifications with the same tag do.
    """

    def __init__(
        self,
        permission: Optional[bool] = None,
        max_size: Optional[int] = None
    ):
        self._permission = settings.NOTIFICATIONS_PERMISSION_GRANTED if permission is None else permission
        self._max_size = settings.NOTIFICATION_OUTBOX_SIZE if max_size is None else max_size
        self._outbox: "OrderedDict[str, Notification]" = OrderedDict()

    def permission_granted(self) -> bool:
        return self._permission

    def set_permission(self, granted: bool):
        self._permission = granted
        logger.info(f"Notification permission {'granted' if granted else 'revoked'}")

    def notify(
        self,
        title: str,
        body: str,
        tag: str,
        notification_type: Optional[NotificationType] = None
    ) -> None:
        if not self._permission:
            logger.info(f"Notification permission not granted, dropping {tag}")
            return

        self._outbox.pop(tag, None)
        self._outbox[tag] = Notification(
            title=title,
            body=body,
            tag=tag,
            notification_type=notification_type
        )
        while len(self._outbox) > self._max_size:
            self._outbox.popitem(last=False)

        logger.info(f"[IN-APP] {title}: {body}")

    def pending(self) -> List[Notification]:
        """Notifications in arrival order"""
        return list(self._outbox.values())

    def clear(self) -> int:
        count = len(self._outbox)
        self._outbox.clear()
        return count


class LoggingNotificationSink(NotificationSink):
    """Writes notifications to the application log only"""

    def __init__(self, permission: bool = True):
        self._permission = permission

    def permission_granted(self) -> bool:
        return self._permission

    def notify(
        self,
        title: str,
        body: str,
        tag: str,
        notification_type: Optional[NotificationType] = None
    ) -> None:
        logger.info(f"[LOG] {title} ({tag}): {body}")
