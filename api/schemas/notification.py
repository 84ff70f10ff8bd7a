"""
Notification Schemas
Pydantic models for the notification outbox and permission endpoints
"""

from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel


class NotificationResponse(BaseModel):
    title: str
    body: str
    tag: str
    notification_type: Optional[str] = None
    created_at: datetime


class NotificationList(BaseModel):
    notifications: List[NotificationResponse]
    total: int


class PermissionUpdate(BaseModel):
    granted: bool


class PermissionResponse(BaseModel):
    granted: bool


class ReminderCheckResult(BaseModel):
    """Outcome of running both reminder checks once"""
    medication_notified: List[str]
    appointment_notified: List[str]
    outbox_size: int
