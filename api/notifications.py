"""
Notifications API Router
Outbox polling, permission flag and on-demand reminder checks
"""

from datetime import datetime
from fastapi import APIRouter, Depends, status

from actions.reminder_engine import ReminderSession
from api.deps import get_store, get_now, get_reminder_session, get_notification_sink
from api.schemas.notification import (
    NotificationResponse,
    NotificationList,
    PermissionUpdate,
    PermissionResponse,
    ReminderCheckResult,
)
from config import StoreKeys
from services.adherence_service import load_log
from services.store_service import KeyValueStore
from tools.appointment_scheduler import load_appointments
from tools.notification_service import InAppNotificationSink
from tools.scheduler import load_courses


router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("/", response_model=NotificationList)
async def list_notifications(
    sink: InAppNotificationSink = Depends(get_notification_sink)
):
    """
    Notifications waiting for the UI, oldest first
    """
    pending = sink.pending()
    return NotificationList(
        notifications=[NotificationResponse(**n.to_dict()) for n in pending],
        total=len(pending)
    )


@router.delete("/", status_code=status.HTTP_204_NO_CONTENT)
async def clear_notifications(
    sink: InAppNotificationSink = Depends(get_notification_sink)
):
    """
    Clear the outbox once the UI has shown the notifications
    """
    sink.clear()


@router.get("/permission", response_model=PermissionResponse)
async def get_permission(
    sink: InAppNotificationSink = Depends(get_notification_sink)
):
    return PermissionResponse(granted=sink.permission_granted())


@router.put("/permission", response_model=PermissionResponse)
async def set_permission(
    permission: PermissionUpdate,
    sink: InAppNotificationSink = Depends(get_notification_sink)
):
    """
    Record the permission decision the UI obtained from the user
    """
    sink.set_permission(permission.granted)
    return PermissionResponse(granted=sink.permission_granted())


@router.post("/check", response_model=ReminderCheckResult)
async def run_reminder_check(
    store: KeyValueStore = Depends(get_store),
    now: datetime = Depends(get_now),
    session: ReminderSession = Depends(get_reminder_session),
    sink: InAppNotificationSink = Depends(get_notification_sink)
):
    """
    Run the medication and appointment checks immediately instead of
    waiting for the next tick
    """
    session.check_medications(
        load_courses(store.get(StoreKeys.MEDICATIONS)),
        load_log(store.get(StoreKeys.MEDICATION_LOG)),
        now,
        sink
    )
    session.check_appointments(
        load_appointments(store.get(StoreKeys.APPOINTMENTS)),
        now,
        sink
    )

    return ReminderCheckResult(
        medication_notified=sorted(session.medication_notified),
        appointment_notified=sorted(session.appointment_notified),
        outbox_size=len(sink.pending())
    )
