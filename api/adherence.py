"""
Adherence API Router
Endpoints for confirming intakes and reading adherence
"""

from typing import Optional
from datetime import date, datetime, timedelta
from fastapi import APIRouter, Depends, HTTPException, status, Query

from api.deps import get_store, get_now, services
from api.schemas.adherence import (
    IntakeLogCreate,
    IntakeLogResponse,
    IntakeLogEntry,
    IntakeLogList,
    AdherenceSummary,
)
from config import schedule_config
from models import IntakeOutcome
from services.adherence_service import IntakeNotActionableError, make_log_key
from services.store_service import KeyValueStore
from tools.time_utils import format_iso_date


router = APIRouter(prefix="/adherence", tags=["adherence"])


@router.post("/log", response_model=IntakeLogResponse, status_code=status.HTTP_201_CREATED)
async def log_intake(
    log_data: IntakeLogCreate,
    store: KeyValueStore = Depends(get_store),
    now: datetime = Depends(get_now)
):
    """
    Confirm one of today's intakes as taken or skipped

    Only due_now and past_today intakes without an existing entry can be
    confirmed; anything else is refused with 409.
    """
    adherence_service = services.get_adherence_service()

    try:
        event = await adherence_service.confirm_intake(
            medication_id=log_data.medication_id,
            intake_time=log_data.intake_time,
            outcome=IntakeOutcome(log_data.outcome.value),
            now=now,
            store=store
        )
    except IntakeNotActionableError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    return IntakeLogResponse(
        key=make_log_key(now.date(), event.medication_id, event.intake_time),
        date=now.date(),
        medication_id=event.medication_id,
        medication_name=event.medication_name,
        intake_time=event.intake_time,
        outcome=log_data.outcome,
        logged_at=now
    )


@router.get("/log", response_model=IntakeLogList)
async def get_intake_log(
    day: Optional[date] = Query(None, description="Only entries for this day"),
    store: KeyValueStore = Depends(get_store)
):
    """
    Raw intake log entries
    """
    adherence_service = services.get_adherence_service()
    log = await adherence_service.get_log(store=store)

    prefix = f"{format_iso_date(day)}-" if day else ""
    entries = [
        IntakeLogEntry(key=key, outcome=outcome)
        for key, outcome in sorted(log.items())
        if key.startswith(prefix)
    ]
    return IntakeLogList(entries=entries, total=len(entries))


@router.get("/summary", response_model=AdherenceSummary)
async def get_adherence_summary(
    store: KeyValueStore = Depends(get_store),
    now: datetime = Depends(get_now)
):
    """
    Rolling adherence over the last seven days including today

    percentage is null when nothing was scheduled in the window.
    """
    adherence_service = services.get_adherence_service()
    snapshot = await adherence_service.get_snapshot(now, store=store)

    window_days = schedule_config.ADHERENCE_WINDOW_DAYS
    return AdherenceSummary(
        percentage=snapshot.percentage,
        taken_count=snapshot.taken_count,
        scheduled_count=snapshot.scheduled_count,
        window_days=window_days,
        window_start=now.date() - timedelta(days=window_days - 1),
        window_end=now.date(),
        has_data=snapshot.percentage is not None
    )
