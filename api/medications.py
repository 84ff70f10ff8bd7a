"""
Medications API Router
Endpoints for medication courses and today's intake schedule
"""

from typing import Dict, Optional
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, status

from actions.reminder_engine import ReminderSession
from api.deps import get_store, get_now, get_reminder_session, services
from api.schemas.medication import (
    MedicationCreate,
    MedicationUpdate,
    MedicationResponse,
    MedicationList,
    IntakeEventResponse,
    TodaysIntakes,
    NextIntake,
)
from services.adherence_service import make_log_key
from services.medication_service import NotFoundError
from services.store_service import KeyValueStore
from tools.scheduler import IntakeEvent, group_by_time
from tools.time_utils import parse_iso_date


router = APIRouter(prefix="/medications", tags=["medications"])


def to_intake_response(
    event: IntakeEvent,
    log: Dict[str, str],
    now: datetime
) -> IntakeEventResponse:
    """Attach today's logged outcome and whether the event can still be confirmed"""
    outcome: Optional[str] = log.get(make_log_key(now.date(), event.medication_id, event.intake_time))
    return IntakeEventResponse(
        medication_id=event.medication_id,
        medication_name=event.medication_name,
        intake_time=event.intake_time,
        scheduled_datetime=event.scheduled_datetime,
        minutes_until=event.minutes_until,
        urgency_status=event.urgency_status.value,
        logged_outcome=outcome,
        actionable=event.is_actionable and outcome is None,
    )


@router.post("/", response_model=MedicationResponse, status_code=status.HTTP_201_CREATED)
async def create_medication(
    medication_data: MedicationCreate,
    store: KeyValueStore = Depends(get_store),
    session: ReminderSession = Depends(get_reminder_session)
):
    """
    Add a medication course

    - **name**: Medication name
    - **start_date** / **end_date**: Inclusive date range
    - **intake_times**: Daily intake times ("HH:MM")
    """
    medication_service = services.get_medication_service()

    course = await medication_service.add_course(
        name=medication_data.name,
        start_date=medication_data.start_date.isoformat(),
        end_date=medication_data.end_date.isoformat(),
        intake_times=medication_data.intake_times,
        notes=medication_data.notes,
        consultation_id=medication_data.consultation_id,
        patient_full_name=medication_data.patient_full_name,
        store=store
    )
    session.reset_medication_notifications()
    return course


@router.get("/", response_model=MedicationList)
async def list_medications(
    store: KeyValueStore = Depends(get_store),
    now: datetime = Depends(get_now)
):
    """
    Get all medication courses
    """
    medication_service = services.get_medication_service()
    courses = await medication_service.list_courses(store=store)

    return MedicationList(
        medications=[MedicationResponse.model_validate(c) for c in courses],
        total=len(courses),
        active_today=sum(1 for c in courses if c.is_active_on(now.date()))
    )


@router.get("/today", response_model=TodaysIntakes)
async def get_todays_intakes(
    store: KeyValueStore = Depends(get_store),
    now: datetime = Depends(get_now)
):
    """
    Today's intake events ordered by time, with urgency and logged outcome
    """
    medication_service = services.get_medication_service()
    adherence_service = services.get_adherence_service()

    events = await medication_service.get_todays_intakes(now, store=store)
    log = await adherence_service.get_log(store=store)

    return TodaysIntakes(
        date=now.date(),
        generated_at=now,
        intakes=[to_intake_response(e, log, now) for e in events],
        time_slots=group_by_time(events)
    )


@router.get("/next", response_model=NextIntake)
async def get_next_intake(
    store: KeyValueStore = Depends(get_store),
    now: datetime = Depends(get_now)
):
    """
    Next intake later today, if any
    """
    medication_service = services.get_medication_service()
    adherence_service = services.get_adherence_service()

    event = await medication_service.get_next_intake(now, store=store)
    if event is None:
        return NextIntake()

    log = await adherence_service.get_log(store=store)
    return NextIntake(intake=to_intake_response(event, log, now))


@router.get("/{medication_id}", response_model=MedicationResponse)
async def get_medication(
    medication_id: str,
    store: KeyValueStore = Depends(get_store)
):
    """
    Get a medication course by ID
    """
    medication_service = services.get_medication_service()

    try:
        return await medication_service.get_course(medication_id, store=store)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.put("/{medication_id}", response_model=MedicationResponse)
async def update_medication(
    medication_id: str,
    update_data: MedicationUpdate,
    store: KeyValueStore = Depends(get_store),
    session: ReminderSession = Depends(get_reminder_session)
):
    """
    Update a medication course
    """
    medication_service = services.get_medication_service()

    updates = update_data.model_dump(exclude_unset=True)
    for field_name in ("start_date", "end_date"):
        if updates.get(field_name) is not None:
            updates[field_name] = updates[field_name].isoformat()

    try:
        existing = await medication_service.get_course(medication_id, store=store)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    # Only one bound may be sent; check the merged range
    start = parse_iso_date(updates.get("start_date", existing.start_date))
    end = parse_iso_date(updates.get("end_date", existing.end_date))
    if start and end and start > end:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="end_date must be on or after start_date"
        )

    course = await medication_service.update_course(medication_id, updates, store=store)
    session.reset_medication_notifications()
    return course


@router.delete("/{medication_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_medication(
    medication_id: str,
    store: KeyValueStore = Depends(get_store),
    session: ReminderSession = Depends(get_reminder_session)
):
    """
    Delete a medication course; logged intakes are kept
    """
    medication_service = services.get_medication_service()

    try:
        await medication_service.delete_course(medication_id, store=store)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    session.reset_medication_notifications()
