"""
Appointments API Router
Endpoints for appointments and their upcoming/past split
"""

from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, status

from actions.reminder_engine import ReminderSession
from api.deps import get_store, get_now, get_reminder_session, services
from api.schemas.appointment import (
    AppointmentCreate,
    AppointmentUpdate,
    AppointmentResponse,
    AppointmentList,
    AppointmentPartition,
    NextAppointment,
)
from services.medication_service import NotFoundError
from services.store_service import KeyValueStore
from tools.time_utils import minutes_until


router = APIRouter(prefix="/appointments", tags=["appointments"])


def _format_date_time(value: datetime) -> str:
    return value.isoformat(timespec="minutes")


@router.post("/", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
async def create_appointment(
    appointment_data: AppointmentCreate,
    store: KeyValueStore = Depends(get_store),
    session: ReminderSession = Depends(get_reminder_session)
):
    """
    Add an appointment

    - **doctor_name**: Doctor or practitioner
    - **date_time**: When the appointment takes place
    """
    appointment_service = services.get_appointment_service()

    appointment = await appointment_service.add_appointment(
        doctor_name=appointment_data.doctor_name,
        date_time=_format_date_time(appointment_data.date_time),
        specialty=appointment_data.specialty,
        contact_phone=appointment_data.contact_phone,
        location=appointment_data.location,
        notes=appointment_data.notes,
        consultation_id=appointment_data.consultation_id,
        patient_full_name=appointment_data.patient_full_name,
        store=store
    )
    session.reset_appointment_notifications()
    return appointment


@router.get("/", response_model=AppointmentList)
async def list_appointments(
    store: KeyValueStore = Depends(get_store)
):
    """
    All stored appointments, including ones with unparsable dates
    """
    appointment_service = services.get_appointment_service()
    appointments = await appointment_service.list_appointments(store=store)

    return AppointmentList(
        appointments=[AppointmentResponse.model_validate(a) for a in appointments],
        total=len(appointments)
    )


@router.get("/partition", response_model=AppointmentPartition)
async def get_appointment_partition(
    store: KeyValueStore = Depends(get_store),
    now: datetime = Depends(get_now)
):
    """
    Upcoming (soonest first) and past (most recent first) appointments
    """
    appointment_service = services.get_appointment_service()
    upcoming, past = await appointment_service.get_partition(now, store=store)

    return AppointmentPartition(
        upcoming=[AppointmentResponse.model_validate(a) for a in upcoming],
        past=[AppointmentResponse.model_validate(a) for a in past],
        generated_at=now
    )


@router.get("/next", response_model=NextAppointment)
async def get_next_appointment(
    store: KeyValueStore = Depends(get_store),
    now: datetime = Depends(get_now)
):
    """
    The soonest upcoming appointment, if any
    """
    appointment_service = services.get_appointment_service()
    appointment = await appointment_service.get_next(now, store=store)
    if appointment is None:
        return NextAppointment()

    return NextAppointment(
        appointment=AppointmentResponse.model_validate(appointment),
        minutes_until=minutes_until(appointment.scheduled_at, now)
    )


@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(
    appointment_id: str,
    store: KeyValueStore = Depends(get_store)
):
    appointment_service = services.get_appointment_service()

    try:
        return await appointment_service.get_appointment(appointment_id, store=store)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.put("/{appointment_id}", response_model=AppointmentResponse)
async def update_appointment(
    appointment_id: str,
    update_data: AppointmentUpdate,
    store: KeyValueStore = Depends(get_store),
    session: ReminderSession = Depends(get_reminder_session)
):
    """
    Update an appointment
    """
    appointment_service = services.get_appointment_service()

    updates = update_data.model_dump(exclude_unset=True)
    if "date_time" in updates:
        updates["date_time"] = _format_date_time(updates["date_time"])

    try:
        appointment = await appointment_service.update_appointment(appointment_id, updates, store=store)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    session.reset_appointment_notifications()
    return appointment


@router.delete("/{appointment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_appointment(
    appointment_id: str,
    store: KeyValueStore = Depends(get_store),
    session: ReminderSession = Depends(get_reminder_session)
):
    appointment_service = services.get_appointment_service()

    try:
        await appointment_service.delete_appointment(appointment_id, store=store)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    session.reset_appointment_notifications()
