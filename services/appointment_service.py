"""
Appointment Service
Appointment repository over the key-value store
"""

import uuid
import logging
from typing import Dict, List, Optional, Any, Tuple
from datetime import datetime
from sqlalchemy.orm import Session

from config import StoreKeys
from tools.appointment_scheduler import (
    Appointment,
    load_appointments,
    partition_appointments,
    next_appointment,
)
from services.store_service import KeyValueStore, run_with_store
from services.medication_service import NotFoundError


logger = logging.getLogger(__name__)


class AppointmentService:
    """
    Service for appointment operations.
    Callers reset the appointment notified set after any mutation.
    """

    async def list_appointments(
        self,
        store: Optional[KeyValueStore] = None,
        db: Optional[Session] = None
    ) -> List[Appointment]:
        return run_with_store(lambda s: load_appointments(s.get(StoreKeys.APPOINTMENTS)), store, db)

    async def get_appointment(
        self,
        appointment_id: str,
        store: Optional[KeyValueStore] = None,
        db: Optional[Session] = None
    ) -> Appointment:
        for appointment in await self.list_appointments(store=store, db=db):
            if appointment.id == appointment_id:
                return appointment
        raise NotFoundError(f"Appointment {appointment_id} not found")

    async def add_appointment(
        self,
        doctor_name: str,
        date_time: str,
        specialty: Optional[str] = None,
        contact_phone: Optional[str] = None,
        location: Optional[str] = None,
        notes: Optional[str] = None,
        consultation_id: Optional[str] = None,
        patient_full_name: Optional[str] = None,
        store: Optional[KeyValueStore] = None,
        db: Optional[Session] = None
    ) -> Appointment:
        """Add a new appointment, newest first in the stored list"""
        def _add(s: KeyValueStore) -> Appointment:
            appointment = Appointment(
                id=str(uuid.uuid4())[:8],
                doctor_name=doctor_name,
                date_time=date_time,
                specialty=specialty,
                contact_phone=contact_phone,
                location=location,
                notes=notes,
                consultation_id=consultation_id,
                patient_full_name=patient_full_name,
            )
            appointments = load_appointments(s.get(StoreKeys.APPOINTMENTS))
            s.set(StoreKeys.APPOINTMENTS, [appointment.to_dict()] + [a.to_dict() for a in appointments])

            logger.info(f"Added appointment with {doctor_name} ({appointment.id})")
            return appointment

        return run_with_store(_add, store, db)

    async def update_appointment(
        self,
        appointment_id: str,
        updates: Dict[str, Any],
        store: Optional[KeyValueStore] = None,
        db: Optional[Session] = None
    ) -> Appointment:
        def _update(s: KeyValueStore) -> Appointment:
            appointments = load_appointments(s.get(StoreKeys.APPOINTMENTS))
            for appointment in appointments:
                if appointment.id != appointment_id:
                    continue
                for field_name, value in updates.items():
                    if field_name != "id" and hasattr(appointment, field_name):
                        setattr(appointment, field_name, value)
                s.set(StoreKeys.APPOINTMENTS, [a.to_dict() for a in appointments])
                logger.info(f"Updated appointment {appointment_id}")
                return appointment
            raise NotFoundError(f"Appointment {appointment_id} not found")

        return run_with_store(_update, store, db)

    async def delete_appointment(
        self,
        appointment_id: str,
        store: Optional[KeyValueStore] = None,
        db: Optional[Session] = None
    ) -> None:
        def _delete(s: KeyValueStore) -> None:
            appointments = load_appointments(s.get(StoreKeys.APPOINTMENTS))
            remaining = [a for a in appointments if a.id != appointment_id]
            if len(remaining) == len(appointments):
                raise NotFoundError(f"Appointment {appointment_id} not found")
            s.set(StoreKeys.APPOINTMENTS, [a.to_dict() for a in remaining])
            logger.info(f"Deleted appointment {appointment_id}")

        return run_with_store(_delete, store, db)

    async def get_partition(
        self,
        now: datetime,
        store: Optional[KeyValueStore] = None,
        db: Optional[Session] = None
    ) -> Tuple[List[Appointment], List[Appointment]]:
        """(upcoming, past) relative to now"""
        return partition_appointments(await self.list_appointments(store=store, db=db), now)

    async def get_next(
        self,
        now: datetime,
        store: Optional[KeyValueStore] = None,
        db: Optional[Session] = None
    ) -> Optional[Appointment]:
        return next_appointment(await self.list_appointments(store=store, db=db), now)


# Singleton instance
appointment_service = AppointmentService()
