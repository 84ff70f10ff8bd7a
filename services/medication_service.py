"""
Medication Service
Medication course repository over the key-value store
"""

import uuid
import logging
from typing import Dict, List, Optional, Any
from datetime import datetime
from sqlalchemy.orm import Session

from config import StoreKeys
from tools.scheduler import (
    MedicationCourse,
    IntakeEvent,
    load_courses,
    compute_todays_intake_events,
    next_intake_today,
)
from services.store_service import KeyValueStore, run_with_store


logger = logging.getLogger(__name__)


class NotFoundError(ValueError):
    """Raised when a stored record does not exist"""


class MedicationService:
    """
    Service for medication course operations.

    Callers own the reminder session: after add/update/delete they must
    reset its medication notified set.
    """

    async def list_courses(
        self,
        store: Optional[KeyValueStore] = None,
        db: Optional[Session] = None
    ) -> List[MedicationCourse]:
        """All courses, newest first"""
        return run_with_store(lambda s: load_courses(s.get(StoreKeys.MEDICATIONS)), store, db)

    async def get_course(
        self,
        medication_id: str,
        store: Optional[KeyValueStore] = None,
        db: Optional[Session] = None
    ) -> MedicationCourse:
        """Get a course by ID; raises NotFoundError"""
        courses = await self.list_courses(store=store, db=db)
        for course in courses:
            if course.id == medication_id:
                return course
        raise NotFoundError(f"Medication {medication_id} not found")

    async def add_course(
        self,
        name: str,
        start_date: str,
        end_date: str,
        intake_times: List[str],
        notes: Optional[str] = None,
        consultation_id: Optional[str] = None,
        patient_full_name: Optional[str] = None,
        store: Optional[KeyValueStore] = None,
        db: Optional[Session] = None
    ) -> MedicationCourse:
        """
        Add a new medication course

        Args:
            name: Medication name
            start_date: First day (ISO date, inclusive)
            end_date: Last day (ISO date, inclusive)
            intake_times: Daily intake times ("HH:MM")
            notes: Free-text notes
            consultation_id: Originating consultation
            patient_full_name: Patient the course was prescribed to
            store: Key-value store (defaults to the database-backed one)
            db: Database session

        Returns:
            Created MedicationCourse
        """
        def _add(s: KeyValueStore) -> MedicationCourse:
            course = MedicationCourse(
                id=str(uuid.uuid4())[:8],
                name=name,
                start_date=start_date,
                end_date=end_date,
                intake_times=list(intake_times),
                notes=notes,
                consultation_id=consultation_id,
                patient_full_name=patient_full_name,
            )
            courses = load_courses(s.get(StoreKeys.MEDICATIONS))
            s.set(StoreKeys.MEDICATIONS, [course.to_dict()] + [c.to_dict() for c in courses])

            logger.info(f"Added medication {name} ({course.id})")
            return course

        return run_with_store(_add, store, db)

    async def update_course(
        self,
        medication_id: str,
        updates: Dict[str, Any],
        store: Optional[KeyValueStore] = None,
        db: Optional[Session] = None
    ) -> MedicationCourse:
        """Apply field updates (snake_case names) to a course"""
        def _update(s: KeyValueStore) -> MedicationCourse:
            courses = load_courses(s.get(StoreKeys.MEDICATIONS))
            for index, course in enumerate(courses):
                if course.id != medication_id:
                    continue
                for field_name, value in updates.items():
                    if field_name == "id" or not hasattr(course, field_name):
                        continue
                    setattr(course, field_name, value)
                courses[index] = course
                s.set(StoreKeys.MEDICATIONS, [c.to_dict() for c in courses])
                logger.info(f"Updated medication {medication_id}")
                return course
            raise NotFoundError(f"Medication {medication_id} not found")

        return run_with_store(_update, store, db)

    async def delete_course(
        self,
        medication_id: str,
        store: Optional[KeyValueStore] = None,
        db: Optional[Session] = None
    ) -> None:
        """Delete a course; its intake log entries are kept"""
        def _delete(s: KeyValueStore) -> None:
            courses = load_courses(s.get(StoreKeys.MEDICATIONS))
            remaining = [c for c in courses if c.id != medication_id]
            if len(remaining) == len(courses):
                raise NotFoundError(f"Medication {medication_id} not found")
            s.set(StoreKeys.MEDICATIONS, [c.to_dict() for c in remaining])
            logger.info(f"Deleted medication {medication_id}")

        return run_with_store(_delete, store, db)

    async def get_todays_intakes(
        self,
        now: datetime,
        store: Optional[KeyValueStore] = None,
        db: Optional[Session] = None
    ) -> List[IntakeEvent]:
        courses = await self.list_courses(store=store, db=db)
        return compute_todays_intake_events(courses, now)

    async def get_next_intake(
        self,
        now: datetime,
        store: Optional[KeyValueStore] = None,
        db: Optional[Session] = None
    ) -> Optional[IntakeEvent]:
        courses = await self.list_courses(store=store, db=db)
        return next_intake_today(courses, now)


# Singleton instance
medication_service = MedicationService()
