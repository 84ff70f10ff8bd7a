"""
Adherence Service
Intake log bookkeeping and rolling adherence aggregation
"""

import math
import logging
from typing import Dict, List, Optional, Any, Union
from dataclasses import dataclass
from datetime import datetime, date
from sqlalchemy.orm import Session

from config import schedule_config, StoreKeys
from models import IntakeOutcome
from tools.scheduler import (
    MedicationCourse,
    IntakeEvent,
    load_courses,
    compute_todays_intake_events,
)
from tools.time_utils import format_iso_date, trailing_days
from services.store_service import KeyValueStore, run_with_store


logger = logging.getLogger(__name__)


class IntakeNotActionableError(ValueError):
    """Raised when a confirmation is refused for an intake event"""


@dataclass
class AdherenceSnapshot:
    """
    Adherence over a trailing window.
    percentage is None when nothing was scheduled, which is not the same as 0%.
    """
    percentage: Optional[int]
    taken_count: int
    scheduled_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "percentage": self.percentage,
            "taken_count": self.taken_count,
            "scheduled_count": self.scheduled_count,
        }


def make_log_key(day: Union[date, str], medication_id: str, intake_time: str) -> str:
    """{isoDate}-{medicationId}-{intakeTime}"""
    day_str = day if isinstance(day, str) else format_iso_date(day)
    return f"{day_str}-{medication_id}-{intake_time}"


def load_log(raw: Any) -> Dict[str, str]:
    """Deserialize the stored intake log, dropping unknown outcomes"""
    if not isinstance(raw, dict):
        if raw is not None:
            logger.warning(f"Ignoring intake log store value of type {type(raw).__name__}")
        return {}

    valid = {o.value for o in IntakeOutcome}
    log = {}
    for key, outcome in raw.items():
        if outcome not in valid:
            logger.warning(f"Dropping intake log entry {key!r} with outcome {outcome!r}")
            continue
        log[key] = outcome
    return log


def log_intake_outcome(
    log: Dict[str, str],
    day: Union[date, str],
    medication_id: str,
    intake_time: str,
    outcome: IntakeOutcome
) -> Dict[str, str]:
    """Return a copy of the log with the outcome written (last write wins)"""
    updated = dict(log)
    updated[make_log_key(day, medication_id, intake_time)] = IntakeOutcome(outcome).value
    return updated


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_adherence(
    courses: List[MedicationCourse],
    log: Dict[str, str],
    now: datetime,
    window_days: Optional[int] = None
) -> AdherenceSnapshot:
    """
    Taken vs scheduled intakes over the window ending today (inclusive).

    Every intake time of every course active on a given day counts as
    scheduled; only "taken" entries count as taken.
    """
    days = window_days if window_days is not None else schedule_config.ADHERENCE_WINDOW_DAYS
    taken = 0
    scheduled = 0

    for day in trailing_days(now.date(), days):
        day_str = format_iso_date(day)
        for course in courses:
            if not course.is_active_on(day):
                continue
            for raw_time, _ in course.valid_intake_times():
                scheduled += 1
                if log.get(make_log_key(day_str, course.id, raw_time)) == IntakeOutcome.TAKEN.value:
                    taken += 1

    if scheduled == 0:
        return AdherenceSnapshot(percentage=None, taken_count=0, scheduled_count=0)

    percentage = max(0, min(100, round_half_up(100 * taken / scheduled)))
    return AdherenceSnapshot(percentage=percentage, taken_count=taken, scheduled_count=scheduled)


class AdherenceService:
    """
    Service for intake logging and adherence reporting over the key-value store
    """

    async def get_log(
        self,
        store: Optional[KeyValueStore] = None,
        db: Optional[Session] = None
    ) -> Dict[str, str]:
        """Full intake log"""
        return run_with_store(lambda s: load_log(s.get(StoreKeys.MEDICATION_LOG)), store, db)

    async def confirm_intake(
        self,
        medication_id: str,
        intake_time: str,
        outcome: IntakeOutcome,
        now: datetime,
        store: Optional[KeyValueStore] = None,
        db: Optional[Session] = None
    ) -> IntakeEvent:
        """
        Record a caregiver-confirmed outcome for one of today's intakes

        Args:
            medication_id: Course ID
            intake_time: Intake time as stored on the course ("HH:MM")
            outcome: taken or skipped
            now: Current time; the log key uses its calendar day
            store: Key-value store (defaults to the database-backed one)
            db: Database session

        Returns:
            The confirmed IntakeEvent

        Raises:
            IntakeNotActionableError: not scheduled today, still upcoming,
                or already logged
        """
        def _confirm(s: KeyValueStore) -> IntakeEvent:
            courses = load_courses(s.get(StoreKeys.MEDICATIONS))
            log = load_log(s.get(StoreKeys.MEDICATION_LOG))

            event = next(
                (e for e in compute_todays_intake_events(courses, now)
                 if e.medication_id == medication_id and e.intake_time == intake_time),
                None
            )
            if event is None:
                raise IntakeNotActionableError(
                    f"No intake of medication {medication_id} at {intake_time} today"
                )

            key = make_log_key(now.date(), medication_id, intake_time)
            if key in log:
                raise IntakeNotActionableError(f"Intake {key} already logged as {log[key]}")
            if not event.is_actionable:
                raise IntakeNotActionableError(
                    f"Intake {key} is {event.urgency_status.value} and cannot be confirmed yet"
                )

            s.set(
                StoreKeys.MEDICATION_LOG,
                log_intake_outcome(log, now.date(), medication_id, intake_time, outcome)
            )
            logger.info(f"Logged intake {key}: {IntakeOutcome(outcome).value}")
            return event

        return run_with_store(_confirm, store, db)

    async def get_snapshot(
        self,
        now: datetime,
        store: Optional[KeyValueStore] = None,
        db: Optional[Session] = None
    ) -> AdherenceSnapshot:
        """Adherence over the configured trailing window"""
        def _snapshot(s: KeyValueStore) -> AdherenceSnapshot:
            return compute_adherence(
                load_courses(s.get(StoreKeys.MEDICATIONS)),
                load_log(s.get(StoreKeys.MEDICATION_LOG)),
                now
            )

        return run_with_store(_snapshot, store, db)


# Singleton instance
adherence_service = AdherenceService()
