"""
Services Module
Business logic layer for the IntakeGuardian application
"""

from services.store_service import (
    KeyValueStore,
    InMemoryKeyValueStore,
    SQLKeyValueStore,
    open_store,
)
from services.medication_service import MedicationService, NotFoundError, medication_service
from services.appointment_service import AppointmentService, appointment_service
from services.adherence_service import (
    AdherenceService,
    AdherenceSnapshot,
    IntakeNotActionableError,
    adherence_service,
    compute_adherence,
    log_intake_outcome,
    make_log_key,
)


__all__ = [
    # Store
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "SQLKeyValueStore",
    "open_store",
    # Service classes
    "MedicationService",
    "AppointmentService",
    "AdherenceService",
    # Errors
    "NotFoundError",
    "IntakeNotActionableError",
    # Engine functions
    "AdherenceSnapshot",
    "compute_adherence",
    "log_intake_outcome",
    "make_log_key",
    # Singleton instances
    "medication_service",
    "appointment_service",
    "adherence_service",
]
