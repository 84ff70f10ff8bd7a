"""
API Module
FastAPI routers for the IntakeGuardian application
"""

from api.medications import router as medications_router
from api.adherence import router as adherence_router
from api.appointments import router as appointments_router
from api.notifications import router as notifications_router

from api.deps import (
    get_db,
    get_store,
    get_clock,
    get_now,
    get_reminder_session,
    get_notification_sink,
    services,
)


__all__ = [
    # Routers
    "medications_router",
    "adherence_router",
    "appointments_router",
    "notifications_router",
    # Dependencies
    "get_db",
    "get_store",
    "get_clock",
    "get_now",
    "get_reminder_session",
    "get_notification_sink",
    "services",
]


def include_routers(app, prefix: str = "/api/v1"):
    """
    Include all API routers in the FastAPI app

    Usage:
        from api import include_routers
        include_routers(app)
    """
    app.include_router(medications_router, prefix=prefix)
    app.include_router(adherence_router, prefix=prefix)
    app.include_router(appointments_router, prefix=prefix)
    app.include_router(notifications_router, prefix=prefix)
