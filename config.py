"""
Configuration management for IntakeGuardian
"""

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    APP_NAME: str = "IntakeGuardian"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENV: str = "development"

    # API
    API_PREFIX: str = "/api/v1"
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Local key-value store
    DATABASE_URL: str = "sqlite:///./intake_guardian.db"
    DATABASE_ECHO: bool = False

    # Notifications
    # Permission is granted by the host UI; the backend only honours the flag
    NOTIFICATIONS_PERMISSION_GRANTED: bool = False
    NOTIFICATION_OUTBOX_SIZE: int = 200

    # Reminder poller
    REMINDER_POLLER_ENABLED: bool = True
    MEDICATION_TICK_SECONDS: int = 60
    APPOINTMENT_TICK_SECONDS: int = 60 * 5

    # CORS
    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


class ScheduleConfig:
    """Thresholds used by the scheduling and adherence engine"""

    # Intake urgency windows, in minutes relative to the scheduled time
    DUE_NOW_MAX_MINUTES_BEFORE: int = 5     # due_now up to and including +5
    DUE_NOW_MAX_MINUTES_AFTER: int = 10     # due_now down to and including -10
    UPCOMING_SOON_MAX_MINUTES: int = 30

    # Adherence
    ADHERENCE_WINDOW_DAYS: int = 7

    # Appointments
    APPOINTMENT_REMINDER_MINUTES_BEFORE: int = 60

    # Notification copy
    MEDICATION_NOTIFICATION_TITLE: str = "Medication Reminder"
    APPOINTMENT_NOTIFICATION_TITLE: str = "Appointment Reminder"


# Key-value store keys
class StoreKeys:
    MEDICATIONS = "medications"
    MEDICATION_LOG = "medicationLog"
    APPOINTMENTS = "appointments"


settings = get_settings()
schedule_config = ScheduleConfig()
