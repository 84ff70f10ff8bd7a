"""
Time Utilities
Tolerant parsing and arithmetic for stored date/time strings
"""

import re
import logging
from typing import Any, Iterator, Optional
from datetime import datetime, date, time, timedelta


logger = logging.getLogger(__name__)


INTAKE_TIME_FORMAT = "%H:%M"
INTAKE_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
ISO_DATE_FORMAT = "%Y-%m-%d"


def to_local_naive(dt: datetime) -> datetime:
    """Convert an aware datetime to naive local wall-clock time"""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone().replace(tzinfo=None)


def parse_iso_datetime(value: Any) -> Optional[datetime]:
    """
    Parse an ISO-8601 date or date-time string.

    Accepts "2024-05-01", "2024-05-01T08:30" and offset/Z suffixed values.
    Aware values are converted to local wall-clock time so they compare with
    the naive clock. Returns None for anything unparsable.
    """
    if isinstance(value, datetime):
        return to_local_naive(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if not isinstance(value, str) or not value.strip():
        return None

    try:
        return to_local_naive(datetime.fromisoformat(value.strip()))
    except ValueError:
        return None


def parse_iso_date(value: Any) -> Optional[date]:
    """Parse the calendar date of an ISO date or date-time string"""
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    parsed = parse_iso_datetime(value)
    return parsed.date() if parsed else None


def parse_intake_time(value: Any) -> Optional[time]:
    """Parse a zero-padded "HH:MM" time of day, None if malformed"""
    if not isinstance(value, str) or not INTAKE_TIME_PATTERN.fullmatch(value):
        return None
    return datetime.strptime(value, INTAKE_TIME_FORMAT).time()


def minutes_until(target: datetime, now: datetime) -> int:
    """
    Signed whole minutes from now to target.
    Partial minutes are truncated toward zero.
    """
    seconds = (to_local_naive(target) - to_local_naive(now)).total_seconds()
    return int(seconds / 60)


def is_within_dates(day: date, start: Optional[date], end: Optional[date]) -> bool:
    """Inclusive date-only range check; unknown bounds never match"""
    if start is None or end is None:
        return False
    return start <= day <= end


def trailing_days(end_day: date, days: int) -> Iterator[date]:
    """Yield the `days` calendar days ending at end_day, oldest first"""
    start = end_day - timedelta(days=days - 1)
    for offset in range(days):
        yield start + timedelta(days=offset)


def format_iso_date(day: date) -> str:
    return day.strftime(ISO_DATE_FORMAT)
