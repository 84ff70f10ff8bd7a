"""
Clock Source
Supplies wall-clock time to the scheduling engine
"""

from datetime import datetime, timedelta


class Clock:
    """Source of the current local wall-clock time"""

    def now(self) -> datetime:
        raise NotImplementedError


class SystemClock(Clock):
    """Reads the host clock (naive local time)"""

    def now(self) -> datetime:
        return datetime.now()


class FixedClock(Clock):
    """Clock frozen at a given instant; can be advanced manually"""

    def __init__(self, current: datetime):
        self.current = current

    def now(self) -> datetime:
        return self.current

    def advance(self, minutes: int = 0, seconds: int = 0):
        self.current = self.current + timedelta(minutes=minutes, seconds=seconds)

    def set(self, current: datetime):
        self.current = current


system_clock = SystemClock()
