"""
Reminder Poller
Periodic clock ticks that drive the medication and appointment reminders
"""

import asyncio
import logging
from typing import Callable, ContextManager, Dict, List, Optional, Any

from config import settings, StoreKeys
from actions.reminder_engine import ReminderSession
from tools.clock import Clock, system_clock
from tools.notification_service import NotificationSink
from tools.scheduler import load_courses
from tools.appointment_scheduler import load_appointments
from services.adherence_service import load_log
from services.store_service import KeyValueStore, open_store


logger = logging.getLogger(__name__)


class ReminderPoller:
    """
    Runs two independent periodic checks on the event loop.

    - medication check every MEDICATION_TICK_SECONDS
    - appointment check every APPOINTMENT_TICK_SECONDS

    Each tick reloads the collections from the store, so mutations made
    between ticks are always picked up. A failing tick is logged and the
    loop carries on.
    """

    def __init__(
        self,
        session: ReminderSession,
        sink: NotificationSink,
        clock: Clock = system_clock,
        store_factory: Callable[[], ContextManager[KeyValueStore]] = open_store,
        medication_interval: Optional[float] = None,
        appointment_interval: Optional[float] = None
    ):
        self.session = session
        self.sink = sink
        self.clock = clock
        self.store_factory = store_factory
        self.medication_interval = medication_interval or settings.MEDICATION_TICK_SECONDS
        self.appointment_interval = appointment_interval or settings.APPOINTMENT_TICK_SECONDS
        self._tasks: List[asyncio.Task] = []
        self.tick_counts: Dict[str, int] = {"medication": 0, "appointment": 0}

    def medication_tick(self) -> int:
        """Run one medication check; returns how many keys were newly notified"""
        with self.store_factory() as store:
            courses = load_courses(store.get(StoreKeys.MEDICATIONS))
            log = load_log(store.get(StoreKeys.MEDICATION_LOG))

        now = self.clock.now()
        self.session.roll_medication_day(now)
        before = len(self.session.medication_notified)
        self.session.check_medications(courses, log, now, self.sink)
        self.tick_counts["medication"] += 1
        return len(self.session.medication_notified) - before

    def appointment_tick(self) -> int:
        """Run one appointment check; returns how many ids were newly notified"""
        with self.store_factory() as store:
            appointments = load_appointments(store.get(StoreKeys.APPOINTMENTS))

        before = len(self.session.appointment_notified)
        self.session.check_appointments(appointments, self.clock.now(), self.sink)
        self.tick_counts["appointment"] += 1
        return len(self.session.appointment_notified) - before

    async def _run_periodically(self, name: str, interval: float, tick: Callable[[], int]):
        logger.info(f"Starting {name} reminder loop (every {interval}s)")
        while True:
            try:
                sent = tick()
                if sent:
                    logger.info(f"{name} tick sent {sent} notification(s)")
            except Exception as e:
                logger.error(f"{name} tick failed: {e}", exc_info=True)
            await asyncio.sleep(interval)

    @property
    def running(self) -> bool:
        return any(not t.done() for t in self._tasks)

    def start(self):
        """Schedule both loops on the running event loop"""
        if self.running:
            return
        self._tasks = [
            asyncio.create_task(
                self._run_periodically("medication", self.medication_interval, self.medication_tick)
            ),
            asyncio.create_task(
                self._run_periodically("appointment", self.appointment_interval, self.appointment_tick)
            ),
        ]

    async def stop(self):
        """Cancel both loops and wait for them to finish"""
        for task in self._tasks:
            task.cancel()
        for task in self._tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._tasks = []
        logger.info("Reminder loops stopped")

    def status(self) -> Dict[str, Any]:
        return {
            "running": self.running,
            "medication_interval_seconds": self.medication_interval,
            "appointment_interval_seconds": self.appointment_interval,
            "ticks": dict(self.tick_counts),
        }
