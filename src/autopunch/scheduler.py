"""
Cron-driven scheduler for the attendance automation.

Runs the queue processor in a daemon thread at every cron fire time. Each
tick takes the shared execution lock as "cron", so a tick that overlaps a
manual trigger (or a slow previous tick) is skipped instead of queued.
"""
import logging
import threading
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from croniter import croniter

from autopunch.automation import QueueProcessor
from autopunch.lock import ExecutionLock
from autopunch.models import CycleSummary, LockSource
from autopunch.timeutil import local_now

logger = logging.getLogger(__name__)


class AttendanceScheduler:

    def __init__(
        self,
        processor: QueueProcessor,
        lock: ExecutionLock,
        cron_schedule: str = "* * * * *",
        enabled: bool = True,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.processor = processor
        self.lock = lock
        self.cron_schedule = cron_schedule
        self.enabled = enabled
        self._clock = clock or local_now
        self._thread: Optional[threading.Thread] = None
        self._stop = threading.Event()

    def start(self) -> bool:
        """
        Start the scheduler thread.

        Returns:
            True if a thread was started
        """
        if not self.enabled:
            logger.info("Attendance automation is DISABLED in config")
            return False

        if self._thread is not None and self._thread.is_alive():
            logger.info("Scheduler is already running")
            return False

        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="attendance-scheduler", daemon=True)
        self._thread.start()
        logger.info(f"Attendance scheduler started (cron: {self.cron_schedule})")
        return True

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        """Stop the scheduler thread; a cycle already running is not interrupted."""
        if self._thread is None:
            logger.info("No scheduler running")
            return

        logger.info("Stopping attendance scheduler...")
        self._stop.set()
        self._thread.join(timeout)
        self._thread = None
        logger.info("Attendance scheduler stopped")

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def tick(self) -> Optional[CycleSummary]:
        """
        Run one cron cycle under the execution lock.

        Returns:
            The cycle summary, or None when the lock was held elsewhere
        """
        if not self.lock.acquire(LockSource.CRON):
            status = self.lock.status()
            holder = status.source.value if status.source else "unknown"
            logger.info(f"Skipping scheduled cycle - execution already in progress ({holder})")
            return None

        try:
            logger.info(f"Scheduler triggered at {self._clock().isoformat()}")
            return self.processor.process()
        except Exception as e:
            logger.error(f"Error during scheduled execution: {e}", exc_info=True)
            return None
        finally:
            self.lock.release()

    def status(self) -> Dict[str, Any]:
        return {
            "running": self.is_running(),
            "executing": self.lock.is_locked(),
            "schedule": self.cron_schedule,
        }

    def _run(self) -> None:
        while not self._stop.is_set():
            # Fire times missed during a long cycle are skipped, not replayed
            fire_at = croniter(self.cron_schedule, self._clock()).get_next(datetime)
            delay = (fire_at - self._clock()).total_seconds()
            if delay > 0 and self._stop.wait(delay):
                break
            self.tick()
