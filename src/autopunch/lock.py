"""
Execution lock for attendance automation.

A single slot shared by every entry point (cron tick, HTTP trigger, CLI run)
so that two processing cycles never run at the same time: both would mutate
the same user status records and the same log without row-level locking.

The lock is not re-entrant and never expires. A cycle that dies while
holding it leaves it held until the process restarts.
"""
import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from autopunch.models import LockSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LockStatus:
    locked: bool
    source: Optional[LockSource] = None
    start_time: Optional[datetime] = None


class ExecutionLock:
    """Process-wide single-holder lock, constructed once and injected."""

    def __init__(self):
        self._state = LockStatus(locked=False)
        # Guards the check-and-set only; holding the slot does not block threads
        self._guard = threading.Lock()

    def acquire(self, source: LockSource) -> bool:
        """
        Acquire the execution lock.

        Args:
            source: Who is requesting the lock

        Returns:
            True if acquired, False if it is already held by anyone
            (including the same source)
        """
        source = LockSource(source)
        with self._guard:
            if self._state.locked:
                logger.info(
                    f"Lock acquisition FAILED for {source.value} - already locked by {self._state.source.value}"
                )
                return False

            self._state = LockStatus(locked=True, source=source, start_time=datetime.now(timezone.utc))

        logger.info(f"Lock ACQUIRED by {source.value}")
        return True

    def release(self) -> None:
        """Release the lock. Releasing an unlocked lock only logs a warning."""
        with self._guard:
            if not self._state.locked:
                logger.warning("Attempted to release lock but it was not locked")
                return

            previous = self._state
            self._state = LockStatus(locked=False)

        held_ms = int((datetime.now(timezone.utc) - previous.start_time).total_seconds() * 1000)
        logger.info(f"Lock RELEASED by {previous.source.value} (held for {held_ms}ms)")

    def is_locked(self) -> bool:
        return self._state.locked

    def status(self) -> LockStatus:
        return self._state

    def to_api(self) -> Dict[str, Any]:
        """Lock status as a JSON-serializable dict."""
        state = self._state
        return {
            "executing": state.locked,
            "source": state.source.value if state.source else None,
            "startedAt": state.start_time.isoformat() if state.start_time else None,
        }
