"""
Attendance automation cycle.

One cycle: take a time snapshot, lazily reset daily statuses, find the
eligible (user, action) pairs, then execute logins first and logouts second,
appending one attendance log entry per processed pair.

The processor does not take the execution lock; callers (scheduler tick,
HTTP trigger, CLI) hold it around process().
"""
import logging
import random
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from autopunch.eligibility import get_eligible_users
from autopunch.exceptions import DecryptionFailure, UserNotFound
from autopunch.executor import ActionExecutor
from autopunch.models import (
    Action,
    ActionResult,
    AttendanceLog,
    CycleSummary,
    Credentials,
    EligibleUser,
    ExecutionContext,
)
from autopunch.timeutil import format_date, format_time, get_current_day_of_week, local_now

logger = logging.getLogger(__name__)

CREDENTIALS_UNAVAILABLE = "User not found or password decryption failed"


def get_current_execution_context(now: Optional[datetime] = None) -> ExecutionContext:
    """
    Snapshot the wall clock for one cycle.

    Every decision in the cycle uses this snapshot, so a cycle that runs
    across a minute boundary still evaluates all users at the same time.
    """
    now = now or local_now()
    return ExecutionContext(
        current_time=format_time(now),
        current_day=get_current_day_of_week(now),
        current_date=format_date(now),
        now=now,
    )


class QueueProcessor:
    """Processes the attendance queue for one cycle."""

    def __init__(
        self,
        user_store,
        log_store,
        cipher,
        executor: ActionExecutor,
        config: Dict[str, Any],
        clock: Optional[Callable[[], datetime]] = None,
        rng: Optional[random.Random] = None,
    ):
        self.user_store = user_store
        self.log_store = log_store
        self.cipher = cipher
        self.executor = executor
        self.config = config
        self._clock = clock or local_now
        self._rng = rng

    def process(self) -> CycleSummary:
        """
        Run one automation cycle.

        Returns:
            CycleSummary with one ActionResult per processed pair; aborted is
            set when the eligible users could not be determined
        """
        context = get_current_execution_context(self._clock())
        summary = CycleSummary(context=context)
        logger.info(
            f"Processing attendance queue (time: {context.current_time}, "
            f"date: {context.current_date}, day: {context.current_day})"
        )

        try:
            eligible = get_eligible_users(self.user_store, context, self.config, self._rng)
        except Exception as e:
            logger.error(f"Fatal error processing queue: {e}", exc_info=True)
            summary.aborted = True
            summary.error = str(e)
            return summary

        logins = [item for item in eligible if item.action == Action.LOGIN]
        logouts = [item for item in eligible if item.action == Action.LOGOUT]
        logger.info(f"Found {len(logins)} users eligible for login, {len(logouts)} for logout")

        for item in logins + logouts:
            summary.results.append(self._process_item(item))

        logger.info(
            f"Queue processing completed: {len(logins)} logins, {len(logouts)} logouts "
            f"({summary.succeeded} succeeded, {summary.failed} failed)"
        )
        return summary

    def _process_item(self, item: EligibleUser) -> ActionResult:
        user, action = item.user, item.action
        scheduled_time = user.scheduled_time(action)
        logger.info(f"Processing {action.value} for user: {user.id}")

        try:
            credentials = self._load_credentials(user.id)
        except (UserNotFound, DecryptionFailure) as e:
            logger.error(f"Credentials unavailable for user {user.id}: {e}")
            self._append_log(user.id, action, scheduled_time, False, CREDENTIALS_UNAVAILABLE)
            return ActionResult(user_id=user.id, action=action, success=False, attempts=0,
                                error=CREDENTIALS_UNAVAILABLE)

        try:
            result = self.executor.execute(user, action, credentials)
        except Exception as e:
            logger.error(f"Error processing {action.value} for user {user.id}: {e}", exc_info=True)
            self._append_log(user.id, action, scheduled_time, False, str(e))
            return ActionResult(user_id=user.id, action=action, success=False, attempts=0, error=str(e))

        error = None if result.success else f"{action.value.capitalize()} action failed"
        if result.error and not result.success:
            error = f"{error}: {result.error}"
        self._append_log(user.id, action, scheduled_time, result.success, error)

        logger.info(f"{action.value.capitalize()} {'succeeded' if result.success else 'failed'} for user {user.id}")
        return result

    def _load_credentials(self, user_id: str) -> Credentials:
        # Re-read so a password changed since eligibility was computed is used
        stored = self.user_store.get(user_id)
        return Credentials(user_id=stored.id, password=self.cipher.decrypt(stored.password))

    def _append_log(
        self,
        user_id: str,
        action: Action,
        scheduled_time: Optional[str],
        success: bool,
        error: Optional[str],
    ) -> None:
        entry = AttendanceLog(
            user_id=user_id,
            action=action,
            scheduled_time=scheduled_time,
            execution_time=self._clock().isoformat(),
            success=success,
            error=error,
        )
        try:
            self.log_store.append(entry)
        except Exception as e:
            logger.error(f"Failed to append attendance log for user {user_id}: {e}")
