"""
Action executor: runs one login or logout against the provider with retries
and persists the outcome into the user's daily status.
"""
import logging
import time
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from autopunch.exceptions import UserNotFound
from autopunch.models import Action, ActionResult, Credentials, ProviderResult, User
from autopunch.providers.base import AttendanceProvider
from autopunch.status import record_action_status
from autopunch.timeutil import local_now

logger = logging.getLogger(__name__)


class ActionExecutor:
    """
    Execute attendance actions with retry logic and status tracking.

    Status is written once per execute() call: on the first success, or
    after the final failed attempt. The attempt counter in the daily status
    therefore counts executor runs, not provider calls.
    """

    def __init__(
        self,
        provider: AttendanceProvider,
        user_store,
        config: Dict[str, Any],
        sleep: Callable[[float], None] = time.sleep,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.provider = provider
        self.user_store = user_store
        self.max_attempts = max(1, int(config["max_retry_attempts"]))
        self.retry_delay = float(config["retry_delay_seconds"])
        self.randomize_window = config.get("randomize_window_minutes", 0)
        self._sleep = sleep
        self._clock = clock or local_now

    def execute(self, user: User, action: Action, credentials: Credentials) -> ActionResult:
        """
        Run the action until it succeeds or the attempts are exhausted.

        Args:
            user: The stored user the action is for
            action: LOGIN or LOGOUT
            credentials: Decrypted credentials for the provider

        Returns:
            ActionResult with the number of provider attempts made
        """
        last_error: Optional[str] = None
        attempts = 0

        for attempt in range(1, self.max_attempts + 1):
            attempts = attempt
            logger.info(f"Attempt {attempt}/{self.max_attempts} - {action.value} for user {user.id}")

            if not self._is_healthy():
                last_error = f"Provider {self.provider.name} failed health check"
                logger.error(f"{last_error}, giving up {action.value} for user {user.id}")
                break

            try:
                result = self._call(action, credentials)
            except Exception as e:
                last_error = str(e) or e.__class__.__name__
                logger.error(f"{action.value} error for user {user.id} on attempt {attempt}: {last_error}")
            else:
                if result.success:
                    logger.info(f"{action.value} succeeded for user {user.id} on attempt {attempt}")
                    self._persist(user.id, action, True, None, result.actual_time)
                    return ActionResult(
                        user_id=user.id,
                        action=action,
                        success=True,
                        attempts=attempt,
                        actual_time=result.actual_time,
                    )

                last_error = result.message or f"{action.value} failed - no error details"
                logger.warning(f"{action.value} failed for user {user.id} on attempt {attempt}: {last_error}")

            if attempt < self.max_attempts:
                logger.info(f"Waiting {self.retry_delay}s before retry...")
                self._sleep(self.retry_delay)

        logger.error(f"All attempts failed for {action.value} - user {user.id}")
        self._persist(user.id, action, False, last_error, None)
        return ActionResult(
            user_id=user.id,
            action=action,
            success=False,
            attempts=attempts,
            error=last_error,
        )

    def _call(self, action: Action, credentials: Credentials) -> ProviderResult:
        if action == Action.LOGIN:
            return self.provider.login(credentials)
        return self.provider.logout(credentials)

    def _is_healthy(self) -> bool:
        try:
            return bool(self.provider.health_check())
        except Exception as e:
            logger.error(f"Health check raised for provider {self.provider.name}: {e}")
            return False

    def _persist(
        self,
        user_id: str,
        action: Action,
        success: bool,
        error: Optional[str],
        actual_time: Optional[str],
    ) -> None:
        try:
            record_action_status(
                self.user_store,
                user_id,
                action,
                success,
                error=error,
                actual_time=actual_time,
                now=self._clock(),
                randomize_window=self.randomize_window,
            )
        except UserNotFound:
            # Deleted while the action was running; nothing left to update
            logger.warning(f"User {user_id} was removed during {action.value}, status not recorded")
