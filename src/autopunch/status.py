"""
Daily status tracking and lazy reset.

A user's TodayStatus is reset the first time the user is touched on a new
calendar date; there is no midnight job. All functions return new User
snapshots and never mutate their input.
"""
import logging
import random
from dataclasses import replace
from datetime import datetime
from typing import Optional

from autopunch.models import Action, TodayStatus, User
from autopunch.timeutil import format_date, randomize_time_same_day

logger = logging.getLogger(__name__)


def should_reset(current_date: str, status_date: Optional[str]) -> bool:
    """
    Check if the daily status needs to be reset.

    Example:
        should_reset("2025-11-16", "2025-11-15")  # True
        should_reset("2025-11-16", "2025-11-16")  # False
        should_reset("2025-11-16", None)          # True
    """
    if not status_date:
        return True
    return status_date != current_date


def get_initial_today_status(
    current_date: str,
    user: Optional[User] = None,
    randomize_window: int = 0,
    rng: Optional[random.Random] = None,
) -> TodayStatus:
    """
    Create a fresh status for a new day.

    The jittered login/logout targets are computed here, from the user's
    current schedule, and then stay fixed for the rest of the day. They
    never cross midnight, so "23:58" cannot become a logout due next morning.
    """
    randomized_login = None
    randomized_logout = None
    if user is not None:
        if user.login_time:
            randomized_login = randomize_time_same_day(user.login_time, randomize_window, rng)
        if user.logout_time:
            randomized_logout = randomize_time_same_day(user.logout_time, randomize_window, rng)

    return TodayStatus(
        date=current_date,
        randomized_login_time=randomized_login,
        randomized_logout_time=randomized_logout,
    )


def reset_if_needed(
    user: User,
    current_date: str,
    randomize_window: int = 0,
    rng: Optional[random.Random] = None,
) -> User:
    """
    Reset the user's daily status if the date has changed.

    Returns:
        A new User with a fresh status, or the very same object when no
        reset was needed (callers rely on identity to skip store writes)
    """
    status_date = user.today_status.date if user.today_status else None
    if not should_reset(current_date, status_date):
        return user

    fresh = get_initial_today_status(current_date, user, randomize_window, rng)
    logger.debug(
        f"Reset daily status for user {user.id} ({status_date} -> {current_date}), "
        f"targets login={fresh.randomized_login_time} logout={fresh.randomized_logout_time}"
    )
    return user.with_status(fresh)


def update_action_status(
    user: User,
    action: Action,
    success: bool,
    error: Optional[str] = None,
    actual_time: Optional[str] = None,
    now: Optional[datetime] = None,
    randomize_window: int = 0,
    rng: Optional[random.Random] = None,
) -> User:
    """
    Record the outcome of one login or logout attempt.

    Increments the attempt counter, latches the success flag (a failure never
    clears an earlier success on the same day), stamps the attempt time and
    keeps the previous portal time when none is supplied.

    last_error is only overwritten when a new error is given. A success of
    one action therefore leaves a stale error from the other action in
    place; the field reads as "most recent failure", not "current health".

    Args:
        user: The user to update
        action: The action that was attempted
        success: Whether the attempt succeeded
        error: Optional error message for a failed attempt
        actual_time: Optional punch time reported by the portal
        now: Attempt time (defaults to the current local time)

    Returns:
        A new User with the updated status
    """
    now = now or datetime.now().astimezone()

    # Callers may skip reset_if_needed, so check the date again here
    user = reset_if_needed(user, format_date(now), randomize_window, rng)
    status = user.today_status
    timestamp = now.isoformat()

    if action == Action.LOGIN:
        status = replace(
            status,
            login_attempts=status.login_attempts + 1,
            login_success=status.login_success or success,
            login_time=timestamp,
            actual_in_time=actual_time or status.actual_in_time,
        )
    else:
        status = replace(
            status,
            logout_attempts=status.logout_attempts + 1,
            logout_success=status.logout_success or success,
            logout_time=timestamp,
            actual_out_time=actual_time or status.actual_out_time,
        )

    if error:
        status = replace(status, last_error=error)

    return user.with_status(status)


def record_action_status(
    user_store,
    user_id: str,
    action: Action,
    success: bool,
    error: Optional[str] = None,
    actual_time: Optional[str] = None,
    now: Optional[datetime] = None,
    randomize_window: int = 0,
) -> User:
    """
    Persist the outcome of an attempt for a stored user.

    Raises:
        UserNotFound: If the user was deleted in the meantime
        StoreWriteFailure: If the store cannot be written
    """
    updated = user_store.update(
        user_id,
        lambda user: update_action_status(
            user, action, success, error, actual_time, now, randomize_window
        ),
    )
    outcome = "SUCCESS" if success else "FAILED"
    suffix = f" (actual time: {actual_time})" if actual_time else ""
    logger.info(f"Updated {action.value} status for user {user_id}: {outcome}{suffix}")
    return updated
