"""
Eligibility engine: which users need a login or logout right now.

Login policy, in order of precedence once the user has not logged in yet
and it is still before the emergency logout window:

1. Normal window: within +/- time_window_minutes of the jittered login time.
2. Extended retry: after the jittered time, within extended_retry_hours,
   while login_attempts < max_retry_attempts.
3. Continuous retry: after the extended horizon has passed, every cycle
   with no attempt cap, so a login is never given up before the cutoff.

Logout policy, once the user has not logged out yet:

1. Normal window: within +/- time_window_minutes of the jittered logout time.
2. After login: logged in today and past the jittered logout time.
3. Emergency: inside [emergency_logout_start, emergency_logout_end], even
   when login never succeeded. A late or partial punch beats none.

Window membership is inclusive; "after" is strict.
"""
import logging
import random
from typing import Any, Dict, List, Optional

from autopunch.models import Action, EligibleUser, ExecutionContext, User
from autopunch.status import reset_if_needed
from autopunch.timeutil import (
    is_after_scheduled_time,
    is_before_time,
    is_between_times,
    is_within_hours_after,
    is_within_time_window,
)

logger = logging.getLogger(__name__)


def effective_target(user: User, action: Action) -> Optional[str]:
    """The jittered target for today, or the raw scheduled time if none was computed."""
    status = user.today_status
    if status is not None:
        jittered = status.randomized_login_time if action == Action.LOGIN else status.randomized_logout_time
        if jittered:
            return jittered
    return user.scheduled_time(action)


def needs_login(user: User, current_time: str, config: Dict[str, Any]) -> bool:
    status = user.today_status
    if status is not None and status.login_success:
        return False

    # Past the cutoff the emergency logout takes over
    if not is_before_time(current_time, config["emergency_logout_start"]):
        return False

    target = effective_target(user, Action.LOGIN)
    if not target:
        return False

    if is_within_time_window(current_time, target, config["time_window_minutes"]):
        return True

    if not is_after_scheduled_time(current_time, target):
        return False

    attempts = status.login_attempts if status is not None else 0
    if is_within_hours_after(current_time, target, config["extended_retry_hours"]):
        return attempts < config["max_retry_attempts"]

    return True


def needs_logout(user: User, current_time: str, config: Dict[str, Any]) -> bool:
    status = user.today_status
    if status is not None and status.logout_success:
        return False

    target = effective_target(user, Action.LOGOUT)
    if target:
        if is_within_time_window(current_time, target, config["time_window_minutes"]):
            return True

        logged_in = status is not None and status.login_success
        if logged_in and is_after_scheduled_time(current_time, target):
            return True

    return is_between_times(
        current_time, config["emergency_logout_start"], config["emergency_logout_end"]
    )


def decide(users: List[User], context: ExecutionContext, config: Dict[str, Any]) -> List[EligibleUser]:
    """
    Compute the (user, action) pairs to execute for this cycle.

    Pure function: users are expected to have been lazily reset already.

    Args:
        users: All stored users
        context: The cycle's time/day/date snapshot
        config: Automation configuration

    Returns:
        Eligible pairs in user order; a user may appear for both actions
    """
    eligible: List[EligibleUser] = []

    for user in users:
        if context.current_day not in user.weekdays:
            continue

        if needs_login(user, context.current_time, config):
            eligible.append(EligibleUser(user=user, action=Action.LOGIN))

        if needs_logout(user, context.current_time, config):
            eligible.append(EligibleUser(user=user, action=Action.LOGOUT))

    return eligible


def get_eligible_users(
    user_store,
    context: ExecutionContext,
    config: Dict[str, Any],
    rng: Optional[random.Random] = None,
) -> List[EligibleUser]:
    """
    Load users, apply the lazy daily reset and evaluate eligibility.

    Reset users are persisted with a single write, and only when at least
    one user actually changed, so repeated calls on the same date do not
    write.

    Raises:
        StoreReadFailure: If users cannot be loaded
        StoreWriteFailure: If reset users cannot be saved
    """
    with user_store.transaction():
        users = user_store.read_all()

        reset_users = [
            reset_if_needed(user, context.current_date, config["randomize_window_minutes"], rng)
            for user in users
        ]
        changed = sum(1 for before, after in zip(users, reset_users) if before is not after)

        if changed:
            user_store.write_all(reset_users)
            logger.info(f"Reset daily status for {changed} user(s) (new day: {context.current_date})")

    return decide(reset_users, context, config)
