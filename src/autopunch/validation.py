"""
Validation of user payloads.

Each validator returns a list of human readable messages; an empty list
means the value is valid. validate_user collects all of them so a client
sees every problem at once.
"""
import re
from typing import Any, Iterable, List, Optional

USER_ID_MAX_LENGTH = 50
PASSWORD_MIN_LENGTH = 6

_USER_ID_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")
# Stricter than timeutil.parse_time: two-digit hours only
_TIME_PATTERN = re.compile(r"^([0-1][0-9]|2[0-3]):([0-5][0-9])$")


def validate_user_id(user_id: Optional[str]) -> List[str]:
    if not user_id or not user_id.strip():
        return ["User ID is required"]

    errors = []
    if len(user_id) > USER_ID_MAX_LENGTH:
        errors.append(f"User ID must be {USER_ID_MAX_LENGTH} characters or less")
    if not _USER_ID_PATTERN.match(user_id):
        errors.append("User ID can only contain letters, numbers, hyphens, and underscores")
    return errors


def validate_password(password: Optional[str]) -> List[str]:
    if not password:
        return ["Password is required"]
    if len(password) < PASSWORD_MIN_LENGTH:
        return [f"Password must be at least {PASSWORD_MIN_LENGTH} characters long"]
    return []


def validate_time(value: Optional[str], field_name: str = "Time") -> List[str]:
    """Optional HH:MM value; None means "not scheduled"."""
    if value is None:
        return []
    if not _TIME_PATTERN.match(value):
        return [f"{field_name} must be in HH:MM format (24-hour, e.g., 09:00 or 18:30)"]
    return []


def validate_time_range(login_time: Optional[str], logout_time: Optional[str]) -> List[str]:
    errors = validate_time(login_time, "Login time") + validate_time(logout_time, "Logout time")
    if errors or login_time is None or logout_time is None:
        return errors

    # Zero-padded HH:MM strings order the same way as the times they encode
    if logout_time <= login_time:
        errors.append("Logout time must be after login time")
    return errors


def validate_weekdays(weekdays: Optional[Iterable[Any]]) -> List[str]:
    if weekdays is None:
        return []

    days = list(weekdays)
    errors = []
    if any(not isinstance(day, int) or isinstance(day, bool) or day < 1 or day > 7 for day in days):
        errors.append("Weekdays must be numbers between 1 (Monday) and 7 (Sunday)")
    if len(set(days)) != len(days):
        errors.append("Weekdays cannot contain duplicates")
    return errors


def validate_user(
    user_id: Optional[str],
    password: Optional[str],
    login_time: Optional[str],
    logout_time: Optional[str],
    weekdays: Optional[Iterable[Any]],
    require_password: bool = True,
) -> List[str]:
    """
    Validate a complete user payload.

    Args:
        require_password: False for updates, where an empty password keeps
            the stored one

    Returns:
        All validation messages (empty if valid)
    """
    errors = validate_user_id(user_id)
    if require_password or password:
        errors.extend(validate_password(password))
    errors.extend(validate_weekdays(weekdays))
    errors.extend(validate_time_range(login_time, logout_time))
    return errors
