"""
Time helpers for schedule evaluation.

All clock values are 24-hour "HH:MM" strings compared as minutes since
midnight. The comparison predicates never raise: a malformed value is
logged and the check evaluates to False so a single bad record cannot
break an automation cycle.
"""
import logging
import random
import re
from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

from autopunch.exceptions import InvalidTimeFormat

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60

_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")


def parse_time(value: str) -> int:
    """
    Parse an HH:MM string into minutes since midnight.

    Args:
        value: Time string such as "09:30"

    Returns:
        Minutes since midnight in the range 0-1439

    Raises:
        InvalidTimeFormat: If the string is malformed or out of range

    Example:
        parse_time("09:30")  # 570
        parse_time("23:59")  # 1439
    """
    if not isinstance(value, str):
        raise InvalidTimeFormat(repr(value), "Expected a string")

    match = _TIME_PATTERN.match(value.strip())
    if not match:
        raise InvalidTimeFormat(value)

    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23:
        raise InvalidTimeFormat(value, f"Hours must be between 0 and 23, got {hours}")
    if minutes > 59:
        raise InvalidTimeFormat(value, f"Minutes must be between 0 and 59, got {minutes}")

    return hours * 60 + minutes


def format_minutes(total_minutes: int) -> str:
    """Format minutes since midnight as HH:MM, wrapping across midnight."""
    total_minutes %= MINUTES_PER_DAY
    return f"{total_minutes // 60:02d}:{total_minutes % 60:02d}"


def format_time(moment: datetime) -> str:
    """Format a datetime as HH:MM."""
    return moment.strftime("%H:%M")


def format_date(moment: date) -> str:
    """Format a date or datetime as YYYY-MM-DD."""
    return moment.strftime("%Y-%m-%d")


def get_current_day_of_week(moment: date) -> int:
    """
    Day of week with Monday=1 ... Sunday=7.

    Python's isoweekday already follows this convention, unlike weekday()
    (Monday=0) or JavaScript-style Sunday=0 numbering.
    """
    return moment.isoweekday()


def is_valid_time(value: Optional[str]) -> bool:
    if value is None:
        return False
    try:
        parse_time(value)
        return True
    except InvalidTimeFormat:
        return False


def circular_distance(first: int, second: int) -> int:
    """Distance in minutes between two clock offsets on a 24h circle."""
    diff = abs(first - second)
    return min(diff, MINUTES_PER_DAY - diff)


def is_within_time_window(current: str, target: str, window_minutes: int) -> bool:
    """
    Check whether current is within +/- window_minutes of target.

    The distance wraps around midnight, so "23:59" is one minute away from
    "00:00".

    Example:
        is_within_time_window("09:01", "09:00", 2)  # True
        is_within_time_window("23:59", "00:01", 2)  # True
        is_within_time_window("09:05", "09:00", 2)  # False
    """
    try:
        return circular_distance(parse_time(current), parse_time(target)) <= window_minutes
    except InvalidTimeFormat as e:
        logger.error(f"Error in is_within_time_window: {e}")
        return False


def is_after_scheduled_time(current: str, scheduled: str) -> bool:
    """Strictly after, same-day comparison (no midnight wraparound)."""
    try:
        return parse_time(current) > parse_time(scheduled)
    except InvalidTimeFormat as e:
        logger.error(f"Error in is_after_scheduled_time: {e}")
        return False


def is_before_time(current: str, boundary: str) -> bool:
    """Strictly before, same-day comparison."""
    try:
        return parse_time(current) < parse_time(boundary)
    except InvalidTimeFormat as e:
        logger.error(f"Error in is_before_time: {e}")
        return False


def is_within_hours_after(current: str, scheduled: str, hours: float) -> bool:
    """
    Check whether current is after scheduled by no more than the given hours.

    Example:
        is_within_hours_after("10:30", "09:00", 2)  # True
        is_within_hours_after("11:30", "09:00", 2)  # False
        is_within_hours_after("09:00", "09:00", 2)  # False (not after)
    """
    try:
        current_minutes = parse_time(current)
        scheduled_minutes = parse_time(scheduled)
    except InvalidTimeFormat as e:
        logger.error(f"Error in is_within_hours_after: {e}")
        return False

    if current_minutes <= scheduled_minutes:
        return False
    return current_minutes - scheduled_minutes <= hours * 60


def is_between_times(current: str, start: str, end: str) -> bool:
    """Inclusive range check without midnight wraparound."""
    try:
        current_minutes = parse_time(current)
        return parse_time(start) <= current_minutes <= parse_time(end)
    except InvalidTimeFormat as e:
        logger.error(f"Error in is_between_times: {e}")
        return False


def randomize_time(base: str, window_minutes: int, rng: Optional[random.Random] = None) -> str:
    """
    Shift an HH:MM time by a uniform random offset in [-window, +window].

    Callers compute this once per user per day and keep the result in the
    daily status; recomputing it every cycle would make the target move.

    Args:
        base: The scheduled time in HH:MM
        window_minutes: Maximum shift in either direction
        rng: Optional random generator (for deterministic tests)

    Returns:
        The jittered time, wrapped across midnight. Falls back to base if it
        cannot be parsed.
    """
    rng = rng or random
    try:
        base_minutes = parse_time(base)
    except InvalidTimeFormat as e:
        logger.error(f"Error randomizing time for {base}: {e}")
        return base

    window = max(0, int(window_minutes))
    offset = rng.randint(-window, window)
    return format_minutes(base_minutes + offset)


def randomize_time_same_day(base: str, window_minutes: int, rng: Optional[random.Random] = None) -> str:
    """
    Like randomize_time, but the result never crosses midnight.

    The offset is drawn from [-window, +window] narrowed to stay within
    00:00-23:59, so the target keeps its order against same-day times.

    Example:
        randomize_time_same_day("23:58", 6)  # somewhere in 23:52-23:59
        randomize_time_same_day("00:03", 6)  # somewhere in 00:00-00:09
    """
    rng = rng or random
    try:
        base_minutes = parse_time(base)
    except InvalidTimeFormat as e:
        logger.error(f"Error randomizing time for {base}: {e}")
        return base

    window = max(0, int(window_minutes))
    low = max(-window, -base_minutes)
    high = min(window, MINUTES_PER_DAY - 1 - base_minutes)
    return format_minutes(base_minutes + rng.randint(low, high))


def local_now(timezone_name: Optional[str] = None) -> datetime:
    """
    Current wall-clock time, timezone aware.

    Args:
        timezone_name: IANA zone such as "Asia/Kolkata"; None uses the host zone
    """
    if timezone_name:
        return datetime.now(ZoneInfo(timezone_name))
    return datetime.now().astimezone()
