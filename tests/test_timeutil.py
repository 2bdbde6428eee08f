import random
from datetime import date, datetime

import pytest

from autopunch.exceptions import InvalidTimeFormat
from autopunch.timeutil import (
    circular_distance,
    format_minutes,
    get_current_day_of_week,
    is_after_scheduled_time,
    is_before_time,
    is_between_times,
    is_valid_time,
    is_within_hours_after,
    is_within_time_window,
    parse_time,
    randomize_time,
    randomize_time_same_day,
)


def test_parse_time():
    assert parse_time("00:00") == 0
    assert parse_time("09:30") == 570
    assert parse_time("9:05") == 545
    assert parse_time("23:59") == 1439


@pytest.mark.parametrize("value", ["24:00", "12:60", "noon", "", "12-30", "1230"])
def test_parse_time_rejects_malformed(value):
    with pytest.raises(InvalidTimeFormat):
        parse_time(value)


def test_parse_time_rejects_non_strings():
    with pytest.raises(InvalidTimeFormat):
        parse_time(None)


def test_format_minutes_wraps():
    assert format_minutes(-1) == "23:59"
    assert format_minutes(1440) == "00:00"
    assert format_minutes(545) == "09:05"


def test_window_wraps_around_midnight():
    assert is_within_time_window("23:59", "00:01", 2)
    assert is_within_time_window("00:01", "23:59", 2)
    assert not is_within_time_window("23:58", "00:01", 2)


def test_window_is_inclusive():
    assert is_within_time_window("09:06", "09:00", 6)
    assert is_within_time_window("08:54", "09:00", 6)
    assert not is_within_time_window("09:07", "09:00", 6)


def test_predicates_return_false_on_bad_input():
    assert not is_within_time_window("bad", "09:00", 6)
    assert not is_after_scheduled_time("10:00", "25:00")
    assert not is_before_time("x", "23:00")
    assert not is_within_hours_after("10:00", "", 2)
    assert not is_between_times("23:30", "23:00", "nope")


def test_after_and_before_are_strict():
    assert not is_after_scheduled_time("09:00", "09:00")
    assert is_after_scheduled_time("09:01", "09:00")
    assert not is_before_time("23:00", "23:00")
    assert is_before_time("22:59", "23:00")


def test_within_hours_after():
    assert is_within_hours_after("10:30", "09:00", 2)
    assert is_within_hours_after("11:00", "09:00", 2)
    assert not is_within_hours_after("11:01", "09:00", 2)
    assert not is_within_hours_after("09:00", "09:00", 2)


def test_between_times_is_inclusive():
    assert is_between_times("23:00", "23:00", "23:59")
    assert is_between_times("23:59", "23:00", "23:59")
    assert not is_between_times("22:59", "23:00", "23:59")


def test_randomize_time_stays_within_window():
    rng = random.Random(42)
    for base in ("00:02", "09:00", "23:58"):
        for _ in range(200):
            shifted = randomize_time(base, 6, rng)
            assert is_valid_time(shifted)
            assert circular_distance(parse_time(shifted), parse_time(base)) <= 6


def test_randomize_time_zero_window_and_bad_base():
    assert randomize_time("09:00", 0) == "09:00"
    assert randomize_time("bogus", 6) == "bogus"


def test_same_day_jitter_never_crosses_midnight():
    rng = random.Random(42)
    late = {randomize_time_same_day("23:58", 6, rng) for _ in range(200)}
    early = {randomize_time_same_day("00:03", 6, rng) for _ in range(200)}

    assert min(late) >= "23:52" and max(late) <= "23:59"
    assert min(early) >= "00:00" and max(early) <= "00:09"
    # Both clamped edges are reachable
    assert "23:59" in late and "00:00" in early


def test_same_day_jitter_keeps_full_window_away_from_midnight():
    rng = random.Random(42)
    shifted = {randomize_time_same_day("12:00", 6, rng) for _ in range(500)}
    assert shifted == {format_minutes(parse_time("12:00") + offset) for offset in range(-6, 7)}
    assert randomize_time_same_day("bogus", 6) == "bogus"


def test_day_of_week_is_monday_based():
    assert get_current_day_of_week(date(2025, 11, 17)) == 1
    assert get_current_day_of_week(datetime(2025, 11, 23, 12, 0)) == 7
