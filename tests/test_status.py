import random

from conftest import MONDAY, at, make_user, today

from autopunch.models import Action, TodayStatus
from autopunch.status import (
    get_initial_today_status,
    record_action_status,
    reset_if_needed,
    should_reset,
    update_action_status,
)


def test_should_reset():
    assert should_reset("2025-11-16", "2025-11-15")
    assert not should_reset("2025-11-16", "2025-11-16")
    assert should_reset("2025-11-16", None)


def test_initial_status_computes_targets_within_window():
    user = make_user()
    status = get_initial_today_status(MONDAY, user, 6, random.Random(7))
    assert status.date == MONDAY
    assert status.login_attempts == 0 and not status.login_success
    assert "08:54" <= status.randomized_login_time <= "09:06"
    assert "17:54" <= status.randomized_logout_time <= "18:06"


def test_initial_status_keeps_targets_on_the_same_day():
    rng = random.Random(1234)
    late = make_user(login_time="00:03", logout_time="23:58")
    for _ in range(200):
        status = get_initial_today_status(MONDAY, late, 6, rng)
        assert "00:00" <= status.randomized_login_time <= "00:09"
        assert "23:52" <= status.randomized_logout_time <= "23:59"


def test_initial_status_without_schedule_has_no_targets():
    user = make_user(login_time=None, logout_time=None)
    status = get_initial_today_status(MONDAY, user, 6)
    assert status.randomized_login_time is None
    assert status.randomized_logout_time is None


def test_reset_returns_same_object_on_same_day():
    user = make_user(status=today(login_success=True, login_attempts=2))
    assert reset_if_needed(user, MONDAY) is user


def test_reset_replaces_status_on_new_day():
    user = make_user(status=today(date="2025-11-16", login_success=True, last_error="boom"))
    reset = reset_if_needed(user, MONDAY)
    assert reset is not user
    assert reset.today_status == TodayStatus(
        date=MONDAY, randomized_login_time="09:00", randomized_logout_time="18:00"
    )
    # The input snapshot is untouched
    assert user.today_status.login_success


def test_update_counts_attempts_and_latches_success():
    user = make_user(status=today())
    now = at("2025-11-17T09:01")

    user = update_action_status(user, Action.LOGIN, True, actual_time="09:01", now=now)
    user = update_action_status(user, Action.LOGIN, False, error="late failure", now=now)

    status = user.today_status
    assert status.login_attempts == 2
    assert status.login_success is True
    assert status.actual_in_time == "09:01"
    assert status.login_time == now.isoformat()
    assert status.last_error == "late failure"


def test_last_error_survives_success_of_other_action():
    user = make_user(status=today())
    now = at("2025-11-17T18:00")

    user = update_action_status(user, Action.LOGIN, False, error="portal down", now=now)
    user = update_action_status(user, Action.LOGOUT, True, actual_time="18:00", now=now)

    assert user.today_status.logout_success
    assert user.today_status.last_error == "portal down"


def test_update_resets_stale_status_first():
    user = make_user(status=today(date="2025-11-16", login_attempts=3, login_success=True))
    user = update_action_status(user, Action.LOGOUT, False, error="x", now=at("2025-11-17T18:00"))

    status = user.today_status
    assert status.date == MONDAY
    assert status.login_attempts == 0
    assert not status.login_success
    assert status.logout_attempts == 1


def test_record_action_status_persists(user_store):
    user_store.write_all([make_user(status=today()), make_user("bob", status=today())])

    record_action_status(user_store, "bob", Action.LOGIN, True, actual_time="09:02",
                         now=at("2025-11-17T09:02"))

    alice, bob = user_store.read_all()
    assert alice.today_status.login_attempts == 0
    assert bob.today_status.login_success
    assert bob.today_status.actual_in_time == "09:02"
