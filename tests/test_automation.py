from datetime import datetime, timezone

import pytest

from conftest import FakeProvider, FixedClock, at, make_user, today

from autopunch.automation import CREDENTIALS_UNAVAILABLE, QueueProcessor, get_current_execution_context
from autopunch.exceptions import StoreReadFailure, StoreWriteFailure
from autopunch.executor import ActionExecutor
from autopunch.models import Action


@pytest.fixture()
def clock():
    return FixedClock(at("2025-11-17T09:00"))


@pytest.fixture()
def make_processor(user_store, log_store, cipher, automation_config, clock):
    def factory(provider, logs=None):
        executor = ActionExecutor(provider, user_store, automation_config, sleep=lambda _: None, clock=clock)
        return QueueProcessor(user_store, logs or log_store, cipher, executor, automation_config, clock=clock)
    return factory


def store_users(user_store, cipher, *users):
    user_store.write_all([
        user if user.password else make_user(
            user.id, user.login_time, user.logout_time, user.weekdays,
            password=cipher.encrypt(f"{user.id}-secret"), status=user.today_status,
        )
        for user in users
    ])


def test_execution_context():
    context = get_current_execution_context(datetime(2025, 11, 23, 7, 5, tzinfo=timezone.utc))
    assert context.current_time == "07:05"
    assert context.current_day == 7
    assert context.current_date == "2025-11-23"


def test_cycle_logs_in_eligible_users(user_store, log_store, cipher, make_processor):
    store_users(user_store, cipher, make_user(), make_user("bob", login_time="10:00"))
    provider = FakeProvider()

    summary = make_processor(provider).process()

    assert not summary.aborted
    assert [(r.user_id, r.action) for r in summary.results] == [("alice", Action.LOGIN)]
    assert provider.calls == [("login", "alice", "alice-secret")]

    logs = log_store.query_filtered()
    assert len(logs) == 1
    assert logs[0].user_id == "alice"
    assert logs[0].scheduled_time == "09:00"
    assert logs[0].success and logs[0].error is None
    assert user_store.get("alice").today_status.login_success


def test_logins_run_before_logouts(user_store, cipher, make_processor, clock):
    clock.set("2025-11-17T23:10+00:00")
    # bob is logged in and past the logout time; carol never logged in and hits the emergency window
    store_users(
        user_store, cipher,
        make_user("bob", status=today(login_success=True)),
        make_user("carol", login_time="23:05", logout_time="23:50",
                  status=today(randomized_login_time="23:05", randomized_logout_time="23:50")),
    )
    provider = FakeProvider()
    summary = make_processor(provider).process()

    # Past the emergency start nobody logs in; both are logged out
    assert [(r.user_id, r.action) for r in summary.results] == [
        ("bob", Action.LOGOUT), ("carol", Action.LOGOUT)
    ]


def test_login_first_then_logout_order(user_store, cipher, make_processor, clock):
    clock.set("2025-11-17T12:02+00:00")
    store_users(
        user_store, cipher,
        make_user("early", login_time="08:00", logout_time="12:00",
                  status=today(randomized_login_time="08:00", randomized_logout_time="12:00")),
        make_user("late", login_time="12:00", logout_time="17:00",
                  status=today(randomized_login_time="12:00", randomized_logout_time="17:00")),
    )
    provider = FakeProvider()
    summary = make_processor(provider).process()

    assert [(r.user_id, r.action) for r in summary.results] == [
        ("early", Action.LOGIN), ("late", Action.LOGIN), ("early", Action.LOGOUT)
    ]


def test_failed_action_is_logged(user_store, log_store, cipher, make_processor):
    store_users(user_store, cipher, make_user())
    provider = FakeProvider(outcomes=["denied", "denied", "denied"])

    summary = make_processor(provider).process()

    assert summary.failed == 1
    log = log_store.query_filtered()[0]
    assert not log.success
    assert log.error == "Login action failed: denied"
    status = user_store.get("alice").today_status
    assert status.login_attempts == 1
    assert status.last_error == "denied"


def test_undecryptable_password_is_logged_without_provider_call(user_store, log_store, make_processor):
    user_store.write_all([make_user(password="not-a-valid-blob!")])
    provider = FakeProvider()

    summary = make_processor(provider).process()

    assert provider.calls == []
    assert summary.results[0].error == CREDENTIALS_UNAVAILABLE
    log = log_store.query_filtered()[0]
    assert not log.success and log.error == CREDENTIALS_UNAVAILABLE
    # Status is not touched for a user that could not be processed
    assert user_store.get("alice").today_status.login_attempts == 0


def test_one_failing_item_does_not_stop_the_cycle(user_store, cipher, make_processor, monkeypatch):
    store_users(user_store, cipher, make_user(), make_user("bob"))
    provider = FakeProvider()
    processor = make_processor(provider)
    original = processor.executor.execute

    def flaky_execute(user, action, credentials):
        if user.id == "alice":
            raise StoreWriteFailure("disk full")
        return original(user, action, credentials)

    monkeypatch.setattr(processor.executor, "execute", flaky_execute)
    summary = processor.process()

    assert [(r.user_id, r.success) for r in summary.results] == [("alice", False), ("bob", True)]
    assert summary.results[0].error == "disk full"


def test_log_append_failure_is_swallowed(user_store, cipher, make_processor):
    class BrokenLogStore:
        def append(self, log):
            raise StoreWriteFailure("db gone")

    store_users(user_store, cipher, make_user())
    summary = make_processor(FakeProvider(), logs=BrokenLogStore()).process()

    assert summary.succeeded == 1
    assert user_store.get("alice").today_status.login_success


def test_unreadable_store_aborts_cycle(user_store, make_processor):
    user_store.path.write_text("{not json", encoding="utf-8")
    provider = FakeProvider()

    summary = make_processor(provider).process()

    assert summary.aborted
    assert summary.results == []
    assert provider.calls == []
    with pytest.raises(StoreReadFailure):
        user_store.read_all()


def test_emergency_logout_fires_without_login(user_store, log_store, cipher, make_processor, clock):
    clock.set("2025-11-17T23:30+00:00")
    store_users(user_store, cipher, make_user(status=today(login_success=False, login_attempts=40)))
    provider = FakeProvider()

    make_processor(provider).process()

    assert provider.calls == [("logout", "alice", "alice-secret")]
    status = user_store.get("alice").today_status
    assert status.logout_success and not status.login_success
    assert log_store.query_filtered()[0].scheduled_time == "18:00"
