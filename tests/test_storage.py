import json
import os

import pytest

from conftest import at, make_user, today

from autopunch.exceptions import StoreReadFailure, StoreWriteFailure, UserNotFound
from autopunch.models import Action, AttendanceLog
from autopunch.storage import JsonUserStore


def test_missing_file_is_created_empty(tmp_path):
    store = JsonUserStore(tmp_path / "nested" / "users.json")
    assert store.read_all() == []
    assert json.loads(store.path.read_text()) == []


def test_round_trip_uses_camel_case(user_store):
    user = make_user(password="blob", status=today(login_success=True, actual_in_time="09:01"))
    user_store.write_all([user])

    raw = json.loads(user_store.path.read_text())[0]
    assert raw["loginTime"] == "09:00"
    assert raw["weekdays"] == [1, 2, 3, 4, 5]
    assert raw["todayStatus"]["loginSuccess"] is True
    assert raw["todayStatus"]["actualInTime"] == "09:01"
    assert "lastError" not in raw["todayStatus"]

    assert user_store.read_all() == [user]


def test_get_and_update(user_store):
    user_store.write_all([make_user(), make_user("bob")])

    assert user_store.get("bob").id == "bob"
    with pytest.raises(UserNotFound):
        user_store.get("nobody")

    updated = user_store.update("bob", lambda user: user.with_status(today(login_attempts=1)))
    assert updated.today_status.login_attempts == 1
    assert user_store.get("bob").today_status.login_attempts == 1

    with pytest.raises(UserNotFound):
        user_store.update("nobody", lambda user: user)


@pytest.mark.parametrize("content", ["{broken", '{"id": "alice"}', '[{"password": "x"}]'])
def test_malformed_file_raises_read_failure(user_store, content):
    user_store.path.write_text(content)
    with pytest.raises(StoreReadFailure):
        user_store.read_all()


def test_failed_write_keeps_previous_file(user_store, monkeypatch):
    user_store.write_all([make_user()])
    before = user_store.path.read_text()

    def broken_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(os, "replace", broken_replace)
    with pytest.raises(StoreWriteFailure):
        user_store.write_all([make_user("bob")])

    assert user_store.path.read_text() == before
    # The temporary file was cleaned up
    assert [p.name for p in user_store.path.parent.iterdir()] == ["users.json"]


def log(user_id, action=Action.LOGIN, success=True, minute=0):
    return AttendanceLog(
        user_id=user_id,
        action=action,
        scheduled_time="09:00",
        execution_time=at(f"2025-11-17T09:{minute:02d}").isoformat(),
        success=success,
        error=None if success else "boom",
    )


def test_log_query_filters_and_orders(log_store):
    log_store.append(log("alice", minute=1))
    log_store.append(log("bob", minute=2))
    log_store.append(log("alice", Action.LOGOUT, success=False, minute=3))

    entries = log_store.query_filtered(user_id="alice")
    assert [entry.execution_time for entry in entries] == [
        at("2025-11-17T09:03").isoformat(),
        at("2025-11-17T09:01").isoformat(),
    ]
    assert entries[0] == log("alice", Action.LOGOUT, success=False, minute=3)

    assert len(log_store.query_filtered()) == 3
    assert [entry.user_id for entry in log_store.query_filtered(limit=2)] == ["alice", "bob"]


def test_log_to_dict():
    data = log("alice", success=False).to_dict()
    assert data == {
        "userId": "alice",
        "action": "login",
        "scheduledTime": "09:00",
        "executionTime": at("2025-11-17T09:00").isoformat(),
        "success": False,
        "error": "boom",
    }
