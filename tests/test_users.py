import pytest

from conftest import make_user, today

from autopunch.exceptions import UserNotFound, ValidationFailed
from autopunch.services import UserService
from autopunch.validation import (
    validate_time_range,
    validate_user,
    validate_user_id,
    validate_weekdays,
)


@pytest.fixture()
def service(user_store, cipher):
    return UserService(user_store, cipher)


def payload(**overrides):
    data = {
        "id": "alice",
        "password": "hunter22",
        "loginTime": "09:00",
        "logoutTime": "18:00",
        "weekdays": [1, 2, 3, 4, 5],
    }
    data.update(overrides)
    return data


def test_user_id_rules():
    assert validate_user_id("alice_01-x") == []
    assert validate_user_id("") == ["User ID is required"]
    assert validate_user_id("a" * 51) == ["User ID must be 50 characters or less"]
    assert validate_user_id("bad id!") == [
        "User ID can only contain letters, numbers, hyphens, and underscores"
    ]


def test_time_range_rules():
    assert validate_time_range("09:00", "18:00") == []
    assert validate_time_range("18:00", "09:00") == ["Logout time must be after login time"]
    assert validate_time_range("09:00", "09:00") == ["Logout time must be after login time"]
    assert validate_time_range("9:00", "18:00") == [
        "Login time must be in HH:MM format (24-hour, e.g., 09:00 or 18:30)"
    ]
    # Either time may be left unscheduled
    assert validate_time_range(None, "18:00") == []
    assert validate_time_range("09:00", None) == []


def test_weekday_rules():
    assert validate_weekdays([]) == []
    assert validate_weekdays([1, 7]) == []
    assert validate_weekdays([0, 8]) == ["Weekdays must be numbers between 1 (Monday) and 7 (Sunday)"]
    assert validate_weekdays([1, 1]) == ["Weekdays cannot contain duplicates"]


def test_validate_user_collects_all_errors():
    errors = validate_user("", "123", "25:00", None, [9])
    assert len(errors) == 4


def test_sync_creates_user_with_encrypted_password(service, user_store, cipher):
    user, is_new = service.sync_user(payload())

    assert is_new
    stored = user_store.get("alice")
    assert stored == user
    assert stored.password != "hunter22"
    assert cipher.decrypt(stored.password) == "hunter22"
    assert stored.weekdays == (1, 2, 3, 4, 5)


def test_sync_create_requires_password(service):
    with pytest.raises(ValidationFailed) as exc_info:
        service.sync_user(payload(password=""))
    assert exc_info.value.errors == ["Password is required"]


def test_sync_update_keeps_password_and_status(service, user_store):
    first, _ = service.sync_user(payload())
    status = today(login_success=True, randomized_login_time="09:03")
    user_store.update("alice", lambda user: user.with_status(status))

    updated, is_new = service.sync_user(payload(password="", loginTime="10:00", weekdays=[1]))

    assert not is_new
    assert updated.password == first.password
    assert updated.login_time == "10:00"
    assert updated.weekdays == (1,)
    # Schedule edits apply from the next daily reset
    assert updated.today_status == status
    assert user_store.get("alice") == updated


def test_sync_update_with_new_password(service, cipher):
    service.sync_user(payload())
    updated, _ = service.sync_user(payload(password="n3w-password"))
    assert cipher.decrypt(updated.password) == "n3w-password"


def test_sync_update_validates_short_password(service):
    service.sync_user(payload())
    with pytest.raises(ValidationFailed) as exc_info:
        service.sync_user(payload(password="123"))
    assert exc_info.value.errors == ["Password must be at least 6 characters long"]


def test_invalid_sync_does_not_write(service, user_store):
    with pytest.raises(ValidationFailed):
        service.sync_user(payload(logoutTime="08:00"))
    assert user_store.read_all() == []


def test_get_and_delete(service, user_store):
    user_store.write_all([make_user(), make_user("bob")])

    assert service.get_user("bob").id == "bob"
    service.delete_user("bob")
    assert [user.id for user in user_store.read_all()] == ["alice"]

    with pytest.raises(UserNotFound):
        service.delete_user("bob")
    with pytest.raises(UserNotFound):
        service.get_user("bob")
