import random
from datetime import datetime, timezone

import pytest
from sqlalchemy.orm import sessionmaker

from autopunch.db.database import build_engine
from autopunch.kms import CredentialCipher
from autopunch.models import Credentials, ProviderResult, TodayStatus, User
from autopunch.providers import AttendanceProvider
from autopunch.storage import JsonUserStore, SqlLogStore

TEST_KEY = bytes(range(32))

# Monday
MONDAY = "2025-11-17"


class FakeProvider(AttendanceProvider):
    """Scripted provider: pops one outcome per call, then repeats the default."""

    name = "fake"

    def __init__(self, outcomes=None, healthy=True, actual_time="09:01"):
        self.outcomes = list(outcomes or [])
        self.healthy = healthy
        self.actual_time = actual_time
        self.calls = []
        self.health_checks = 0
        self.closed = False

    def _next(self, action, credentials):
        self.calls.append((action, credentials.user_id, credentials.password))
        outcome = self.outcomes.pop(0) if self.outcomes else True
        if isinstance(outcome, Exception):
            raise outcome
        if outcome is True:
            return ProviderResult(success=True, actual_time=self.actual_time)
        return ProviderResult(success=False, message=outcome or None)

    def login(self, credentials: Credentials) -> ProviderResult:
        return self._next("login", credentials)

    def logout(self, credentials: Credentials) -> ProviderResult:
        return self._next("logout", credentials)

    def health_check(self) -> bool:
        self.health_checks += 1
        return self.healthy

    def close(self) -> None:
        self.closed = True


class FixedClock:
    """Callable clock tests can move forward by hand."""

    def __init__(self, moment: datetime):
        self.moment = moment

    def __call__(self) -> datetime:
        return self.moment

    def set(self, value: str) -> None:
        self.moment = datetime.fromisoformat(value)


def at(value: str) -> datetime:
    """Aware datetime from 'YYYY-MM-DDTHH:MM'."""
    return datetime.fromisoformat(value).replace(tzinfo=timezone.utc)


def make_user(user_id="alice", login_time="09:00", logout_time="18:00", weekdays=(1, 2, 3, 4, 5),
              password="", status=None) -> User:
    return User(
        id=user_id,
        password=password,
        login_time=login_time,
        logout_time=logout_time,
        weekdays=tuple(weekdays),
        today_status=status,
    )


def today(date=MONDAY, **fields) -> TodayStatus:
    """Status for a given date with targets equal to 09:00/18:00 unless overridden."""
    fields.setdefault("randomized_login_time", "09:00")
    fields.setdefault("randomized_logout_time", "18:00")
    return TodayStatus(date=date, **fields)


@pytest.fixture()
def automation_config():
    return {
        "cron_schedule": "* * * * *",
        "time_window_minutes": 6,
        "randomize_window_minutes": 0,
        "max_retry_attempts": 3,
        "retry_delay_seconds": 5.0,
        "extended_retry_hours": 2.0,
        "emergency_logout_start": "23:00",
        "emergency_logout_end": "23:59",
        "enable_automation": False,
    }


@pytest.fixture()
def cipher():
    return CredentialCipher(TEST_KEY)


@pytest.fixture()
def user_store(tmp_path):
    store = JsonUserStore(tmp_path / "data" / "users.json")
    store.ensure_file_exists()
    return store


@pytest.fixture()
def db_config(tmp_path):
    return {"database_url": f"sqlite:///{tmp_path / 'logs.db'}", "echo": False}


@pytest.fixture()
def log_store(db_config):
    engine = build_engine(db_config)
    yield SqlLogStore(sessionmaker(bind=engine))
    engine.dispose()


@pytest.fixture()
def provider():
    return FakeProvider()


@pytest.fixture()
def rng():
    return random.Random(1234)
