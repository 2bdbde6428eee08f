"""
Data models for the attendance automation workflow.

User and TodayStatus are frozen dataclasses: every change produces a new
snapshot via dataclasses.replace, and the canonical copy lives in the user
store. On disk they are serialized with camelCase keys.

For the database model of attendance logs (SQLAlchemy), see db.models.
"""
import enum
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, Optional, Tuple


class Action(str, enum.Enum):
    LOGIN = "login"
    LOGOUT = "logout"


class LockSource(str, enum.Enum):
    CRON = "cron"
    MANUAL = "manual"


@dataclass(frozen=True)
class TodayStatus:
    """
    Execution state of a single user for a single calendar day.

    Replaced wholesale (never merged) when the date changes.
    """
    date: str
    login_attempts: int = 0
    login_success: bool = False
    login_time: Optional[str] = None  # ISO timestamp of the last login attempt
    logout_attempts: int = 0
    logout_success: bool = False
    logout_time: Optional[str] = None
    randomized_login_time: Optional[str] = None
    randomized_logout_time: Optional[str] = None
    actual_in_time: Optional[str] = None  # as reported by the portal
    actual_out_time: Optional[str] = None
    last_error: Optional[str] = None

    def attempts(self, action: Action) -> int:
        return self.login_attempts if action == Action.LOGIN else self.logout_attempts

    def succeeded(self, action: Action) -> bool:
        return self.login_success if action == Action.LOGIN else self.logout_success

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "date": self.date,
            "loginAttempts": self.login_attempts,
            "loginSuccess": self.login_success,
            "loginTime": self.login_time,
            "logoutAttempts": self.logout_attempts,
            "logoutSuccess": self.logout_success,
            "logoutTime": self.logout_time,
            "randomizedLoginTime": self.randomized_login_time,
            "randomizedLogoutTime": self.randomized_logout_time,
            "actualInTime": self.actual_in_time,
            "actualOutTime": self.actual_out_time,
            "lastError": self.last_error,
        }
        return {key: value for key, value in data.items() if value is not None}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TodayStatus":
        return cls(
            date=data.get("date", ""),
            login_attempts=int(data.get("loginAttempts", 0)),
            login_success=bool(data.get("loginSuccess", False)),
            login_time=data.get("loginTime"),
            logout_attempts=int(data.get("logoutAttempts", 0)),
            logout_success=bool(data.get("logoutSuccess", False)),
            logout_time=data.get("logoutTime"),
            randomized_login_time=data.get("randomizedLoginTime"),
            randomized_logout_time=data.get("randomizedLogoutTime"),
            actual_in_time=data.get("actualInTime"),
            actual_out_time=data.get("actualOutTime"),
            last_error=data.get("lastError"),
        )


@dataclass(frozen=True)
class User:
    """
    A user whose attendance is automated.

    The password is the encrypted blob produced by kms.CredentialCipher; it
    is only decrypted right before an action is executed.
    """
    id: str
    password: str = field(repr=False)
    login_time: Optional[str] = None
    logout_time: Optional[str] = None
    weekdays: Tuple[int, ...] = ()
    today_status: Optional[TodayStatus] = None

    def scheduled_time(self, action: Action) -> Optional[str]:
        return self.login_time if action == Action.LOGIN else self.logout_time

    def with_status(self, status: TodayStatus) -> "User":
        return replace(self, today_status=status)

    def to_dict(self, include_password: bool = True) -> Dict[str, Any]:
        data: Dict[str, Any] = {"id": self.id}
        if include_password:
            data["password"] = self.password
        data["loginTime"] = self.login_time
        data["logoutTime"] = self.logout_time
        data["weekdays"] = list(self.weekdays)
        if self.today_status is not None:
            data["todayStatus"] = self.today_status.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "User":
        status = data.get("todayStatus")
        return cls(
            id=str(data["id"]),
            password=data.get("password", ""),
            login_time=data.get("loginTime"),
            logout_time=data.get("logoutTime"),
            weekdays=tuple(int(day) for day in data.get("weekdays", [])),
            today_status=TodayStatus.from_dict(status) if status else None,
        )


@dataclass(frozen=True)
class AttendanceLog:
    """Append-only audit record of one executed (or failed) action."""
    user_id: str
    action: Action
    scheduled_time: Optional[str]
    execution_time: str
    success: bool
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "userId": self.user_id,
            "action": self.action.value,
            "scheduledTime": self.scheduled_time,
            "executionTime": self.execution_time,
            "success": self.success,
        }
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(frozen=True)
class Credentials:
    """Plaintext portal credentials, alive only for one action."""
    user_id: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class ProviderResult:
    """Outcome of a single provider call."""
    success: bool
    actual_time: Optional[str] = None
    message: Optional[str] = None


@dataclass(frozen=True)
class ActionResult:
    """Outcome of an executor run (all attempts) for one user and action."""
    user_id: str
    action: Action
    success: bool
    attempts: int
    actual_time: Optional[str] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class EligibleUser:
    user: User
    action: Action


@dataclass(frozen=True)
class ExecutionContext:
    """Wall-clock snapshot used for one automation cycle."""
    current_time: str  # HH:MM
    current_day: int  # 1=Monday ... 7=Sunday
    current_date: str  # YYYY-MM-DD
    now: Optional[datetime] = None


@dataclass
class CycleSummary:
    """What a single queue processing cycle did."""
    context: Optional[ExecutionContext] = None
    results: list = field(default_factory=list)
    aborted: bool = False
    error: Optional[str] = None

    @property
    def succeeded(self) -> int:
        return sum(1 for result in self.results if result.success)

    @property
    def failed(self) -> int:
        return len(self.results) - self.succeeded
