"""
Exception types for attendance automation.

Not-eligible outcomes are never exceptions: eligibility and status helpers
return False or empty lists for those.
"""
from typing import List, Optional


class AutopunchError(Exception):
    """Base class for all autopunch errors."""


class ConfigurationError(AutopunchError):
    """Raised when required configuration is missing or invalid."""


class InvalidTimeFormat(AutopunchError, ValueError):
    """Raised when a time string is not a valid 24-hour HH:MM value."""

    def __init__(self, value: str, reason: str = "Expected HH:MM"):
        self.value = value
        super().__init__(f"Invalid time format: {value!r}. {reason}")


class UserNotFound(AutopunchError, LookupError):
    """Raised when a user id is not present in the user store."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"User not found: {user_id}")


class DecryptionFailure(AutopunchError):
    """Raised when a stored credential blob cannot be decrypted."""


class ProviderFailure(AutopunchError):
    """Raised by a provider when the portal rejects or breaks an action."""


class StoreError(AutopunchError):
    """Base class for storage errors."""


class StoreReadFailure(StoreError):
    """Raised when a store cannot be read or holds malformed data."""


class StoreWriteFailure(StoreError):
    """Raised when a store cannot persist a write."""


class ValidationFailed(AutopunchError):
    """Raised when a user payload fails validation."""

    def __init__(self, errors: List[str], message: Optional[str] = None):
        self.errors = list(errors)
        super().__init__(message or "Validation failed")
