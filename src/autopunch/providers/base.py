"""
Base interface for attendance portal providers.

Every portal integration implements AttendanceProvider. The automation core
only ever talks to this interface; which implementation is used is decided
by configuration (see providers.factory).
"""
from abc import ABC, abstractmethod

from autopunch.models import Credentials, ProviderResult


class AttendanceProvider(ABC):
    """A portal the automation can punch in and out of."""

    #: Registry key, set by providers.factory.register_provider
    name: str = "base"

    @abstractmethod
    def login(self, credentials: Credentials) -> ProviderResult:
        """
        Punch in for the given user.

        Returns:
            ProviderResult; actual_time holds the portal's "in" time when known
        """

    @abstractmethod
    def logout(self, credentials: Credentials) -> ProviderResult:
        """
        Punch out for the given user.

        Returns:
            ProviderResult; actual_time holds the portal's "out" time when known
        """

    @abstractmethod
    def health_check(self) -> bool:
        """Check if the portal is reachable."""

    def close(self) -> None:
        """Release provider resources."""
