"""
Attendance portal providers.
"""
from .base import AttendanceProvider
from .factory import available_providers, create_provider, register_provider

__all__ = [
    "AttendanceProvider",
    "available_providers",
    "create_provider",
    "register_provider",
]
