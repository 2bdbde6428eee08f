"""Page Object Model classes for the attendance portal."""

from .base_page import BasePage
from .login_page import LoginPage
from .attendance_page import AttendancePage

__all__ = [
    "BasePage",
    "LoginPage",
    "AttendancePage",
]
