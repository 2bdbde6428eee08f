"""
Page Object Model for the portal home page attendance widget.

The widget shows one toggle button whose label is "Sign In" while the user
is signed out and "Sign Out" while signed in, together with the in and out
swipe times for the day.
"""
import logging
import re
from typing import Optional

from playwright.sync_api import Locator, Page

from autopunch.play.pages.base_page import BasePage

logger = logging.getLogger(__name__)

SIGN_IN_LABEL = "Sign In"
SIGN_OUT_LABEL = "Sign Out"

_TIME_PATTERN = re.compile(r"(\d{1,2}:\d{2})(?:\s*([AaPp][Mm]))?")


class AttendancePage(BasePage):
    """Represents the attendance widget on the portal dashboard."""

    def __init__(self, page: Page):
        super().__init__(page)

    @property
    def widget(self) -> Locator:
        return self.page.locator("gt-attendance-info").first

    @property
    def toggle_button(self) -> Locator:
        """The Sign In / Sign Out button (Playwright pierces the shadow root)."""
        return self.widget.locator("gt-button button").first

    @property
    def in_time_label(self) -> Locator:
        return self.widget.locator(".in-time, [data-test='in-time']").first

    @property
    def out_time_label(self) -> Locator:
        return self.widget.locator(".out-time, [data-test='out-time']").first

    def wait_for_widget_load(self, timeout: int = 30000) -> None:
        self.wait_for_element(self.toggle_button, timeout=timeout)

    def toggle_label(self) -> str:
        return (self.toggle_button.text_content() or "").strip()

    def is_signed_in(self) -> bool:
        return self.toggle_label() == SIGN_OUT_LABEL

    def sign_in(self) -> bool:
        """
        Click Sign In unless already signed in.

        Returns:
            True if the button was clicked
        """
        if self.is_signed_in():
            logger.info("Already signed in, not clicking")
            return False
        self.toggle_button.click()
        self.wait_for_idle(2000)
        return True

    def sign_out(self) -> bool:
        """
        Click Sign Out unless already signed out.

        Returns:
            True if the button was clicked
        """
        if not self.is_signed_in():
            logger.info("Already signed out, not clicking")
            return False
        self.toggle_button.click()
        self.wait_for_idle(2000)
        return True

    def read_in_time(self) -> Optional[str]:
        return self._read_time(self.in_time_label)

    def read_out_time(self) -> Optional[str]:
        return self._read_time(self.out_time_label)

    def _read_time(self, label: Locator) -> Optional[str]:
        if not self.is_element_visible(label, timeout=2000):
            return None
        return parse_portal_time(label.text_content() or "")


def parse_portal_time(text: str) -> Optional[str]:
    """
    Normalize a time shown by the portal to 24-hour HH:MM.

    Example:
        parse_portal_time("09:05 AM")  # "09:05"
        parse_portal_time("6:30 pm")   # "18:30"
        parse_portal_time("--:--")     # None
    """
    match = _TIME_PATTERN.search(text)
    if not match:
        return None

    hours, minutes = (int(part) for part in match.group(1).split(":"))
    meridiem = (match.group(2) or "").lower()
    if meridiem == "pm" and hours < 12:
        hours += 12
    elif meridiem == "am" and hours == 12:
        hours = 0

    if hours > 23 or minutes > 59:
        return None
    return f"{hours:02d}:{minutes:02d}"
