"""
Page Object Model for the attendance portal login page.
"""
from typing import Optional

from playwright.sync_api import Locator, Page

from autopunch.play.pages.base_page import BasePage


class LoginPage(BasePage):
    """Represents the portal login page."""

    def __init__(self, page: Page):
        super().__init__(page)
        self._login_url = "/"

    def goto(self, base_url: Optional[str] = None) -> None:
        """
        Navigate to the login page.

        Args:
            base_url: Optional base URL. If not provided, uses relative path.
        """
        if base_url:
            self.page.goto(f"{base_url.rstrip('/')}{self._login_url}")
        else:
            self.page.goto(self._login_url)

    @property
    def username_input(self) -> Locator:
        return self.page.locator("#username").first

    @property
    def password_input(self) -> Locator:
        return self.page.locator("#password").first

    @property
    def sign_in_button(self) -> Locator:
        return self.page.get_by_role("button", name="Login").or_(
            self.page.locator("button[type='submit']")
        ).first

    @property
    def error_message(self) -> Locator:
        """Inline error shown after a rejected login."""
        return self.page.locator(".alert-danger, .error-message, [role='alert']").first

    def login(self, username: str, password: str) -> None:
        """
        Perform complete login flow.

        Args:
            username: Username to login with
            password: Password to login with
        """
        self.username_input.fill(username)
        self.password_input.fill(password)
        self.sign_in_button.click()

    def wait_for_page_load(self) -> None:
        """Wait for the login form to be attached to the DOM."""
        self.wait_for_element(self.username_input, state="attached")
        self.wait_for_element(self.sign_in_button, state="attached")

    def has_login_error(self) -> bool:
        return self.is_element_visible(self.error_message, timeout=2000)

    def get_login_error_message(self) -> Optional[str]:
        if not self.has_login_error():
            return None
        text = self.error_message.text_content()
        return text.strip() if text else None
