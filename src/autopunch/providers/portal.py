"""
Playwright provider for the attendance web portal.

Each call launches a fresh headless browser, signs in with the user's
credentials, toggles the attendance widget and closes the browser again.
No browser state is shared between users or calls.
"""
import logging
from typing import Any, Dict, Optional

from playwright.sync_api import Error as PlaywrightError, Page, sync_playwright

from autopunch.exceptions import ProviderFailure
from autopunch.models import Action, Credentials, ProviderResult
from autopunch.play.pages import AttendancePage, LoginPage
from .base import AttendanceProvider
from .factory import register_provider

logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)


@register_provider("portal")
class PortalProvider(AttendanceProvider):

    def __init__(self, app_config: Dict[str, Any]):
        self.base_url = app_config.get("base_url", "")
        self.headless = app_config.get("headless", True)
        self.slow_mo = app_config.get("slow_mo", 0)
        self.timeout = app_config.get("default_timeout", 30000)
        self.screenshot_dir = app_config.get("screenshot_dir")

    def login(self, credentials: Credentials) -> ProviderResult:
        return self._perform(credentials, Action.LOGIN)

    def logout(self, credentials: Credentials) -> ProviderResult:
        return self._perform(credentials, Action.LOGOUT)

    def health_check(self) -> bool:
        """Check that the portal answers HTTP requests."""
        try:
            with sync_playwright() as p:
                request = p.request.new_context(timeout=10000)
                try:
                    response = request.get(self.base_url)
                    healthy = response.status < 500
                finally:
                    request.dispose()
        except PlaywrightError as e:
            logger.warning(f"Portal {self.base_url} is unreachable: {e}")
            return False

        if not healthy:
            logger.warning(f"Portal {self.base_url} returned HTTP {response.status}")
        return healthy

    def _perform(self, credentials: Credentials, action: Action) -> ProviderResult:
        """
        Run one login or logout in a fresh browser.

        Raises:
            ProviderFailure: If the portal rejects the credentials or the page
                does not behave as expected
        """
        logger.info(f"Starting {action.value} for user: {credentials.user_id}")

        try:
            with sync_playwright() as p:
                browser = p.chromium.launch(headless=self.headless, slow_mo=self.slow_mo)
                try:
                    context = browser.new_context(user_agent=USER_AGENT)
                    context.set_default_timeout(self.timeout)
                    page = context.new_page()
                    return self._run_flow(page, credentials, action)
                finally:
                    browser.close()
        except PlaywrightError as e:
            raise ProviderFailure(f"Browser error during {action.value}: {e}") from e

    def _run_flow(self, page: Page, credentials: Credentials, action: Action) -> ProviderResult:
        login_page = LoginPage(page)
        login_page.goto(self.base_url)
        login_page.wait_for_page_load()
        login_page.login(credentials.user_id, credentials.password)

        attendance_page = AttendancePage(page)
        try:
            attendance_page.wait_for_widget_load(timeout=self.timeout)
        except PlaywrightError:
            error_message = login_page.get_login_error_message()
            self._capture(login_page, credentials.user_id, "login_error")
            if error_message:
                raise ProviderFailure(f"Login failed: {error_message}")
            raise

        if action == Action.LOGIN:
            clicked = attendance_page.sign_in()
            actual_time = attendance_page.read_in_time()
            confirmed = attendance_page.is_signed_in()
        else:
            clicked = attendance_page.sign_out()
            actual_time = attendance_page.read_out_time()
            confirmed = not attendance_page.is_signed_in()

        if not confirmed:
            self._capture(attendance_page, credentials.user_id, f"{action.value}_unconfirmed")
            return ProviderResult(
                success=False,
                message=f"Portal did not confirm {action.value} (button: {attendance_page.toggle_label()!r})",
            )

        message = None if clicked else f"Already {'signed in' if action == Action.LOGIN else 'signed out'}"
        logger.info(f"{action.value} confirmed for user {credentials.user_id} (portal time: {actual_time})")
        return ProviderResult(success=True, actual_time=actual_time, message=message)

    def _capture(self, page_object, user_id: str, label: str) -> Optional[str]:
        if not self.screenshot_dir:
            return None
        try:
            return page_object.take_screenshot(f"{user_id}_{label}", directory=self.screenshot_dir)
        except PlaywrightError as e:
            logger.warning(f"Could not capture screenshot: {e}")
            return None
