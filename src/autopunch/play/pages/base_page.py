"""
Page object model for the portal base page.
Shared waiting and screenshot helpers for every portal page.
"""
import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Union

from playwright.sync_api import Locator, Page

logger = logging.getLogger(__name__)


class BasePage:
    """Represents any portal page"""

    def __init__(self, page: Page) -> None:
        self.page = page

    def take_screenshot(self, filename: Optional[str] = None, directory: Union[str, Path] = "screenshots") -> str:
        """
        Take a full-page screenshot of the current page.

        Args:
            filename: Optional filename; a timestamped name is generated otherwise
            directory: Directory the screenshot is written to

        Returns:
            Path to the saved screenshot
        """
        if filename is None:
            filename = f"screenshot_{datetime.now().strftime('%Y%m%d_%H%M%S')}.png"
        if not filename.endswith(".png"):
            filename = f"{filename}.png"

        screenshot_dir = Path(directory)
        screenshot_dir.mkdir(parents=True, exist_ok=True)

        screenshot_path = screenshot_dir / filename
        self.page.screenshot(path=str(screenshot_path), full_page=True)
        logger.info(f"Screenshot saved to {screenshot_path}")
        return str(screenshot_path)

    def is_element_visible(
            self,
            locator_or_getter: Union[Locator, Callable[[], Locator]],
            timeout: int = 5000
        ) -> bool:
        """
        Check if an element is visible on the page (Non-blocking check).

        Args:
            locator_or_getter: either a Locator or a callable that returns a Locator
            timeout: Maximum time to wait in milliseconds
        """
        try:
            self.wait_for_element(locator_or_getter, state="visible", timeout=timeout)
            return True
        except Exception:
            return False

    def wait_for_element(
        self,
        locator_or_getter: Union[Locator, Callable[[], Locator]],
        state: str = "visible",
        timeout: int = 10000
    ) -> Locator:
        """
        Wait for an element to reach a specific state.

        Args:
            locator_or_getter: Either a Locator or a callable (e.g., property) that returns a Locator
            state: "visible", "attached", "detached" or "hidden"
            timeout: Maximum time to wait in milliseconds

        Returns:
            The Locator that was waited for (useful for chaining)

        Raises:
            TimeoutError: If element doesn't reach the state within timeout
        """
        locator = locator_or_getter() if callable(locator_or_getter) else locator_or_getter
        locator.wait_for(state=state, timeout=timeout)
        return locator

    def wait_for_idle(self, timeout: int = 1000) -> None:
        """Short fixed wait for UI updates right after an action."""
        self.page.wait_for_timeout(timeout)
