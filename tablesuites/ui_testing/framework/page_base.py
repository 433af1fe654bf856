"""
================================================================================
Base Page Object
================================================================================

Foundation class for Page Object Model implementation.

Provides:
    - Navigation to an absolute target URL
    - Screenshot capture with Allure attachment
    - Failure diagnostics (screenshot, URL, console errors)

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import allure
from loguru import logger
from playwright.async_api import ConsoleMessage, Page

from table_tools.report_tools.allure_utils import attach_json, attach_text


# Default output directory for screenshots
SCREENSHOT_DIR = Path(__file__).parent.parent / "screenshots"


class BasePage:
    """
    Base class for all page objects.

    Usage:
        class ShowcasePage(BasePage):
            async def open(self):
                await self.navigate()
                return self
    """

    def __init__(self, page: Page, url: str):
        """
        Initialize page object.

        Args:
            page: Playwright Page object
            url: Absolute URL of the page under test
        """
        self.page = page
        self.url = url

        # Console errors help explain a table that never rendered
        self._console_errors: List[Dict[str, Any]] = []
        self.page.on("console", self._capture_console)

    def _capture_console(self, message: ConsoleMessage) -> None:
        if message.type != "error":
            return
        self._console_errors.append({
            "timestamp": datetime.now().isoformat(),
            "text": message.text[:500],
        })
        # Keep only last 20 errors
        if len(self._console_errors) > 20:
            self._console_errors.pop(0)

    async def navigate(self, wait_for: str = "domcontentloaded", timeout: Optional[int] = None) -> None:
        """
        Navigate to this page.

        Args:
            wait_for: Wait condition - 'load', 'domcontentloaded', 'networkidle'
            timeout: Navigation timeout in milliseconds
        """
        with allure.step(f"Navigate to {self.url}"):
            await self.page.goto(self.url, wait_until=wait_for, timeout=timeout)
            logger.debug(f"Navigated to: {self.url}")

    # =========================================================================
    # Screenshot and Debug Utilities
    # =========================================================================

    async def screenshot(
        self,
        name: str,
        full_page: bool = False,
        attach_to_allure: bool = True,
    ) -> Path:
        """
        Take screenshot and optionally attach to Allure.

        Args:
            name: Screenshot name (without extension)
            full_page: Capture full scrollable page
            attach_to_allure: Whether to attach to Allure report

        Returns:
            Path to saved screenshot
        """
        SCREENSHOT_DIR.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filepath = SCREENSHOT_DIR / f"{name}_{timestamp}.png"

        await self.page.screenshot(path=str(filepath), full_page=full_page)

        if attach_to_allure:
            allure.attach.file(
                str(filepath),
                name=name,
                attachment_type=allure.attachment_type.PNG,
            )

        logger.debug(f"Screenshot saved: {filepath}")
        return filepath

    async def describe_state(self) -> Dict[str, Any]:
        """Page-specific state attached on failure. Override in subclasses."""
        return {}

    async def capture_failure(self, test_name: str) -> None:
        """
        Capture debugging information on test failure.

        Saves:
            - Screenshot
            - Current URL
            - Page-specific state (see `describe_state`)
            - Recent console errors
        """
        with allure.step("Capture failure details"):
            await self.screenshot(f"failure_{test_name}", full_page=True)
            attach_text(self.page.url, name="Current URL")

            state = await self.describe_state()
            if state:
                attach_json(state, name="Observed state")

            if self._console_errors:
                attach_json(self._console_errors[-10:], name="Console errors")


__all__ = [
    "BasePage",
    "SCREENSHOT_DIR",
]
