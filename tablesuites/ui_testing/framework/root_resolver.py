"""
================================================================================
Query Root Resolution
================================================================================

The showcase renders its table either directly in the page (canvas URL) or
inside a named preview iframe (full Storybook UI). `resolve_root` detects
which one applies and returns a `QueryRoot` that all lookups go through, so
a test never mixes document and frame queries.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Any, Optional, Union

import allure
from loguru import logger
from playwright.async_api import FrameLocator, Locator, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError


DOCUMENT = "document"
FRAME = "frame"


class QueryRoot:
    """
    Uniform lookup scope over a Page or a FrameLocator.

    Also carries the mutation generation used to expire control handles:
    every click/fill performed through the page object calls `touch()`.
    """

    def __init__(self, handle: Union[Page, FrameLocator], scope: str = DOCUMENT):
        self.handle = handle
        self.scope = scope
        self.generation = 0

    @property
    def is_frame(self) -> bool:
        return self.scope == FRAME

    def touch(self) -> int:
        """Mark the UI as mutated; handles resolved earlier are now stale."""
        self.generation += 1
        return self.generation

    def locator(self, selector: str, **kwargs: Any) -> Locator:
        return self.handle.locator(selector, **kwargs)

    def get_by_role(self, role: str, **kwargs: Any) -> Locator:
        return self.handle.get_by_role(role, **kwargs)

    def get_by_text(self, text: Any, **kwargs: Any) -> Locator:
        return self.handle.get_by_text(text, **kwargs)

    def get_by_placeholder(self, text: Any, **kwargs: Any) -> Locator:
        return self.handle.get_by_placeholder(text, **kwargs)

    def __repr__(self) -> str:
        return f"QueryRoot(scope={self.scope!r}, generation={self.generation})"


def frame_selector(frame_title: str) -> str:
    return f'iframe[title="{frame_title}"]'


async def _frame_present(page: Page, selector: str, detect_timeout: int) -> bool:
    iframe = page.locator(selector)
    if await iframe.count():
        return True
    if detect_timeout <= 0:
        return False
    try:
        await iframe.first.wait_for(state="attached", timeout=detect_timeout)
        return True
    except PlaywrightTimeoutError:
        return False


async def resolve_root(
    page: Page,
    frame_title: Optional[str],
    *,
    detect_timeout: int = 5000,
    attach_timeout: int = 15000,
) -> QueryRoot:
    """
    Resolve the query root for the current page.

    Args:
        page: Loaded Playwright page
        frame_title: Title of the preview iframe, or None for canvas pages
        detect_timeout: Grace period (ms) for the iframe to appear at all
        attach_timeout: Bound (ms) for a present iframe to attach its document

    Returns:
        Frame-scoped QueryRoot when the iframe exists, else the page itself

    Raises:
        playwright TimeoutError: If the iframe is present but never attaches
    """
    if not frame_title:
        logger.debug("No frame title configured, using document root")
        return QueryRoot(page, DOCUMENT)

    selector = frame_selector(frame_title)
    with allure.step(f"Resolve query root ({selector})"):
        if not await _frame_present(page, selector, detect_timeout):
            logger.info(f"No '{frame_title}' iframe on page, using document root")
            return QueryRoot(page, DOCUMENT)

        await page.locator(selector).first.wait_for(state="attached", timeout=attach_timeout)
        frame = page.frame_locator(selector).first
        await frame.locator("body").wait_for(state="attached", timeout=attach_timeout)
        logger.info(f"Using '{frame_title}' iframe as query root")
        return QueryRoot(frame, FRAME)


__all__ = [
    "DOCUMENT",
    "FRAME",
    "QueryRoot",
    "frame_selector",
    "resolve_root",
]
