"""
================================================================================
Browser Manager
================================================================================

Browser lifecycle management for the table suites.

Features:
    - Single browser instance per session
    - Isolated context per test (no state shared between tests)
    - Video recording and Playwright tracing with retain-on-failure policy
    - Browser configuration presets

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Any, Dict, List, Optional

from loguru import logger
from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Playwright,
)


# Default output directory for videos and traces
ARTIFACTS_DIR = Path(__file__).parent.parent / "artifacts"

SUPPORTED_BROWSERS = ("chromium", "firefox", "webkit")


class BrowserManager:
    """
    Manages the browser instance and per-test contexts.

    Usage:
        async with BrowserManager(browser_type="firefox") as manager:
            context = await manager.new_context(artifact_name="test_sort")
            page = await context.new_page()
            ...
            await manager.close_context(context, failed=False)
    """

    # Default browser launch options
    DEFAULT_LAUNCH_OPTIONS: Dict[str, Any] = {
        "headless": True,
        "args": [
            "--disable-features=IsolateOrigins,site-per-process",
        ],
    }

    # Default context options
    DEFAULT_CONTEXT_OPTIONS: Dict[str, Any] = {
        "viewport": {"width": 1920, "height": 1080},
        "ignore_https_errors": True,
        "locale": "en-US",
    }

    def __init__(
        self,
        headless: bool = True,
        browser_type: str = "chromium",
        video: str = "retain-on-failure",
        trace: str = "retain-on-failure",
        artifacts_dir: Optional[Path] = None,
    ):
        """
        Initialize browser manager.

        Args:
            headless: Run browser in headless mode
            browser_type: Browser to use - 'chromium', 'firefox', 'webkit'
            video: 'off', 'on' or 'retain-on-failure'
            trace: 'off', 'on' or 'retain-on-failure'
            artifacts_dir: Where videos and traces are written
        """
        if browser_type not in SUPPORTED_BROWSERS:
            raise ValueError(
                f"Unsupported browser '{browser_type}', expected one of {SUPPORTED_BROWSERS}"
            )
        self.headless = headless
        self.browser_type = browser_type
        self.video = video
        self.trace = trace
        self.artifacts_dir = artifacts_dir or ARTIFACTS_DIR

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._contexts: List[BrowserContext] = []
        self._artifact_names: Dict[int, str] = {}

    async def __aenter__(self) -> "BrowserManager":
        """Async context manager entry - start browser."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit - close browser."""
        await self.close()

    async def start(self) -> None:
        """Start Playwright and launch browser."""
        self._playwright = await async_playwright().start()
        browser_launcher = getattr(self._playwright, self.browser_type)

        launch_options = {
            **self.DEFAULT_LAUNCH_OPTIONS,
            "headless": self.headless,
        }
        if self.browser_type != "chromium":
            launch_options.pop("args")

        self._browser = await browser_launcher.launch(**launch_options)
        logger.debug(
            f"Browser started: {self.browser_type} "
            f"(headless={self.headless})"
        )

    async def close(self) -> None:
        """Close all contexts and browser."""
        for context in list(self._contexts):
            await context.close()
        self._contexts.clear()

        if self._browser:
            await self._browser.close()
            self._browser = None

        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

        logger.debug("Browser closed")

    def _video_dir(self, artifact_name: str) -> Path:
        return self.artifacts_dir / "videos" / artifact_name

    def trace_path(self, artifact_name: str) -> Path:
        return self.artifacts_dir / "traces" / f"{artifact_name}.zip"

    async def new_context(
        self,
        artifact_name: str = "context",
        **options: Any,
    ) -> BrowserContext:
        """
        Create new isolated browser context.

        Args:
            artifact_name: File-safe name for this context's video/trace
            **options: Additional context options

        Returns:
            New BrowserContext
        """
        if not self._browser:
            raise RuntimeError("Browser not started. Call start() first.")

        context_options = {**self.DEFAULT_CONTEXT_OPTIONS, **options}
        if self.video != "off":
            context_options["record_video_dir"] = str(self._video_dir(artifact_name))

        context = await self._browser.new_context(**context_options)
        if self.trace != "off":
            await context.tracing.start(screenshots=True, snapshots=True, sources=False)

        self._contexts.append(context)
        self._artifact_names[id(context)] = artifact_name
        return context

    async def close_context(self, context: BrowserContext, failed: bool = False) -> Dict[str, Path]:
        """
        Close a context, keeping its artifacts according to the retention policy.

        Args:
            context: Context created by `new_context`
            failed: Whether the test using it failed

        Returns:
            Mapping of kept artifact kind ('trace', 'video') to path
        """
        artifact_name = self._artifact_names.pop(id(context), "context")
        kept: Dict[str, Path] = {}

        if self.trace != "off":
            if self.trace == "on" or failed:
                path = self.trace_path(artifact_name)
                path.parent.mkdir(parents=True, exist_ok=True)
                await context.tracing.stop(path=str(path))
                kept["trace"] = path
            else:
                await context.tracing.stop()

        await context.close()
        if context in self._contexts:
            self._contexts.remove(context)

        video_dir = self._video_dir(artifact_name)
        if self.video != "off" and video_dir.exists():
            if self.video == "on" or failed:
                for video in sorted(video_dir.glob("*.webm")):
                    kept["video"] = video
            else:
                shutil.rmtree(video_dir, ignore_errors=True)

        if kept:
            logger.info(f"Kept artifacts for {artifact_name}: {', '.join(map(str, kept.values()))}")
        return kept

    @property
    def browser(self) -> Optional[Browser]:
        """Get browser instance."""
        return self._browser


__all__ = [
    "ARTIFACTS_DIR",
    "BrowserManager",
    "SUPPORTED_BROWSERS",
]
