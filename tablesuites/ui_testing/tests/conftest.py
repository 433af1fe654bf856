"""
================================================================================
UI Testing Pytest Configuration
================================================================================

This module configures pytest for the browser suites, providing fixtures for
browser management, the table page object and failure diagnostics.

Key Features:
- Every test runs once per configured table target
- Session browser, isolated context per test
- Baseline precondition (table visible, rows > 0) before feature logic
- Screenshot, trace and video attached to Allure on failure

================================================================================
"""

import re
from typing import AsyncGenerator

import allure
import pytest
import pytest_asyncio
from loguru import logger
from playwright.async_api import BrowserContext, Page

from table_tools.common.global_config import get_config
from table_tools.report_tools.allure_utils import attach_file
from tablesuites.ui_testing.framework.browser_manager import BrowserManager
from tablesuites.ui_testing.framework.target_config import TableTarget, load_targets
from tablesuites.ui_testing.pages.data_table_page import DataTablePage


# ================================================================================
# Parametrisation
# ================================================================================

def pytest_generate_tests(metafunc):
    """Instantiate every test that takes `target` once per configured target."""
    if "target" in metafunc.fixturenames:
        targets = load_targets()
        metafunc.parametrize("target", targets, ids=[t.name for t in targets])


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """Expose each phase's report on the item so fixtures can see failures."""
    outcome = yield
    report = outcome.get_result()
    setattr(item, f"rep_{report.when}", report)


def _failed(request) -> bool:
    node = request.node
    return any(
        getattr(node, f"rep_{phase}", None) is not None and getattr(node, f"rep_{phase}").failed
        for phase in ("setup", "call")
    )


def _artifact_name(request) -> str:
    return re.sub(r"[^\w.-]+", "_", request.node.name)[:120]


# ================================================================================
# Browser Fixtures
# ================================================================================

@pytest_asyncio.fixture(scope="session", loop_scope="session")
async def browser_manager(pytestconfig) -> AsyncGenerator[BrowserManager, None]:
    """
    Session-scoped browser manager fixture.

    A single browser per session (per xdist worker); contexts isolate tests.
    """
    manager = BrowserManager(
        headless=not pytestconfig.getoption("--headed") and get_config("browser.headless", True),
        browser_type=pytestconfig.getoption("--browser-type") or get_config("browser.type", "chromium"),
        video=get_config("browser.video", "retain-on-failure"),
        trace=get_config("browser.trace", "retain-on-failure"),
    )
    await manager.start()
    yield manager
    await manager.close()


@pytest_asyncio.fixture(loop_scope="session")
async def context(browser_manager: BrowserManager, request) -> AsyncGenerator[BrowserContext, None]:
    """
    Function-scoped browser context fixture.

    Trace and video are kept and attached only when the test failed.
    """
    context = await browser_manager.new_context(artifact_name=_artifact_name(request))
    yield context
    kept = await browser_manager.close_context(context, failed=_failed(request))
    for kind, path in kept.items():
        attach_file(path, name=kind)


@pytest_asyncio.fixture(loop_scope="session")
async def page(context: BrowserContext) -> AsyncGenerator[Page, None]:
    """Function-scoped page fixture."""
    page = await context.new_page()
    yield page
    await page.close()


# ================================================================================
# Page Object Fixtures
# ================================================================================

async def _capture(table: DataTablePage, request) -> None:
    try:
        await table.capture_failure(_artifact_name(request))
    except Exception as e:
        # Diagnostics must not mask the original failure
        logger.warning(f"Failed to capture failure details: {e}")


@pytest_asyncio.fixture(loop_scope="session")
async def table_page(page: Page, target: TableTarget, request) -> AsyncGenerator[DataTablePage, None]:
    """
    Opened table page that passed the baseline precondition.

    A table that never becomes visible or has no rows fails here, before
    any feature-specific logic runs.
    """
    allure.dynamic.parameter("target", target.name)
    table = DataTablePage(page, target)
    try:
        await table.open()
        await table.verify_baseline()
    except Exception:
        await _capture(table, request)
        raise

    yield table

    if _failed(request):
        await _capture(table, request)
