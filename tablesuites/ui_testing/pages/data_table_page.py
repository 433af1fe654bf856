"""
================================================================================
Data Table Page Object (Async / Playwright)
================================================================================

Page object for one configured table target. Composes the toolkit:
root resolution once per test, control lookup before every interaction,
and fresh table reads for every observation.

Highlights:
  - Interactions only through ControlHandles; each click/fill expires them
  - Baseline precondition (table visible, at least one data row)
  - Observation helpers shaped for `poll_until`

================================================================================
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import allure
from loguru import logger
from playwright.async_api import Page, expect

from table_tools.common.global_config import get_config
from tablesuites.ui_testing.framework.page_base import BasePage
from tablesuites.ui_testing.framework.poller import poll_until
from tablesuites.ui_testing.framework.root_resolver import QueryRoot, resolve_root
from tablesuites.ui_testing.framework.smart_locator import ControlHandle, SmartLocator
from tablesuites.ui_testing.framework.sort_order import ColumnSnapshot, declared_direction
from tablesuites.ui_testing.framework.table_reader import TableReader
from tablesuites.ui_testing.framework.target_config import (
    SEARCH_INPUT,
    TableTarget,
    control_specs,
)


class DataTablePage(BasePage):
    """Data-table showcase page object (async)."""

    def __init__(self, page: Page, target: TableTarget):
        super().__init__(page, target.url)
        self.target = target
        self.specs = control_specs(target)
        self._root: Optional[QueryRoot] = None
        self._reader: Optional[TableReader] = None
        self._smart: Optional[SmartLocator] = None

    # =========================================================================
    # Setup
    # =========================================================================

    @allure.step("Open table target")
    async def open(self) -> "DataTablePage":
        await self.navigate(timeout=get_config("timeouts.navigation", 30000))
        await self.resolve_root()
        return self

    async def resolve_root(self) -> QueryRoot:
        """Resolve the query root once; later calls reuse it."""
        if self._root is None:
            self._root = await resolve_root(
                self.page,
                self.target.frame_title,
                detect_timeout=get_config("timeouts.frame_detect", 5000),
                attach_timeout=get_config("timeouts.frame_attach", 15000),
            )
            self._reader = TableReader(
                self._root,
                table_selector=self.target.table_selector,
                status_selector=self.target.status_selector,
                no_data_pattern=self.target.no_data_pattern,
            )
            self._smart = SmartLocator(self._root)
        return self._root

    @property
    def root(self) -> QueryRoot:
        if self._root is None:
            raise RuntimeError("Page not opened. Call open() first.")
        return self._root

    @property
    def reader(self) -> TableReader:
        if self._reader is None:
            raise RuntimeError("Page not opened. Call open() first.")
        return self._reader

    @property
    def smart(self) -> SmartLocator:
        if self._smart is None:
            raise RuntimeError("Page not opened. Call open() first.")
        return self._smart

    @allure.step("Verify table baseline")
    async def verify_baseline(self) -> int:
        """
        Table is visible and renders at least one data row.

        Returns:
            Baseline row count
        """
        timeout = get_config("timeouts.baseline", 15000)
        await expect(self.reader.table).to_be_visible(timeout=timeout)
        rows = await poll_until(
            self.reader.row_count,
            lambda n: n > 0,
            timeout=timeout,
            scenario="baseline",
            message="table to render at least one data row",
        )
        logger.info(f"[{self.target.name}] baseline: {rows} rows ({self.root.scope} root)")
        return rows

    # =========================================================================
    # Controls
    # =========================================================================

    async def find(self, control: str) -> Optional[ControlHandle]:
        """Resolve a control afresh; None when this target does not expose it."""
        return await self.smart.find(self.specs[control])

    async def click(self, handle: ControlHandle) -> None:
        """Click through a fresh handle; every handle expires afterwards."""
        handle.ensure_fresh(self.root)
        with allure.step(f"Click: {handle.control}"):
            await handle.locator.click()
        self.root.touch()

    async def fill(self, handle: ControlHandle, value: str, submit: bool = True) -> None:
        """Fill an input through a fresh handle, optionally pressing Enter."""
        handle.ensure_fresh(self.root)
        with allure.step(f"Fill {handle.control}: {value!r}"):
            await handle.locator.fill(value)
            if submit:
                await handle.locator.press("Enter")
        self.root.touch()

    async def click_control(self, control: str) -> Optional[ControlHandle]:
        """Re-resolve `control` and click it; None (no click) when absent."""
        handle = await self.find(control)
        if handle is not None:
            await self.click(handle)
        return handle

    async def wait_for_search_input(self) -> ControlHandle:
        """Poll until the search input is present in the DOM."""
        return await poll_until(
            lambda: self.find(SEARCH_INPUT),
            lambda handle: handle is not None,
            timeout=get_config("timeouts.rerender", 5000),
            scenario="rerender",
            message="search input to be present",
        )

    # =========================================================================
    # Observations (fresh reads, shaped for poll_until)
    # =========================================================================

    async def column_snapshot(self, index: int) -> List[str]:
        return await self.reader.column_values(index, limit=self.target.sample_rows or None)

    async def sort_snapshot(self, index: int) -> ColumnSnapshot:
        """Column values together with the direction the header declares."""
        values = await self.column_snapshot(index)
        declared = declared_direction(await self.reader.header_sort(index))
        return ColumnSnapshot(values=tuple(values), declared=declared)

    async def observed_total(self) -> int:
        """Reported status total, or the rendered row count when none is shown."""
        return await self.reader.observed_total()

    async def visible_detail_panels(self) -> int:
        return await self.reader.visible_count(self.target.detail_panel_selector)

    async def visible_header_filters(self) -> int:
        return await self.reader.visible_count(self.target.header_filter_selector)

    async def describe_state(self) -> Dict[str, Any]:
        if self._reader is None:
            return {"target": self.target.name, "root": None}
        status_total, rows = await self.reader.status_total(), await self.reader.row_count()
        return {
            "target": self.target.name,
            "root": self.root.scope,
            "generation": self.root.generation,
            "status_total": status_total,
            "rows": rows,
            "locator_health": self.smart.get_health_report(),
        }


__all__ = [
    "DataTablePage",
]
