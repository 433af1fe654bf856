"""
================================================================================
Detail Panel UI Tests (Async / Playwright)
================================================================================

Expanding a row shows exactly one detail panel; collapsing it again hides
it. The expand button usually relabels itself ("Expand" -> "Collapse"), so
the collapse click looks for either label.

================================================================================
"""

import allure
import pytest

from tablesuites.ui_testing.framework.poller import poll_until
from tablesuites.ui_testing.framework.target_config import ROW_COLLAPSE, ROW_EXPAND
from tablesuites.ui_testing.pages.data_table_page import DataTablePage


@allure.epic("UI Testing")
@allure.feature("Detail Panel")
class TestDetailPanel:
    """Row expand/collapse suite (async)."""

    @allure.story("Expand / Collapse")
    @allure.title("Expanding a row shows one detail panel, collapsing hides it")
    @allure.severity(allure.severity_level.NORMAL)
    @pytest.mark.P2
    @pytest.mark.detail_panel
    @pytest.mark.asyncio(loop_scope="session")
    async def test_expand_then_collapse(self, table_page: DataTablePage):
        """0 -> 1 -> 0 visible detail panels."""
        if await table_page.visible_detail_panels():
            pytest.skip(f"[{table_page.target.name}] detail panels are open by default")

        with allure.step("Expand first row"):
            expanded = await table_page.click_control(ROW_EXPAND)
            if expanded is None:
                pytest.skip(f"[{table_page.target.name}] rows expose no expand control")
            await poll_until(
                table_page.visible_detail_panels,
                lambda count: count == 1,
                scenario="rerender",
                message="exactly one detail panel to be visible",
            )

        with allure.step("Collapse it again"):
            collapse = await table_page.find(ROW_COLLAPSE) or await table_page.find(ROW_EXPAND)
            assert collapse is not None, "expand/collapse control vanished after expanding"
            await table_page.click(collapse)
            await poll_until(
                table_page.visible_detail_panels,
                lambda count: count == 0,
                scenario="rerender",
                message="no detail panel to be visible",
            )
