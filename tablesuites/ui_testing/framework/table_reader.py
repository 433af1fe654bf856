"""
================================================================================
Table State Reader
================================================================================

Reads the rendered state of a data table: row count, column snapshots and
the total reported by the pagination/status text. Every call reads the DOM
afresh; nothing is cached between calls.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import re
from typing import Iterable, List, Optional

from loguru import logger
from playwright.async_api import Locator

from .root_resolver import QueryRoot


DEFAULT_NO_DATA_PATTERN = r"no\s+(?:records|rows|data|results)"

# "1-10 of 2,000", "1–10 of 1 234" (NBSP / narrow NBSP as thousands separator)
STATUS_TOTAL_RE = re.compile(
    r"\bof\s+(\d{1,3}(?:[,. \u00a0\u202f]\d{3})+|\d+)(?!\d)",
    re.IGNORECASE,
)

# Counts elements that are rendered and not hidden by CSS
VISIBLE_COUNT_JS = """
els => els.filter(el => {
    const style = window.getComputedStyle(el);
    if (style.visibility === 'hidden' || style.display === 'none') return false;
    const rect = el.getBoundingClientRect();
    return rect.width > 0 && rect.height > 0;
}).length
"""


def is_placeholder_row(text: str, pattern: str = DEFAULT_NO_DATA_PATTERN) -> bool:
    """Whether a row's text is the "no records" placeholder."""
    return re.search(pattern, text or "", re.IGNORECASE) is not None


def parse_status_total(texts: Iterable[str]) -> Optional[int]:
    """
    Extract the reported total from status texts.

    Args:
        texts: Text of every candidate status element, in DOM order

    Returns:
        The first "of <number>" total that parses, or None

    Examples:
        >>> parse_status_total(["1–10 of 2,000"])
        2000
        >>> parse_status_total(["Rows per page", "1-10 of 1 234"])
        1234
    """
    for text in texts:
        for match in STATUS_TOTAL_RE.finditer(text or ""):
            digits = re.sub(r"\D", "", match.group(1))
            if digits:
                return int(digits)
    return None


class TableReader:
    """
    Reads table state inside a QueryRoot.

    Usage:
        reader = TableReader(root, table_selector="table.mantine-Table-root")
        rows = await reader.row_count()
        names = await reader.column_values(2)
    """

    def __init__(
        self,
        root: QueryRoot,
        table_selector: str = "table",
        status_selector: str = "",
        no_data_pattern: str = DEFAULT_NO_DATA_PATTERN,
    ):
        self.root = root
        self.table_selector = table_selector
        self.status_selector = status_selector
        self.no_data_pattern = no_data_pattern

    @property
    def table(self) -> Locator:
        return self.root.locator(self.table_selector).first

    @property
    def rows(self) -> Locator:
        return self.table.locator("tbody tr")

    async def _only_placeholder(self, count: int) -> bool:
        if count != 1:
            return False
        return is_placeholder_row(await self.rows.first.inner_text(), self.no_data_pattern)

    async def row_count(self) -> int:
        """Rendered data rows; the single "no records" row counts as zero."""
        count = await self.rows.count()
        if await self._only_placeholder(count):
            return 0
        return count

    async def column_values(self, index: int, limit: Optional[int] = None) -> List[str]:
        """
        Trimmed text of every rendered cell in a column, top to bottom.

        Args:
            index: 1-based column index
            limit: Optional maximum number of rows to read
        """
        if index < 1:
            raise ValueError(f"Column index is 1-based, got {index}")
        if await self._only_placeholder(await self.rows.count()):
            return []
        cells = self.table.locator(f"tbody tr td:nth-child({index})")
        values = [text.strip() for text in await cells.all_inner_texts()]
        return values[:limit] if limit else values

    async def header_sort(self, index: int) -> Optional[str]:
        """Raw `aria-sort` of the 1-based column's leaf header cell, or None."""
        headers = self.table.locator(f"thead tr th:nth-child({index})")
        if not await headers.count():
            return None
        return await headers.last.get_attribute("aria-sort")

    async def status_total(self) -> Optional[int]:
        """Total reported by the status text, or None when not shown."""
        if not self.status_selector:
            return None
        texts = await self.root.locator(self.status_selector).all_inner_texts()
        return parse_status_total(texts)

    async def observed_total(self) -> int:
        """Status total, falling back to the rendered row count."""
        total = await self.status_total()
        if total is None:
            total = await self.row_count()
            logger.debug(f"No status total shown, using row count: {total}")
        return total

    async def visible_count(self, selector: str) -> int:
        """Number of rendered, visible elements matching `selector`."""
        return await self.root.locator(selector).evaluate_all(VISIBLE_COUNT_JS)


__all__ = [
    "DEFAULT_NO_DATA_PATTERN",
    "TableReader",
    "is_placeholder_row",
    "parse_status_total",
]
