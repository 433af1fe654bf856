"""
In-memory stand-ins for the parts of the Playwright locator API the toolkit
uses, so locator strategies and table reads can be tested without a browser.
"""

from __future__ import annotations

import re
from typing import Dict, Iterator, List, Optional

from playwright.async_api import TimeoutError as PlaywrightTimeoutError


_ATTR_SUBSTRING = re.compile(r'^\[([\w-]+)\*="([^"]*)"( i)?\]$')


class FakeElement:
    def __init__(
        self,
        role: Optional[str] = None,
        name: str = "",
        text: str = "",
        attrs: Optional[Dict[str, str]] = None,
        children: Optional[List["FakeElement"]] = None,
        css: Optional[Dict[str, List["FakeElement"]]] = None,
        header_index: Optional[int] = None,
        visible: bool = True,
    ):
        self.role = role
        self.name = name
        self.text = text
        self.attrs = attrs or {}
        self.children = children or []
        self.css = css or {}
        self.header_index = header_index
        self.visible = visible
        self.clicks = 0

    def walk(self) -> Iterator["FakeElement"]:
        for child in self.children:
            yield child
            yield from child.walk()


class FakeLocator:
    def __init__(self, elements: List[FakeElement]):
        self.elements = list(elements)

    async def count(self) -> int:
        return len(self.elements)

    @property
    def first(self) -> "FakeLocator":
        return FakeLocator(self.elements[:1])

    @property
    def last(self) -> "FakeLocator":
        return FakeLocator(self.elements[-1:])

    async def get_attribute(self, name: str) -> Optional[str]:
        return self.elements[0].attrs.get(name)

    def _descendants(self) -> Iterator[FakeElement]:
        for element in self.elements:
            yield from element.walk()

    def get_by_role(self, role: str, name=None, **kwargs) -> "FakeLocator":
        matches = []
        for el in self._descendants():
            if el.role != role:
                continue
            if name is not None and not re.search(name, el.name):
                continue
            matches.append(el)
        return FakeLocator(matches)

    def get_by_text(self, text, **kwargs) -> "FakeLocator":
        return FakeLocator([el for el in self._descendants() if el.text and re.search(text, el.text)])

    def locator(self, selector: str, **kwargs) -> "FakeLocator":
        matches: List[FakeElement] = []
        for element in self.elements:
            matches.extend(element.css.get(selector, []))
        if matches:
            return FakeLocator(matches)

        attr = _ATTR_SUBSTRING.match(selector)
        if attr:
            key, needle, insensitive = attr.groups()
            flags = re.IGNORECASE if insensitive else 0
            return FakeLocator([
                el for el in self._descendants()
                if key in el.attrs and re.search(re.escape(needle), el.attrs[key], flags)
            ])
        return FakeLocator([])

    async def evaluate(self, expression: str):
        return self.elements[0].header_index

    async def evaluate_all(self, expression: str) -> int:
        return sum(1 for el in self.elements if el.visible)

    async def inner_text(self) -> str:
        return self.elements[0].text

    async def all_inner_texts(self) -> List[str]:
        return [el.text for el in self.elements]

    async def wait_for(self, state: str = "visible", timeout: Optional[float] = None) -> None:
        if not self.elements:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for {state}")

    async def click(self, **kwargs) -> None:
        for el in self.elements[:1]:
            el.clicks += 1


def document(*children: FakeElement, css: Optional[Dict[str, List[FakeElement]]] = None) -> FakeLocator:
    """A locator over a fake document element, usable as a QueryRoot handle."""
    return FakeLocator([FakeElement(role="document", children=list(children), css=css)])


def make_table(rows: List[List[str]], placeholder: Optional[str] = None) -> FakeElement:
    """
    Fake table element answering the selectors TableReader uses.

    Args:
        rows: Cell texts per row
        placeholder: When given, a single "no records" row with this text
    """
    if placeholder is not None:
        row_elements = [FakeElement(role="row", text=placeholder)]
        css = {"tbody tr": row_elements, "tbody tr td:nth-child(1)": [FakeElement(text=placeholder)]}
        return FakeElement(role="table", children=row_elements, css=css)

    row_elements = [FakeElement(role="row", text="\t".join(cells)) for cells in rows]
    css: Dict[str, List[FakeElement]] = {"tbody tr": row_elements}
    width = max((len(cells) for cells in rows), default=0)
    for column in range(1, width + 1):
        css[f"tbody tr td:nth-child({column})"] = [
            FakeElement(text=cells[column - 1]) for cells in rows if len(cells) >= column
        ]
    return FakeElement(role="table", children=row_elements, css=css)
