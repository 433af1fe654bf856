"""
================================================================================
Smart Locator for Drifting Table Markup
================================================================================

Control discovery with ordered fallback strategies:
    - role:     accessible role + name pattern, scoped to the table structure
    - nested:   interactive child of a structurally matched element
                (e.g. the sort button inside a column header)
    - fallback: attribute substring / free text anywhere in the root

The first strategy yielding a match wins. When nothing matches the control
is reported absent (None), which callers treat as "not exposed by this
configuration" rather than an error.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Pattern, Tuple

from loguru import logger
from playwright.async_api import Locator

from .root_resolver import QueryRoot


DEFAULT_STRATEGIES: Tuple[str, ...] = ("role", "nested", "fallback")

# 1-based position of the enclosing header cell among its siblings
HEADER_INDEX_JS = """
el => {
    const cell = el.closest('th, [role="columnheader"]');
    if (!cell || !cell.parentElement) return null;
    return Array.prototype.indexOf.call(cell.parentElement.children, cell) + 1;
}
"""


class StaleHandleError(RuntimeError):
    """Raised when a control handle is used after the UI was mutated."""
    pass


@dataclass(frozen=True)
class ControlSpec:
    """
    Declarative description of a control.

    Attributes:
        name: Human-readable control name (logging/reporting)
        role: ARIA role of the interactive element
        patterns: Accessible-name regexes, highest priority first
        scope: CSS selector narrowing role/nested matches (e.g. "table thead")
        container_role: Role of the structural parent for the nested strategy
        container_patterns: Accessible-name regexes for that parent
            (defaults to `patterns`)
        child_patterns: Preferred accessible names of the nested child;
            any child with `role` is used when none of them match
        attributes: (attribute, substring) pairs for the fallback strategy
        text_patterns: Visible-text regexes for the fallback strategy
        strategies: Strategy names in the order they are tried
        column_index: Whether to derive the governing column index
    """
    name: str
    role: str
    patterns: Tuple[str, ...] = ()
    scope: Optional[str] = None
    container_role: Optional[str] = None
    container_patterns: Tuple[str, ...] = ()
    child_patterns: Tuple[str, ...] = ()
    attributes: Tuple[Tuple[str, str], ...] = ()
    text_patterns: Tuple[str, ...] = ()
    strategies: Tuple[str, ...] = DEFAULT_STRATEGIES
    column_index: bool = False

    def compiled(self) -> List[Pattern[str]]:
        return _compile(self.patterns)

    def compiled_containers(self) -> List[Pattern[str]]:
        return _compile(self.container_patterns or self.patterns)

    def compiled_children(self) -> List[Pattern[str]]:
        return _compile(self.child_patterns)


def _compile(patterns: Tuple[str, ...]) -> List[Pattern[str]]:
    return [re.compile(p, re.IGNORECASE) for p in patterns]


@dataclass
class ControlHandle:
    """
    Short-lived reference to a located control.

    Valid only for the root generation it was resolved at; any click or fill
    through the page object bumps the generation and expires it.
    """
    locator: Locator
    control: str
    strategy: str
    generation: int
    column_index: Optional[int] = None

    def is_stale(self, root: QueryRoot) -> bool:
        return self.generation != root.generation

    def ensure_fresh(self, root: QueryRoot) -> None:
        if self.is_stale(root):
            raise StaleHandleError(
                f"Handle for '{self.control}' was resolved at generation {self.generation}, "
                f"UI is now at generation {root.generation}; re-resolve it before interacting"
            )


@dataclass
class LocatorHealth:
    """
    Tracks which strategy resolved a control.

    Attributes:
        control: Control name
        strategy: Strategy that produced the match
        used_fallback: Whether a lower-priority strategy was needed
    """
    control: str
    strategy: str
    used_fallback: bool = False


class SmartLocator:
    """
    Finds controls inside a QueryRoot using ordered fallback strategies.

    Usage:
        >>> smart = SmartLocator(root)
        >>> handle = await smart.find(sort_spec)
        >>> if handle is None:
        ...     pytest.skip("no sortable column")
        >>> handle.column_index
        2
    """

    def __init__(self, root: QueryRoot):
        self.root = root
        self._fallback_used: Dict[str, LocatorHealth] = {}
        self._strategies = {
            "role": self._match_role,
            "nested": self._match_nested,
            "fallback": self._match_fallback,
        }

    def _scope(self, spec: ControlSpec):
        if spec.scope:
            return self.root.locator(spec.scope).first
        return self.root

    async def _match_role(self, spec: ControlSpec) -> Optional[Locator]:
        scope = self._scope(spec)
        for pattern in spec.compiled():
            candidates = scope.get_by_role(spec.role, name=pattern)
            if await candidates.count():
                return candidates.first
        return None

    async def _match_nested(self, spec: ControlSpec) -> Optional[Locator]:
        if not spec.container_role:
            return None
        scope = self._scope(spec)
        for pattern in spec.compiled_containers():
            container = scope.get_by_role(spec.container_role, name=pattern).first
            if not await container.count():
                continue
            for child_pattern in spec.compiled_children():
                named = container.get_by_role(spec.role, name=child_pattern)
                if await named.count():
                    return named.first
            child = container.get_by_role(spec.role)
            if await child.count():
                return child.first
            # Header without an inner button is itself the click target
            return container
        return None

    async def _match_fallback(self, spec: ControlSpec) -> Optional[Locator]:
        for attribute, substring in spec.attributes:
            candidates = self.root.locator(f'[{attribute}*="{substring}" i]')
            if await candidates.count():
                return candidates.first
        for text in spec.text_patterns:
            candidates = self.root.get_by_text(re.compile(text, re.IGNORECASE))
            if await candidates.count():
                return candidates.first
        return None

    async def column_index_of(self, locator: Locator) -> Optional[int]:
        """1-based index of the header cell enclosing `locator`, re-read from the DOM."""
        index = await locator.evaluate(HEADER_INDEX_JS)
        return int(index) if index else None

    async def find(self, spec: ControlSpec) -> Optional[ControlHandle]:
        """
        Locate a control, trying each strategy in priority order.

        Args:
            spec: Control description

        Returns:
            ControlHandle for the first match, or None if the control is absent
        """
        primary = spec.strategies[0] if spec.strategies else None

        for strategy in spec.strategies:
            locator = await self._strategies[strategy](spec)
            if locator is None:
                continue

            column_index = None
            if spec.column_index:
                column_index = await self.column_index_of(locator)
                if column_index is None:
                    logger.debug(f"'{spec.name}' matched by {strategy} outside any header cell")
                    continue

            health = LocatorHealth(
                control=spec.name,
                strategy=strategy,
                used_fallback=strategy != primary,
            )
            if health.used_fallback:
                logger.warning(f"⚠️ Control '{spec.name}' used fallback strategy: {strategy}")
                self._fallback_used[spec.name] = health
            else:
                logger.debug(f"✅ Control '{spec.name}' found via {strategy}")

            return ControlHandle(
                locator=locator,
                control=spec.name,
                strategy=strategy,
                generation=self.root.generation,
                column_index=column_index,
            )

        logger.info(f"Control '{spec.name}' not present (tried: {', '.join(spec.strategies)})")
        return None

    def get_health_report(self) -> str:
        """
        Summarize controls that needed a fallback strategy.

        Returns:
            Formatted health report string
        """
        if not self._fallback_used:
            return "✅ All controls resolved by their primary strategy."

        report_lines = [
            "⚠️ Locator Health Report - Fallbacks Used:",
            "",
        ]
        for control, health in self._fallback_used.items():
            report_lines.append(f"  [{control}] resolved via {health.strategy}")
        return "\n".join(report_lines)


__all__ = [
    "ControlHandle",
    "ControlSpec",
    "LocatorHealth",
    "SmartLocator",
    "StaleHandleError",
]
