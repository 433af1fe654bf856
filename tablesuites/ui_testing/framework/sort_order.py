"""
================================================================================
Sort-Order Classification
================================================================================

Infers the sort direction of a rendered column from its text values and
tracks the click-by-click state machine of a sort toggle.

Sort toggles come in two flavours and the suite must accept both:
    - two-state:  asc -> desc -> asc -> ...
    - tri-state:  asc -> desc -> original order -> asc -> ...
(either may start with desc).

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple


class SortDirection(str, Enum):
    """Direction observed in a column snapshot."""

    ASCENDING = "ascending"
    DESCENDING = "descending"
    UNSORTED = "unsorted"

    @property
    def is_sorted(self) -> bool:
        return self is not SortDirection.UNSORTED


def collation_key(value: str) -> Tuple[str, str]:
    """
    Locale-aware ordering key for a cell value.

    Accents are stripped and case is folded so that "álvaro" sorts next to
    "Alvaro" the way browser string collation does; the raw value breaks ties
    so the ordering stays total.
    """
    decomposed = unicodedata.normalize("NFKD", value)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base.casefold(), value


def compare(a: str, b: str) -> int:
    """Three-way comparison using `collation_key` (-1, 0 or 1)."""
    ka, kb = collation_key(a)[0], collation_key(b)[0]
    if ka < kb:
        return -1
    if ka > kb:
        return 1
    return 0


def _pairs(values: Sequence[str]):
    return zip(values, values[1:])


def is_non_decreasing(values: Sequence[str]) -> bool:
    return all(compare(a, b) <= 0 for a, b in _pairs(values))


def is_non_increasing(values: Sequence[str]) -> bool:
    return all(compare(a, b) >= 0 for a, b in _pairs(values))


def classify(values: Sequence[str]) -> SortDirection:
    """
    Classify a column snapshot.

    Ascending wins when the snapshot is both non-decreasing and
    non-increasing (length <= 1, or all values equal).

    Args:
        values: Column values in rendered order

    Returns:
        The inferred SortDirection
    """
    values = list(values)
    if is_non_decreasing(values):
        return SortDirection.ASCENDING
    if is_non_increasing(values):
        return SortDirection.DESCENDING
    return SortDirection.UNSORTED


def opposite(direction: SortDirection) -> SortDirection:
    if direction is SortDirection.ASCENDING:
        return SortDirection.DESCENDING
    if direction is SortDirection.DESCENDING:
        return SortDirection.ASCENDING
    raise ValueError("UNSORTED has no opposite direction")


_ARIA_SORT = {
    "ascending": SortDirection.ASCENDING,
    "descending": SortDirection.DESCENDING,
    "none": SortDirection.UNSORTED,
}


def declared_direction(aria_sort: Optional[str]) -> Optional[SortDirection]:
    """
    Direction a header announces through `aria-sort`.

    Returns None when the attribute is missing or carries a value other
    than ascending/descending/none, i.e. the header declares nothing.
    """
    if not aria_sort:
        return None
    return _ARIA_SORT.get(aria_sort.strip().lower())


def matches_direction(values: Sequence[str], direction: SortDirection) -> bool:
    """Whether `values` are ordered consistently with a sorted `direction`."""
    if direction is SortDirection.ASCENDING:
        return is_non_decreasing(values)
    if direction is SortDirection.DESCENDING:
        return is_non_increasing(values)
    return False


# =============================================================================
# Toggle State Machine
# =============================================================================

RESTORED = "restored"


@dataclass(frozen=True)
class ColumnSnapshot:
    """
    One read of the sorted column.

    Attributes:
        values: Column values in rendered order
        declared: Direction announced by the header's aria-sort, if any
    """

    values: Tuple[str, ...]
    declared: Optional[SortDirection] = None


@dataclass
class SortObservation:
    """One accepted state after a click: a sorted direction or the restored baseline."""

    click: int
    state: str
    values: List[str]


@dataclass
class SortToggleTracker:
    """
    Tracks a sort control across consecutive clicks.

    The tracker never presumes two-state or tri-state behaviour. For every
    click it exposes the predicate the next column snapshot must satisfy:

        previous state                       accepted next state
        ----------------------------------   -------------------------------
        baseline / restored                  any sorted direction
        one sorted state                     the opposite direction
        two consecutive sorted states        the opposite direction, or the
                                             baseline order restored

    When the header declares its state through aria-sort, the declared
    direction is authoritative and the values must agree with it. Without
    it, the direction is inferred from the values alone, so a click on an
    already sorted baseline is accepted before the table re-renders.

    Usage:
        tracker = SortToggleTracker(baseline=await reader.column_values(idx))
        for _ in range(3):
            await click_sort()
            snapshot = await poll_until(read, tracker.expectation(), ...)
            tracker.record(snapshot.values, snapshot.declared)
    """

    baseline: List[str]
    history: List[SortObservation] = field(default_factory=list)

    def _sorted_streak(self) -> int:
        streak = 0
        for obs in reversed(self.history):
            if obs.state == RESTORED:
                break
            streak += 1
        return streak

    @property
    def last_direction(self) -> Optional[SortDirection]:
        if not self.history or self.history[-1].state == RESTORED:
            return None
        return SortDirection(self.history[-1].state)

    def allows_restore(self) -> bool:
        return self._sorted_streak() >= 2

    def _direction(self, values: List[str], declared: Optional[SortDirection]) -> Optional[SortDirection]:
        if declared is None:
            return classify(values)
        if not declared.is_sorted:
            return SortDirection.UNSORTED
        # Header already flipped but rows not re-rendered yet
        if not matches_direction(values, declared):
            return None
        return declared

    def accepts(self, values: Sequence[str], declared: Optional[SortDirection] = None) -> Optional[str]:
        """
        Return the state `values` would be recorded as, or None if the
        snapshot is not an acceptable successor of the current state.
        """
        values = list(values)
        direction = self._direction(values, declared)
        if direction is None:
            return None
        last = self.last_direction

        if last is None:
            return direction.value if direction.is_sorted else None
        if direction is opposite(last):
            return direction.value
        restorable = declared is None or not declared.is_sorted
        if restorable and self.allows_restore() and values == self.baseline:
            return RESTORED
        return None

    def expectation(self) -> Callable[[ColumnSnapshot], bool]:
        """Predicate for `poll_until` over ColumnSnapshots, bound to the current state."""
        return lambda snapshot: self.accepts(snapshot.values, snapshot.declared) is not None

    def describe_expectation(self) -> str:
        last = self.last_direction
        if last is None:
            return "column to become sorted (either direction)"
        wanted = f"column to flip to {opposite(last).value}"
        if self.allows_restore():
            wanted += " or return to its original order"
        return wanted

    def record(self, values: Sequence[str], declared: Optional[SortDirection] = None) -> SortObservation:
        """
        Record the snapshot accepted for the latest click.

        Raises:
            AssertionError: If the snapshot is not an acceptable successor
        """
        state = self.accepts(values, declared)
        if state is None:
            shown = declared.value if declared is not None else "undeclared"
            raise AssertionError(
                f"Unexpected sort state after click #{len(self.history) + 1}: "
                f"{classify(values).value} (header: {shown}) {list(values)!r}; "
                f"expected {self.describe_expectation()}"
            )
        observation = SortObservation(click=len(self.history) + 1, state=state, values=list(values))
        self.history.append(observation)
        return observation

    @property
    def states(self) -> List[str]:
        return [obs.state for obs in self.history]


__all__ = [
    "ColumnSnapshot",
    "SortDirection",
    "SortObservation",
    "SortToggleTracker",
    "RESTORED",
    "classify",
    "collation_key",
    "compare",
    "declared_direction",
    "matches_direction",
    "opposite",
]
