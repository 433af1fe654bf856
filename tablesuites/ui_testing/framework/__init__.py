"""
================================================================================
UI Verification Toolkit
================================================================================

Playwright-based toolkit for asserting on data tables whose markup is not
under our control.

Components:
    - root_resolver: Page vs. preview-iframe query root
    - smart_locator: Control discovery with ordered fallback strategies
    - table_reader: Row counts, column snapshots, reported totals
    - sort_order: Sort direction inference and toggle state machine
    - poller: Eventual-consistency polling
    - target_config: Parameterised table targets
    - page_base / browser_manager: Page object base and browser lifecycle

Author: Automation Team
License: MIT
================================================================================
"""

from .browser_manager import BrowserManager
from .page_base import BasePage
from .poller import PollConfig, PollTimeoutError, poll_until
from .root_resolver import QueryRoot, resolve_root
from .smart_locator import ControlHandle, ControlSpec, SmartLocator, StaleHandleError
from .sort_order import SortDirection, SortToggleTracker, classify
from .table_reader import TableReader, is_placeholder_row, parse_status_total
from .target_config import TableTarget, control_specs, load_targets

__all__ = [
    "BasePage",
    "BrowserManager",
    "ControlHandle",
    "ControlSpec",
    "PollConfig",
    "PollTimeoutError",
    "QueryRoot",
    "SmartLocator",
    "SortDirection",
    "SortToggleTracker",
    "StaleHandleError",
    "TableReader",
    "TableTarget",
    "classify",
    "control_specs",
    "is_placeholder_row",
    "load_targets",
    "parse_status_total",
    "poll_until",
    "resolve_root",
]
