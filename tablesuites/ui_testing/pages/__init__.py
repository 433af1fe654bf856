"""
================================================================================
Page Objects
================================================================================

Page Object Model implementations for the table targets.

Each page class encapsulates:
    - Query root and control lookup
    - Page-specific actions
    - Observation helpers used by polled assertions

Author: Automation Team
License: MIT
================================================================================
"""

from .data_table_page import DataTablePage

__all__ = [
    "DataTablePage",
]
