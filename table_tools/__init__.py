"""
================================================================================
Table Tools
================================================================================

Supporting utilities shared by the data-table suites.

Modules:
    - common: Configuration loading and Loguru logging setup
    - report_tools: Allure attachment helpers for failure diagnostics

Example:
    from table_tools.common import get_config, init_logger

    init_logger()
    timeout = get_config("timeouts.rerender", 5000)

================================================================================
"""

__version__ = "1.0.0"

__all__ = [
    "common",
    "report_tools",
]
