"""
================================================================================
Root Pytest Configuration
================================================================================

This module provides the root pytest configuration for the table suites.
It registers common markers and tags tests by directory.

================================================================================
"""

import os

import pytest


def pytest_configure(config):
    """Configure pytest with project-wide custom markers."""

    # Priority markers
    config.addinivalue_line(
        "markers", "P0: Critical priority tests - baseline must hold"
    )
    config.addinivalue_line(
        "markers", "P1: High priority tests - core table features"
    )
    config.addinivalue_line(
        "markers", "P2: Medium priority tests - optional table features"
    )
    config.addinivalue_line(
        "markers", "P3: Low priority tests - extensive validation"
    )

    # Test type markers
    config.addinivalue_line(
        "markers", "smoke: Quick verification tests"
    )
    config.addinivalue_line(
        "markers", "regression: Full regression test suite"
    )
    config.addinivalue_line(
        "markers", "e2e: Browser tests against a hosted table target"
    )
    config.addinivalue_line(
        "markers", "unit: Toolkit tests without a browser"
    )

    # Domain markers
    config.addinivalue_line(
        "markers", "ui: UI-specific tests"
    )

    # Feature markers
    config.addinivalue_line(
        "markers", "search: Global search filtering"
    )
    config.addinivalue_line(
        "markers", "filters: Header filter inputs"
    )
    config.addinivalue_line(
        "markers", "sorting: Column sort toggling"
    )
    config.addinivalue_line(
        "markers", "detail_panel: Row expand/collapse"
    )


def pytest_collection_modifyitems(config, items):
    """
    Modify collected test items.

    Tests under ui_testing are browser tests; tests under unit are not.
    """
    for item in items:
        path = str(item.fspath)
        if "ui_testing" in path:
            item.add_marker(pytest.mark.ui)
            item.add_marker(pytest.mark.e2e)
        if f"{os.sep}unit{os.sep}" in path:
            item.add_marker(pytest.mark.unit)


def pytest_report_header(config):
    """Add custom header to pytest output."""
    return [
        "",
        "=" * 60,
        "Data Table E2E Suites",
        "=" * 60,
        "",
    ]
