"""
Data-table test suites package.

This repository intentionally keeps `tablesuites` importable to support:
  - IDE navigation
  - programmatic runners (e.g., `run_tests.py`)
  - CI/CD module imports
"""
