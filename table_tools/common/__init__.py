"""
Shared configuration and logging utilities.

Usage:
    from table_tools.common import get_config, init_logger

    init_logger()
    level = get_config("logging.level", "INFO")
"""

from .global_config import (
    ConfigurationError,
    get_config,
    init_logger,
    reload_config,
    set_config,
)

__all__ = [
    "ConfigurationError",
    "get_config",
    "init_logger",
    "reload_config",
    "set_config",
]
