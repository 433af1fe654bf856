# ================================================================================
# Eventual-Consistency Poller
# ================================================================================
#
# Polling utilities for asserting on a UI that re-renders asynchronously.
# An observation function is re-invoked (never cached) until a predicate
# holds or the timeout elapses.
#
# Key Features:
#   - Short bounded backoff (100ms growing to 500ms)
#   - Named wait scenarios with per-scenario timeouts
#   - Sync or async observation functions
#   - Timeouts surface as AssertionError with a diagnostic message
#   - Allure integration for step reporting
#
# Usage:
#   rows = await poll_until(reader.row_count, lambda n: n > 0, scenario="baseline",
#                           message="table to render at least one row")
#
# ================================================================================

import asyncio
import inspect
import time
from dataclasses import dataclass, replace
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar, Union

import allure
from loguru import logger


T = TypeVar("T")

Observation = Callable[[], Union[T, Awaitable[T]]]


@dataclass(frozen=True)
class PollConfig:
    """
    Configuration for poll operations.

    Attributes:
        interval: Initial wait between observations in seconds
        multiplier: Growth factor applied after each failed observation
        max_interval: Upper bound for the wait between observations
        timeout: Total timeout in seconds
    """
    interval: float = 0.1
    multiplier: float = 1.5
    max_interval: float = 0.5
    timeout: float = 5.0


# Pre-configured poll strategies for common scenarios
WAIT_SCENARIOS: Dict[str, PollConfig] = {
    "default": PollConfig(),
    # Control reacts to a click (sort, toggle, expand)
    "rerender": PollConfig(timeout=5.0),
    # Search round-trip, may debounce before filtering
    "search": PollConfig(interval=0.2, timeout=10.0),
    # First render of the table after navigation
    "baseline": PollConfig(interval=0.25, timeout=15.0),
}


class PollTimeoutError(AssertionError):
    """Raised when a polled predicate never holds within its bound."""

    def __init__(self, message: str, last_value: Any = None, last_error: Optional[str] = None):
        super().__init__(message)
        self.last_value = last_value
        self.last_error = last_error


def get_poll_config(scenario: str, timeout_ms: Optional[int] = None) -> PollConfig:
    """
    Get poll configuration for a scenario.

    Args:
        scenario: Scenario name (e.g., "rerender", "search")
        timeout_ms: Optional override of the scenario timeout in milliseconds

    Returns:
        PollConfig for the scenario, or default if not found
    """
    config = WAIT_SCENARIOS.get(scenario, WAIT_SCENARIOS["default"])
    if timeout_ms is not None:
        config = replace(config, timeout=timeout_ms / 1000.0)
    return config


def next_interval(current: float, config: PollConfig) -> float:
    return min(current * config.multiplier, config.max_interval)


async def _observe(observe: Observation) -> Any:
    result = observe()
    if inspect.isawaitable(result):
        result = await result
    return result


async def poll_until(
    observe: Observation,
    predicate: Callable[[Any], bool],
    *,
    timeout: Optional[int] = None,
    scenario: str = "default",
    message: str = "condition to hold",
    config: Optional[PollConfig] = None,
) -> Any:
    """
    Re-observe the UI until `predicate(value)` is true.

    Args:
        observe: Zero-argument function (sync or async) reading fresh UI state
        predicate: Target predicate over the observed value
        timeout: Timeout in milliseconds (overrides the scenario timeout)
        scenario: Predefined scenario name for configuration
        message: What is expected, used in logs and the failure message
        config: Optional custom PollConfig (overrides scenario and timeout)

    Returns:
        The first observed value satisfying the predicate

    Raises:
        PollTimeoutError: If the predicate never held within the timeout
    """
    config = config or get_poll_config(scenario, timeout)

    with allure.step(f"Poll until {message}"):
        start = time.monotonic()
        interval = config.interval
        attempt = 0
        last_value: Any = None
        last_error: Optional[str] = None

        while True:
            attempt += 1
            try:
                value = await _observe(observe)
            except PollTimeoutError:
                raise
            except Exception as e:
                # Elements can detach mid re-render; the next read is fresh.
                last_error = f"{type(e).__name__}: {e}"
                logger.debug(f"Attempt {attempt}: observation failed: {last_error}")
            else:
                last_value = value
                last_error = None
                if predicate(value):
                    logger.debug(
                        f"Poll satisfied after {attempt} attempts "
                        f"({time.monotonic() - start:.2f}s): {message}"
                    )
                    return value
                logger.debug(f"Attempt {attempt}: not yet {message}. Observed: {value!r}")

            elapsed = time.monotonic() - start
            if elapsed >= config.timeout:
                error_msg = (
                    f"Timed out after {elapsed:.1f}s ({attempt} attempts) waiting for {message}. "
                    f"Last observed: {last_value!r}"
                )
                if last_error:
                    error_msg += f", last error: {last_error}"
                logger.error(error_msg)
                raise PollTimeoutError(error_msg, last_value=last_value, last_error=last_error)

            await asyncio.sleep(min(interval, max(config.timeout - elapsed, 0)))
            interval = next_interval(interval, config)


__all__ = [
    "PollConfig",
    "PollTimeoutError",
    "WAIT_SCENARIOS",
    "get_poll_config",
    "poll_until",
]
